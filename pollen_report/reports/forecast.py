"""Forecast report generator.

Functions:
    get_forecast(client, plz)      -> dict   one model call, normalized report
    load_forecast(path)            -> dict   saved report or bare view-model
    clean_json_response(text)      -> str
    parse_view_model(text)         -> dict
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path

from pollen_report.client import GeminiClient
from pollen_report.models import ViewModel, is_blank, safe_text
from pollen_report.prompts import SYSTEM_INSTRUCTION, build_user_prompt

GENERIC_ERROR_MESSAGE = (
    "Die Daten konnten nicht geladen werden. Bitte versuchen Sie es in Kürze erneut."
)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?")
_FENCE_CLOSE_RE = re.compile(r"```$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ForecastError(Exception):
    """Base exception for problems with the model's answer."""


class ResponseParseError(ForecastError):
    """Raised when the model output is not a JSON object."""


class LocationError(ForecastError):
    """Raised when the model answered with an error document (e.g. unknown PLZ)."""


class InvalidResponseError(ForecastError):
    """Raised when the JSON object is not a view-model."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_forecast(client: GeminiClient, plz: str) -> dict:
    """Ask the model for the pollen situation at *plz* and return the report."""
    response = client.generate(SYSTEM_INSTRUCTION, build_user_prompt(plz))
    raw = parse_view_model(response.text)
    _check_view_model(raw)

    if response.grounding_sources:
        raw = {**raw, "grounding_sources": response.grounding_sources}

    return _build_report(plz=plz, model=response.model, view_model=raw)


def load_forecast(path: str) -> dict:
    """Read a report written by ``forecast --format json`` for offline rendering.

    A bare view-model document (as the model returns it) is wrapped into a
    report envelope.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ForecastError(f"Cannot read '{path}': {exc}") from exc

    raw = parse_view_model(text)
    if "view_model" in raw:
        _check_view_model(_as_dict(raw["view_model"]))
        return {**raw, "view_model": ViewModel.from_dict(raw["view_model"]).to_dict()}

    _check_view_model(raw)
    return _build_report(plz=_plz_from(raw), model=None, view_model=raw)


def clean_json_response(text: str) -> str:
    """Strip surrounding whitespace and a Markdown code fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    return cleaned.strip()


def parse_view_model(text: str) -> dict:
    """Parse model output into a dict. Raises ResponseParseError."""
    try:
        data = json.loads(clean_json_response(text or ""))
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Model output must be a JSON object, got {type(data).__name__}"
        )
    return data


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _check_view_model(raw: dict) -> None:
    error = raw.get("error")
    if error:
        message = safe_text(error.get("message")) if isinstance(error, dict) else safe_text(error)
        raise LocationError(message or "Standort-Fehler")
    if is_blank(raw.get("header")):
        raise InvalidResponseError("Ungültiges Datenformat empfangen.")


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _plz_from(raw: dict) -> str | None:
    """Best effort: the PLZ in parentheses in the header subtitle."""
    subtitle = safe_text(_as_dict(raw.get("header")).get("subtitle"))
    match = re.search(r"\((\d{4})\)", subtitle)
    return match.group(1) if match else None


def _build_report(plz: str | None, model: str | None, view_model: dict) -> dict:
    return {
        "report_type":  "pollen_forecast",
        "plz":          plz,
        "model":        model,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "view_model":   ViewModel.from_dict(view_model).to_dict(),
    }
