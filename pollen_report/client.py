"""Gemini API client.

Usage:
    client   = GeminiClient(api_key="AIza_xxx", model="gemini-3-pro-preview")
    response = client.generate(SYSTEM_INSTRUCTION, "Postleitzahl: 1010 ...")
    response.text                 # raw model output
    response.grounding_sources    # [{"uri": ..., "title": ...}, ...]
"""

import warnings
from dataclasses import dataclass, field
from typing import Any

import requests

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

EMPTY_RESPONSE_MESSAGE = "Keine Antwort vom Modell erhalten."

# finishReason values that mean the text was cut off or withheld
_INCOMPLETE_REASONS = ("MAX_TOKENS", "SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class GeminiClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(GeminiClientError):
    """Raised on HTTP 401/403 or an invalid API key."""


class NotFoundError(GeminiClientError):
    """Raised on HTTP 404 — usually an unknown model name."""


class RateLimitError(GeminiClientError):
    """Raised on HTTP 429 — quota exhausted."""


class NetworkError(GeminiClientError):
    """Raised on connection timeout, unreachable server or a broken transfer."""


class EmptyResponseError(GeminiClientError):
    """Raised when the model answered without any text."""


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

@dataclass
class ModelResponse:
    text: str
    model: str
    grounding_sources: list[dict] = field(default_factory=list)
    finish_reason: str | None = None


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class GeminiClient:
    """Thin wrapper around the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: int = 120,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"x-goog-api-key": api_key})

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def generate(
        self,
        system_instruction: str,
        prompt: str,
        *,
        search: bool = True,
        json_response: bool = True,
    ) -> ModelResponse:
        """Send one prompt and return the model's text plus grounding sources.

        With *search* enabled the Google Search tool is attached so the model
        can ground its answer in live web results.

        Raises:
            AuthenticationError: HTTP 401/403 or invalid key
            NotFoundError:       HTTP 404
            RateLimitError:      HTTP 429
            GeminiClientError:   Any other non-2xx response or a blocked prompt
            NetworkError:        Timeout, connection or other transport failure
            EmptyResponseError:  The response carried no text
        """
        body: dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if search:
            body["tools"] = [{"googleSearch": {}}]
        if json_response:
            body["generationConfig"] = {"responseMimeType": "application/json"}

        data = self._request(f"/v1beta/models/{self.model}:generateContent", body)
        return self._parse(data)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, endpoint: str, body: dict[str, Any]) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.post(url, json=body, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach the Gemini API at '{self.base_url}'"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Request to '{url}' failed: {exc!r}") from exc

        if response.status_code in (401, 403) or _is_invalid_key(response):
            raise AuthenticationError(
                "Authentication failed — check that your API key is valid."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Model '{self.model}' not found at {url}")
        if response.status_code == 429:
            raise RateLimitError("Quota exhausted — try again later.")
        if not response.ok:
            raise GeminiClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GeminiClientError(f"Response from {url} is not JSON") from exc
        if not isinstance(data, dict):
            raise GeminiClientError(f"Response from {url} is not a JSON object")
        return data

    def _parse(self, data: dict) -> ModelResponse:
        feedback = data.get("promptFeedback") or {}
        if feedback.get("blockReason"):
            raise GeminiClientError(f"Prompt blocked by the model: {feedback['blockReason']}")

        candidates = data.get("candidates") or []
        if not candidates:
            raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text.strip():
            raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)

        finish_reason = candidate.get("finishReason")
        if finish_reason in _INCOMPLETE_REASONS:
            warnings.warn(
                f"Model stopped with finishReason={finish_reason}; the output may be incomplete.",
                UserWarning,
                stacklevel=3,
            )

        return ModelResponse(
            text=text,
            model=data.get("modelVersion") or self.model,
            grounding_sources=_grounding_sources(candidate),
            finish_reason=finish_reason,
        )


def _is_invalid_key(response: requests.Response) -> bool:
    # Gemini answers a bad key with 400 + reason API_KEY_INVALID
    return response.status_code == 400 and "API_KEY_INVALID" in response.text


def _grounding_sources(candidate: dict) -> list[dict]:
    """Return ``[{uri, title}]`` from the candidate's grounding metadata, unique by URI."""
    metadata = candidate.get("groundingMetadata") or {}
    sources: list[dict] = []
    seen: set[str] = set()
    for chunk in metadata.get("groundingChunks") or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict) or not web.get("uri"):
            continue
        if web["uri"] in seen:
            continue
        seen.add(web["uri"])
        sources.append({"uri": web["uri"], "title": web.get("title") or ""})
    return sources
