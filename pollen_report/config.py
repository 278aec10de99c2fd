"""Configuration loading and validation.

Usage:
    config = load("pollen-config.yaml")      # raises ConfigError on bad config
    plz = config.resolve_plz("praxis")       # returns "1010"
    generate_template("pollen-config.yaml")  # writes example file to disk
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_MODEL = "gemini-3-pro-preview"
DEFAULT_TIMEOUT = 120

_PLZ_RE = re.compile(r"^\d{4}$")

INVALID_PLZ_MESSAGE = (
    "Bitte geben Sie eine gültige 4-stellige österreichische Postleitzahl ein."
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class InvalidPostalCodeError(ConfigError):
    """Raised when a location is neither a known alias nor a 4-digit PLZ."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    api_key: str
    model: str = DEFAULT_MODEL
    timeout: int = DEFAULT_TIMEOUT
    locations: dict[str, str] = field(default_factory=dict)

    def resolve_plz(self, name: str) -> str:
        """Return the postal code for a configured alias or a raw PLZ.

        Accepts either an alias from the ``locations`` mapping (e.g. "praxis")
        or a postal code passed directly (e.g. "1010").
        """
        name = str(name).strip()
        plz = str(self.locations.get(name, name)).strip()
        if not _PLZ_RE.match(plz):
            raise InvalidPostalCodeError(INVALID_PLZ_MESSAGE)
        return plz


def is_valid_plz(value: str) -> bool:
    return bool(_PLZ_RE.match(str(value)))


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "pollen-config.yaml") -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables GEMINI_API_KEY (or API_KEY) and GEMINI_MODEL
    override file values. A missing file is accepted when the API key comes
    from the environment.

    Raises:
        ConfigError: if the file is malformed or required fields are absent.
    """
    path = Path(config_path)
    raw: dict = {}

    if path.exists():
        try:
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")
    elif not _env_api_key():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m pollen_report init` to generate a template "
            "or set the GEMINI_API_KEY environment variable."
        )

    gemini = raw.get("gemini") or {}
    if not isinstance(gemini, dict):
        raise ConfigError("'gemini' must be a mapping with api_key, model and timeout.")
    api_key = _env_api_key() or gemini.get("api_key", "")
    model = os.environ.get("GEMINI_MODEL") or gemini.get("model") or DEFAULT_MODEL
    locations = raw.get("locations") or {}

    if not isinstance(locations, dict):
        raise ConfigError("'locations' must be a mapping of alias: postal code.")

    config = Config(
        api_key=str(api_key).strip(),
        model=str(model).strip(),
        timeout=_parse_timeout(gemini.get("timeout", DEFAULT_TIMEOUT)),
        locations={str(k): str(v) for k, v in locations.items()},
    )
    _validate(config)
    return config


def _env_api_key() -> str:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or ""


def _parse_timeout(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'gemini.timeout' must be a number of seconds, got {value!r}") from exc


def _validate(config: Config) -> None:
    """Raise ConfigError if required fields are missing."""
    errors: list[str] = []

    if not config.api_key:
        errors.append(
            "  - 'gemini.api_key' is missing (or set the GEMINI_API_KEY environment variable)"
        )
    if not config.model:
        errors.append("  - 'gemini.model' is empty")
    if config.timeout <= 0:
        errors.append("  - 'gemini.timeout' must be positive")
    bad = [alias for alias, plz in config.locations.items() if not is_valid_plz(plz)]
    if bad:
        errors.append(
            "  - 'locations' entries must map to 4-digit postal codes: " + ", ".join(bad)
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
gemini:
  api_key: "AIza_xxxxxxxxxxxx"    # Create at: https://aistudio.google.com/app/apikey
  model: "gemini-3-pro-preview"
  timeout: 120                    # seconds; live search can take a while

locations:
  # Human-readable alias: Austrian postal code
  praxis: "1010"
  graz:   "8010"
"""


def generate_template(output_path: str = "pollen-config.yaml") -> None:
    """Write a template pollen-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
