"""
Application configuration.

Values come from the environment, with a `.env` file in the project root
loaded first. Nothing here connects to anything: Supabase credentials are
only required when the client is actually built (see repositories/client.py).

Environment variables:
- SUPABASE_URL: Supabase project URL
- SUPABASE_SERVICE_ROLE_KEY: server-side API key (SUPABASE_KEY is accepted too)
- SUPABASE_TIMEOUT_SECONDS: bound on every database call (default 10)
- RATE_LIMIT_CONTACT_SECONDS / RATE_LIMIT_LEAD_SECONDS / RATE_LIMIT_QUIZ_SECONDS:
  per-form resubmission windows (defaults 300 / 120 / 180)
- BRACKET_CONFIG_PATH: optional JSON replacing the packaged calculator table
- CORS_ALLOW_ORIGIN: value of Access-Control-Allow-Origin (default "*")
- LOG_LEVEL: root log level (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

from domain.errors import ConfigurationError
from domain.submission import FormType

ENV_PATH = Path(__file__).parent.parent / ".env"

DEFAULT_RATE_LIMIT_WINDOWS: Mapping[FormType, int] = MappingProxyType(
    {
        FormType.CONTACT: 300,
        FormType.LEAD_MAGNET: 120,
        FormType.QUIZ: 180,
    }
)

_WINDOW_ENV_VARS = {
    FormType.CONTACT: "RATE_LIMIT_CONTACT_SECONDS",
    FormType.LEAD_MAGNET: "RATE_LIMIT_LEAD_SECONDS",
    FormType.QUIZ: "RATE_LIMIT_QUIZ_SECONDS",
}


@dataclass(frozen=True, slots=True)
class Settings:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    request_timeout_seconds: float = 10.0
    rate_limit_windows: Mapping[FormType, int] = field(
        default_factory=lambda: DEFAULT_RATE_LIMIT_WINDOWS
    )
    bracket_config_path: Optional[Path] = None
    cors_allow_origin: str = "*"
    log_level: str = "INFO"

    def require_supabase_credentials(self) -> tuple[str, str]:
        """Return (url, key) or raise if either is unset."""
        if not self.supabase_url:
            raise ConfigurationError(
                "Missing environment variable: SUPABASE_URL. "
                "Set SUPABASE_URL to your Supabase project URL."
            )
        if not self.supabase_key:
            raise ConfigurationError(
                "Missing environment variable: SUPABASE_SERVICE_ROLE_KEY. "
                "Set it to your Supabase service-role API key."
            )
        return self.supabase_url, self.supabase_key


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from `environ` (defaults to os.environ after loading .env).

    Raises:
        ConfigurationError: if a numeric variable is malformed or non-positive.
    """
    if environ is None:
        load_dotenv(dotenv_path=ENV_PATH)
        environ = os.environ

    windows = {
        form_type: _positive_int(environ, var, DEFAULT_RATE_LIMIT_WINDOWS[form_type])
        for form_type, var in _WINDOW_ENV_VARS.items()
    }

    config_path = environ.get("BRACKET_CONFIG_PATH")

    return Settings(
        supabase_url=environ.get("SUPABASE_URL") or None,
        supabase_key=(
            environ.get("SUPABASE_SERVICE_ROLE_KEY") or environ.get("SUPABASE_KEY") or None
        ),
        request_timeout_seconds=_positive_float(environ, "SUPABASE_TIMEOUT_SECONDS", 10.0),
        rate_limit_windows=MappingProxyType(windows),
        bracket_config_path=Path(config_path) if config_path else None,
        cors_allow_origin=environ.get("CORS_ALLOW_ORIGIN") or "*",
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def _positive_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


__all__ = ["Settings", "load_settings", "DEFAULT_RATE_LIMIT_WINDOWS"]
