"""
Domain: error taxonomy.

Only infrastructure and configuration faults are exceptions. Invalid input and
rate-limit hits are ordinary outcomes and are modelled as result values by the
services (see services.validation_service and services.rate_limit_service).
"""

from __future__ import annotations


class LeadEngineError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(LeadEngineError):
    """
    Programmer/ops fault: unknown bracket key, malformed calculator config,
    missing environment configuration.

    Always logged with full detail; never shown verbatim to the end user.
    """


class TransientInfrastructureError(LeadEngineError):
    """Persistence or network failure (timeouts included). Safe to retry."""


class DuplicateError(LeadEngineError):
    """A lead with this email already exists for the form type."""

    def __init__(self, form_type: str, email: str) -> None:
        super().__init__(f"Duplicate {form_type} submission")
        self.form_type = form_type
        self.email = email


class SessionNotFoundError(LeadEngineError):
    """The quiz session token does not exist in the store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Unknown quiz session: {session_id}")
        self.session_id = session_id


__all__ = [
    "LeadEngineError",
    "ConfigurationError",
    "TransientInfrastructureError",
    "DuplicateError",
    "SessionNotFoundError",
]
