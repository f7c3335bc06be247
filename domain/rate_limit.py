"""
Domain: rate-limit records.

A RateLimitRecord notes that `email` submitted `form_type` at `submitted_at`.
Records are append-only and only ever read back as a "submitted recently?"
guard; pruning stale rows is left to an external job.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .submission import FormType
from .time import require_utc_timestamp

UNKNOWN_IP = "unknown"


@dataclass(frozen=True, slots=True)
class RateLimitRecord:
    email: str
    form_type: FormType
    ip_address: str
    submitted_at: datetime

    def __post_init__(self) -> None:
        require_utc_timestamp("submitted_at", self.submitted_at)


__all__ = ["RateLimitRecord", "UNKNOWN_IP"]
