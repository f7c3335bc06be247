"""
Rate limiting service for form submissions.

Sliding window keyed by (email, form type): a submission is rejected if the
same email submitted the same form within the last `window` seconds. Windows
are configuration (see api/config.py), not business law.

Concurrency contract:
- check() only answers the question; it does not reserve anything.
- The caller writes the record with record() *after* the protected write
  succeeds, and that write is best effort.
- Check-then-record is therefore not atomic. Two concurrent submissions from
  the same email inside the window can both pass. That is an accepted
  limitation of a best-effort throttle; the unique email index on the lead
  tables is the backstop against duplicate leads. A hard guarantee would need
  one atomic insert-if-absent-in-window statement in the database, not
  application-level locking.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from domain.errors import ConfigurationError
from domain.rate_limit import RateLimitRecord
from domain.submission import FormType
from domain.time import Clock, utc_now
from repositories.rate_limit_repository import RateLimitRepository


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    window_seconds: int
    retry_after_seconds: int = 0

    @property
    def message(self) -> Optional[str]:
        """Human-readable wait hint for rejected submissions."""
        if self.allowed:
            return None
        return wait_message(self.window_seconds)


def wait_message(window_seconds: int) -> str:
    """
    Wait hint derived from the configured window.

    Example:
        wait_message(300)  # 'Too many submissions. Please wait 5 minutes before submitting again.'
    """
    if window_seconds % 60 == 0:
        minutes = window_seconds // 60
        span = f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    else:
        span = f"{window_seconds} seconds"
    return f"Too many submissions. Please wait {span} before submitting again."


class RateLimiter:
    """Per-form sliding-window throttle backed by form_rate_limits."""

    def __init__(
        self,
        repository: RateLimitRepository,
        windows: Mapping[FormType, int],
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._windows = dict(windows)
        self._clock = clock

    def window_for(self, form_type: FormType) -> int:
        try:
            return self._windows[form_type]
        except KeyError as e:
            raise ConfigurationError(
                f"No rate-limit window configured for form type {form_type.value!r}"
            ) from e

    def check(
        self,
        email: str,
        form_type: FormType,
        window_seconds: Optional[int] = None,
    ) -> RateLimitDecision:
        """
        Decide whether `email` may submit `form_type` now.

        Args:
            email: Normalised submitter email
            form_type: Form being submitted
            window_seconds: Override of the configured window for this call

        Returns:
            RateLimitDecision; when rejected, retry_after_seconds is the time
            until the most recent prior submission leaves the window.

        Raises:
            TransientInfrastructureError: if the lookup fails
        """
        window = window_seconds if window_seconds is not None else self.window_for(form_type)
        now = self._clock()
        since = now - timedelta(seconds=window)

        recent = self._repository.list_submission_times_since(email, form_type, since)
        if not recent:
            return RateLimitDecision(allowed=True, window_seconds=window)

        latest = max(recent)
        elapsed = (now - latest).total_seconds()
        # A record stamped ahead of our clock (skew) must not push past the window.
        retry_after = min(max(math.ceil(window - elapsed), 1), window)
        return RateLimitDecision(
            allowed=False, window_seconds=window, retry_after_seconds=retry_after
        )

    def record(self, email: str, form_type: FormType, ip_address: str) -> RateLimitRecord:
        """
        Append a rate-limit record stamped with the current time.

        Raises:
            TransientInfrastructureError: if the insert fails
        """
        record = RateLimitRecord(
            email=email,
            form_type=form_type,
            ip_address=ip_address,
            submitted_at=self._clock(),
        )
        self._repository.insert(record)
        return record


__all__ = ["RateLimitDecision", "RateLimiter", "wait_message"]
