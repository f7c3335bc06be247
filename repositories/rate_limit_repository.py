"""
Rate-limit repository (persistence).

Reads and appends rows of `form_rate_limits`. The read and the later write are
separate requests; see services.rate_limit_service for what that implies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List

from supabase import Client

from domain.rate_limit import RateLimitRecord
from domain.submission import FormType
from domain.time import parse_utc_datetime, to_iso_utc
from repositories.client import execute_query

_RATE_LIMITS_TABLE: str = "form_rate_limits"


def _record_to_row(record: RateLimitRecord) -> dict[str, Any]:
    return {
        "email": record.email,
        "form_type": record.form_type.value,
        "ip_address": record.ip_address,
        "submitted_at": to_iso_utc(record.submitted_at),
    }


class RateLimitRepository:
    def __init__(self, client: Client) -> None:
        self._client = client

    def list_submission_times_since(
        self, email: str, form_type: FormType, since: datetime
    ) -> List[datetime]:
        """
        Timestamps of submissions for (email, form_type) at or after `since`,
        newest first.
        """

        query = (
            self._client.table(_RATE_LIMITS_TABLE)
            .select("submitted_at")
            .eq("email", email)
            .eq("form_type", form_type.value)
            .gte("submitted_at", to_iso_utc(since))
            .order("submitted_at", desc=True)
        )
        rows = execute_query(query, "check rate limit")
        return [parse_utc_datetime(row["submitted_at"]) for row in rows]

    def insert(self, record: RateLimitRecord) -> None:
        execute_query(
            self._client.table(_RATE_LIMITS_TABLE).insert(_record_to_row(record)),
            "record rate limit",
        )


__all__ = ["RateLimitRepository"]
