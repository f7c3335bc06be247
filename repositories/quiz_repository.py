"""
Quiz session repository (persistence).

Sessions are keyed two ways: the client-generated `session_id` token and the
database primary key `id`. Answers and leads link to `id`, so lookups by token
are the usual entry point.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from supabase import Client

from domain.errors import TransientInfrastructureError
from domain.quiz import QuizAnswer, QuizSession
from domain.time import to_iso_utc
from repositories.client import execute_query

_SESSIONS_TABLE: str = "quiz_sessions"
_ANSWERS_TABLE: str = "quiz_answers"

_OPTIONAL_SESSION_FIELDS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "referrer",
    "device_type",
    "browser",
)


def _session_to_row(session: QuizSession) -> dict[str, Any]:
    row: dict[str, Any] = {
        "session_id": session.session_id,
        "created_at": to_iso_utc(session.created_at),
    }
    for name in _OPTIONAL_SESSION_FIELDS:
        value = getattr(session, name)
        if value is not None:
            row[name] = value
    return row


def _answer_to_row(answer: QuizAnswer) -> dict[str, Any]:
    return {
        "session_id": answer.session_pk,
        "step": answer.step,
        "question_key": answer.question_key,
        "answer_value": answer.answer_value,
    }


class QuizRepository:
    """Reads and writes quiz_sessions and quiz_answers."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def insert_session(self, session: QuizSession) -> str:
        """
        Insert a session and return its primary key.

        Raises:
            TransientInfrastructureError: on any gateway failure (including a
            reused session token, which the unique index rejects).
        """

        query = self._client.table(_SESSIONS_TABLE).insert(_session_to_row(session))
        rows = execute_query(query, "create quiz session")
        if not rows or "id" not in rows[0]:
            raise TransientInfrastructureError("Quiz session insert returned no id")
        return str(rows[0]["id"])

    def get_session_pk(self, session_id: str) -> Optional[str]:
        """Primary key for a session token, or None if it does not exist."""

        query = (
            self._client.table(_SESSIONS_TABLE)
            .select("id")
            .eq("session_id", session_id)
            .limit(1)
        )
        rows = execute_query(query, "fetch quiz session")
        if not rows:
            return None
        return str(rows[0]["id"])

    def insert_answers(self, answers: Iterable[QuizAnswer]) -> None:
        """Append answer rows in a single request; empty input is a no-op."""

        payloads = [_answer_to_row(answer) for answer in answers]
        if not payloads:
            return
        execute_query(
            self._client.table(_ANSWERS_TABLE).insert(payloads),
            f"insert {len(payloads)} quiz answers",
        )


__all__ = ["QuizRepository"]
