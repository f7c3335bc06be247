"""
Quiz session service.

Creates the per-visitor quiz session and appends answers as the visitor moves
through the questions. The final lead (services.submission_service) references
the session created here.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union
from uuid import uuid4

from domain.errors import SessionNotFoundError
from domain.quiz import (
    QuizAnswer,
    QuizSession,
    browser_from_user_agent,
    device_type_from_user_agent,
)
from domain.time import Clock, utc_now
from repositories.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)


def normalize_answer_value(value: Union[str, Sequence[str]]) -> str:
    """
    Canonical stored form of an answer.

    Single answers are stored as-is (trimmed). Multi-select answers become a
    sorted, de-duplicated, comma-joined string so the same selection always
    stores identically whatever order it was clicked in.
    """
    if isinstance(value, str):
        return value.strip()
    return ",".join(sorted({item.strip() for item in value if item and item.strip()}))


class QuizSessionService:
    def __init__(self, repository: QuizRepository, clock: Clock = utc_now) -> None:
        self._repository = repository
        self._clock = clock

    def start_session(
        self,
        session_id: Optional[str] = None,
        *,
        utm_source: Optional[str] = None,
        utm_medium: Optional[str] = None,
        utm_campaign: Optional[str] = None,
        utm_content: Optional[str] = None,
        referrer: Optional[str] = None,
        device_type: Optional[str] = None,
        browser: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> QuizSession:
        """
        Create and persist a quiz session.

        A missing session_id is generated (uuid4). Device type and browser fall
        back to what the User-Agent says when the client does not send them.

        Raises:
            TransientInfrastructureError: if the insert fails
        """
        session = QuizSession(
            session_id=session_id or str(uuid4()),
            created_at=self._clock(),
            utm_source=utm_source or None,
            utm_medium=utm_medium or None,
            utm_campaign=utm_campaign or None,
            utm_content=utm_content or None,
            referrer=referrer or None,
            device_type=device_type or device_type_from_user_agent(user_agent),
            browser=browser or browser_from_user_agent(user_agent),
        )
        self._repository.insert_session(session)
        logger.info(
            "Quiz session started: session_id=%s utm_source=%s device=%s",
            session.session_id,
            session.utm_source,
            session.device_type,
        )
        return session

    def record_answer(
        self,
        session_id: str,
        step: int,
        question_key: str,
        answer_value: Union[str, Sequence[str]],
    ) -> QuizAnswer:
        """
        Append one answer to a session's log.

        Raises:
            SessionNotFoundError: if the session token is unknown
            ValueError: if step < 1 or question_key is empty
            TransientInfrastructureError: if the lookup or insert fails
        """
        session_pk = self._repository.get_session_pk(session_id)
        if session_pk is None:
            raise SessionNotFoundError(session_id)

        answer = QuizAnswer(
            session_pk=session_pk,
            step=step,
            question_key=question_key,
            answer_value=normalize_answer_value(answer_value),
        )
        self._repository.insert_answers([answer])
        return answer


__all__ = ["QuizSessionService", "normalize_answer_value"]
