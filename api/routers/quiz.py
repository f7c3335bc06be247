"""
Quiz Session API Endpoints.

The quiz page opens a session when the visitor starts, then logs each answer
as it is given. The final submission (POST /submit-quiz) references the
session token returned here.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from api.dependencies import get_quiz_session_service
from api.models import (
    QuizAnswerRequest,
    QuizAnswerResponse,
    QuizSessionRequest,
    QuizSessionResponse,
)
from domain.errors import SessionNotFoundError
from services.quiz_session_service import QuizSessionService

router = APIRouter()


@router.post(
    "/quiz/sessions",
    response_model=QuizSessionResponse,
    status_code=201,
    summary="Start Quiz Session",
    description="Create a quiz session with attribution (UTM, referrer) and device details.",
)
def start_quiz_session(
    request: QuizSessionRequest,
    user_agent: Optional[str] = Header(None),
    service: QuizSessionService = Depends(get_quiz_session_service),
):
    """
    Start a quiz session.

    device_type and browser are derived from the User-Agent header when the
    client leaves them out. A session_id is generated when none is supplied.
    """
    session = service.start_session(
        request.session_id,
        utm_source=request.utm_source,
        utm_medium=request.utm_medium,
        utm_campaign=request.utm_campaign,
        utm_content=request.utm_content,
        referrer=request.referrer,
        device_type=request.device_type,
        browser=request.browser,
        user_agent=user_agent,
    )
    return QuizSessionResponse(
        session_id=session.session_id,
        device_type=session.device_type,
        browser=session.browser,
        created_at=session.created_at,
    )


@router.post(
    "/quiz/sessions/{session_id}/answers",
    response_model=QuizAnswerResponse,
    status_code=201,
    summary="Record Quiz Answer",
)
def record_quiz_answer(
    session_id: str,
    request: QuizAnswerRequest,
    service: QuizSessionService = Depends(get_quiz_session_service),
):
    try:
        answer = service.record_answer(
            session_id,
            step=request.step,
            question_key=request.question_key,
            answer_value=request.answer_value,
        )
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz session not found")

    return QuizAnswerResponse(
        question_key=answer.question_key,
        answer_value=answer.answer_value,
    )
