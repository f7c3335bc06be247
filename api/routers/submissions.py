"""
Form Submission API Endpoints.

One endpoint per site form. Each reads the raw JSON body and hands it to the
submission pipeline, which reports every validation violation at once, so
request bodies are not declared as pydantic models here.

Status codes:
    200  accepted
    400  invalid (body lists every violation)
    409  duplicate email for this form
    429  rate limited (Retry-After header set)
    500  unexpected failure (generic message only)
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.dependencies import get_submission_pipeline
from api.models import (
    ErrorResponse,
    QuizSubmissionResponse,
    SubmissionResponse,
    ValidationErrorResponse,
)
from domain.rate_limit import UNKNOWN_IP
from services.submission_service import (
    SubmissionOutcome,
    SubmissionPipeline,
    SubmissionResult,
)

router = APIRouter()

STATUS_BY_OUTCOME = {
    SubmissionOutcome.ACCEPTED: 200,
    SubmissionOutcome.INVALID: 400,
    SubmissionOutcome.DUPLICATE: 409,
    SubmissionOutcome.RATE_LIMITED: 429,
    SubmissionOutcome.INTERNAL_ERROR: 500,
}

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse, "description": "Invalid submission"},
    409: {"model": ErrorResponse, "description": "Email already submitted"},
    429: {"model": ErrorResponse, "description": "Rate limited"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}

# Stand-in for a body that is not JSON at all; fails validation as "body".
_UNPARSEABLE = object()


async def _read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return _UNPARSEABLE


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IP


def to_response(result: SubmissionResult) -> JSONResponse:
    """Map a pipeline result onto the HTTP status and body the forms expect."""
    status_code = STATUS_BY_OUTCOME[result.outcome]
    headers = {}

    if result.outcome is SubmissionOutcome.ACCEPTED:
        body: dict = {"success": True}
        if result.tier is not None:
            body["tier"] = result.tier.value
            body["annual_savings"] = result.annual_savings
    elif result.outcome is SubmissionOutcome.INVALID:
        body = {
            "error": result.message,
            "violations": [
                {"field": violation.field, "message": violation.message}
                for violation in result.violations
            ],
        }
    else:
        body = {"error": result.message}
        if result.outcome is SubmissionOutcome.RATE_LIMITED:
            headers["Retry-After"] = str(result.retry_after_seconds)

    return JSONResponse(content=body, status_code=status_code, headers=headers)


@router.post(
    "/submit-contact",
    response_model=SubmissionResponse,
    responses=ERROR_RESPONSES,
    summary="Submit Contact Form",
    description="Consultation request: name, email, optional phone, location, investment range and message.",
)
async def submit_contact(
    request: Request,
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    """
    Store a contact-form submission.

    **Example request:**
    ```json
    {
      "firstName": "Dana",
      "lastName": "Levy",
      "email": "dana@gmail.com",
      "phone": "(917) 555-0134",
      "message": "Looking at Coconut Grove."
    }
    ```
    """
    payload = await _read_payload(request)
    result = await run_in_threadpool(pipeline.submit_contact, payload, client_ip(request))
    return to_response(result)


@router.post(
    "/submit-lead",
    response_model=SubmissionResponse,
    responses=ERROR_RESPONSES,
    summary="Submit Lead Magnet",
    description="Email-only signup for the relocation guide.",
)
async def submit_lead(
    request: Request,
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    payload = await _read_payload(request)
    result = await run_in_threadpool(pipeline.submit_lead_magnet, payload, client_ip(request))
    return to_response(result)


@router.post(
    "/submit-quiz",
    response_model=QuizSubmissionResponse,
    responses=ERROR_RESPONSES,
    summary="Submit Quiz",
    description="Final quiz step: contact details plus answers. Savings and tier are computed server-side.",
)
async def submit_quiz(
    request: Request,
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    """
    Score, tier and store a completed quiz.

    The session_id must come from POST /quiz/sessions. Any savings figure the
    browser sends is ignored; the response carries the server's figure.

    **Example request:**
    ```json
    {
      "session_id": "4f7c1a52-8f0e-4a43-9d59-3f1c8d2b9e10",
      "first_name": "Dana",
      "email": "dana@gmail.com",
      "answers": {
        "housing_status": "rent",
        "monthly_cost": "3.5k_5k",
        "income_bracket": "250k_400k",
        "timeline": "0-6mo",
        "frustration": ["taxes", "winters"],
        "benefit": ["no_tax"]
      }
    }
    ```
    """
    payload = await _read_payload(request)
    result = await run_in_threadpool(pipeline.submit_quiz, payload, client_ip(request))
    return to_response(result)
