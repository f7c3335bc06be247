"""
Submission pipeline for the contact, lead-magnet and quiz forms.

Handles, per submission:
- Validation (all violations reported at once)
- Rate limiting against prior submissions of the same form by the same email
- Savings scoring and tiering (quiz only)
- Persistence of the lead record, with duplicate-email detection
- Best-effort rate-limit record write

Stages and terminal outcomes:

    received -> validated -> rate_checked -> (quiz: scored -> tiered)
             -> persisted -> rate_recorded -> accepted

    invalid        validation failed
    rate_limited   same email/form inside the configured window
    duplicate      the store rejected the email as already submitted
    internal_error anything else (logged with form type, email and stage)

Invalid, rate-limited and duplicate submissions are normal outcomes and are
logged at INFO; only unexpected failures are logged as errors. Nothing from
an exception is ever copied into the caller-facing message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from domain.bracket_config import BracketConfig
from domain.errors import DuplicateError, SessionNotFoundError
from domain.rate_limit import UNKNOWN_IP
from domain.savings import SavingsBreakdown, compute_savings
from domain.submission import (
    ContactSubmission,
    FormType,
    LeadMagnetSubmission,
    QuizLead,
    QuizSubmission,
)
from domain.tier import LeadTier, classify_tier
from domain.time import Clock, utc_now
from repositories.quiz_repository import QuizRepository
from repositories.submission_repository import SubmissionRepository
from services.rate_limit_service import RateLimiter
from services.validation_service import FieldViolation, validate_submission

logger = logging.getLogger(__name__)

INVALID_MESSAGE = "Please correct the highlighted fields."
INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again."
DUPLICATE_MESSAGES = {
    FormType.CONTACT: "We already have your details. Our team will be in touch soon.",
    FormType.LEAD_MAGNET: "This email is already signed up. Check your inbox for the guide.",
    FormType.QUIZ: "You've already completed the quiz with this email address.",
}


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    INVALID = "invalid"
    RATE_LIMITED = "rate_limited"
    DUPLICATE = "duplicate"
    INTERNAL_ERROR = "internal_error"


class PipelineStage(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    RATE_CHECKED = "rate_checked"
    SCORED = "scored"
    TIERED = "tiered"
    PERSISTED = "persisted"
    RATE_RECORDED = "rate_recorded"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """
    Terminal state of one submission.

    stage: last stage the submission completed
    message: caller-facing text (None when accepted)
    violations: populated for INVALID only
    retry_after_seconds: populated for RATE_LIMITED only
    tier / annual_savings: populated for accepted quiz submissions
    """

    outcome: SubmissionOutcome
    form_type: FormType
    stage: PipelineStage
    message: Optional[str] = None
    violations: tuple[FieldViolation, ...] = ()
    retry_after_seconds: Optional[int] = None
    tier: Optional[LeadTier] = None
    annual_savings: Optional[int] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is SubmissionOutcome.ACCEPTED


class SubmissionPipeline:
    """
    Stateless orchestrator; one instance serves every request.

    All durable state lives behind the repositories, so concurrent calls share
    nothing but the (immutable) bracket config.
    """

    def __init__(
        self,
        config: BracketConfig,
        rate_limiter: RateLimiter,
        submissions: SubmissionRepository,
        quiz_sessions: QuizRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._rate_limiter = rate_limiter
        self._submissions = submissions
        self._quiz_sessions = quiz_sessions
        self._clock = clock

    def submit_contact(self, payload: Any, ip_address: str = UNKNOWN_IP) -> SubmissionResult:
        return self._run(FormType.CONTACT, payload, ip_address)

    def submit_lead_magnet(self, payload: Any, ip_address: str = UNKNOWN_IP) -> SubmissionResult:
        return self._run(FormType.LEAD_MAGNET, payload, ip_address)

    def submit_quiz(self, payload: Any, ip_address: str = UNKNOWN_IP) -> SubmissionResult:
        return self._run(FormType.QUIZ, payload, ip_address)

    def _run(self, form_type: FormType, payload: Any, ip_address: str) -> SubmissionResult:
        stage = PipelineStage.RECEIVED
        email = _email_hint(payload)
        logger.info("%s submission received: email=%s ip=%s", form_type.value, email, ip_address)

        try:
            # 1. Validate
            validation = validate_submission(form_type, payload)
            if not validation.is_valid:
                logger.info(
                    "%s submission invalid: email=%s fields=%s",
                    form_type.value,
                    email,
                    [violation.field for violation in validation.violations],
                )
                return SubmissionResult(
                    outcome=SubmissionOutcome.INVALID,
                    form_type=form_type,
                    stage=stage,
                    message=INVALID_MESSAGE,
                    violations=validation.violations,
                )
            submission = validation.payload
            email = submission.email
            stage = PipelineStage.VALIDATED

            # 2. Rate limit (read only)
            decision = self._rate_limiter.check(email, form_type)
            if not decision.allowed:
                logger.info("Rate limit exceeded for %s (%s)", email, form_type.value)
                return SubmissionResult(
                    outcome=SubmissionOutcome.RATE_LIMITED,
                    form_type=form_type,
                    stage=stage,
                    message=decision.message,
                    retry_after_seconds=decision.retry_after_seconds,
                )
            stage = PipelineStage.RATE_CHECKED

            # 3. Score, tier and persist
            tier: Optional[LeadTier] = None
            annual_savings: Optional[int] = None
            try:
                if isinstance(submission, QuizSubmission):
                    savings = self._score(submission)
                    stage = PipelineStage.SCORED
                    tier = classify_tier(submission.answers.timeline, savings.annual_savings)
                    annual_savings = savings.annual_savings
                    stage = PipelineStage.TIERED
                    self._persist_quiz(submission, savings, tier)
                elif isinstance(submission, ContactSubmission):
                    self._submissions.insert_contact(submission)
                elif isinstance(submission, LeadMagnetSubmission):
                    self._submissions.insert_lead_magnet(submission)
            except DuplicateError:
                logger.info("Duplicate %s submission for %s", form_type.value, email)
                return SubmissionResult(
                    outcome=SubmissionOutcome.DUPLICATE,
                    form_type=form_type,
                    stage=stage,
                    message=DUPLICATE_MESSAGES[form_type],
                )
            stage = PipelineStage.PERSISTED

            # 4. Record for future throttling (best effort)
            try:
                self._rate_limiter.record(email, form_type, ip_address)
                stage = PipelineStage.RATE_RECORDED
            except Exception:
                logger.warning(
                    "Failed to record rate limit for %s (%s); submission still accepted",
                    email,
                    form_type.value,
                    exc_info=True,
                )

        except Exception:
            logger.exception(
                "Error processing %s submission: email=%s stage=%s",
                form_type.value,
                email,
                stage.value,
            )
            return SubmissionResult(
                outcome=SubmissionOutcome.INTERNAL_ERROR,
                form_type=form_type,
                stage=stage,
                message=INTERNAL_ERROR_MESSAGE,
            )

        logger.info(
            "%s submission successful: email=%s tier=%s",
            form_type.value,
            email,
            tier.label if tier else "-",
        )
        return SubmissionResult(
            outcome=SubmissionOutcome.ACCEPTED,
            form_type=form_type,
            stage=stage,
            tier=tier,
            annual_savings=annual_savings,
        )

    def _score(self, submission: QuizSubmission) -> SavingsBreakdown:
        """Server-side savings; the client's own estimate is never trusted."""

        answers = submission.answers
        savings = compute_savings(
            self._config,
            answers.income_bracket,
            answers.monthly_cost,
            age_bracket=answers.age_bracket,
        )

        client_annual = (submission.client_savings or {}).get("annual_savings")
        if client_annual is not None and client_annual != savings.annual_savings:
            logger.debug(
                "Client savings estimate %s differs from computed %s for session %s",
                client_annual,
                savings.annual_savings,
                submission.session_id,
            )
        return savings

    def _persist_quiz(
        self, submission: QuizSubmission, savings: SavingsBreakdown, tier: LeadTier
    ) -> None:
        session_pk = self._quiz_sessions.get_session_pk(submission.session_id)
        if session_pk is None:
            raise SessionNotFoundError(submission.session_id)

        lead = QuizLead.create(
            submission,
            session_pk=session_pk,
            savings=savings,
            tier=tier,
            created_at=self._clock(),
        )
        self._submissions.insert_quiz_lead(lead)


def _email_hint(payload: Any) -> str:
    """Best-guess email for log lines written before validation succeeds."""
    if isinstance(payload, dict) and isinstance(payload.get("email"), str):
        return payload["email"].strip().lower()
    return "unknown"


__all__ = [
    "SubmissionOutcome",
    "PipelineStage",
    "SubmissionResult",
    "SubmissionPipeline",
    "DUPLICATE_MESSAGES",
    "INTERNAL_ERROR_MESSAGE",
    "INVALID_MESSAGE",
]
