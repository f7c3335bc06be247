"""
Domain: validated form submissions and the lead records created from them.

Three forms feed the lead tables:
- contact      -> contact_submissions
- lead magnet  -> lead_submissions
- quiz         -> quiz_leads (with savings breakdown, tier and priority)

Submissions are the *validated* shape of a request: enums instead of strings,
multi-select answers as frozensets, emails normalised. Workflow fields on the
stored rows (status changes, admin_notes, admin tags) belong to the review UI
and are never mutated here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from .brackets import (
    AgeBracket,
    Benefit,
    Concern,
    Frustration,
    HousingStatus,
    IncomeBracket,
    MonthlyCostBracket,
    Timeline,
)
from .savings import SavingsBreakdown
from .tier import LeadPriority, LeadTier, derive_quiz_tags, priority_for_tier
from .time import require_utc_timestamp


class FormType(str, Enum):
    CONTACT = "contact"
    LEAD_MAGNET = "lead"
    QUIZ = "quiz"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"


@dataclass(frozen=True, slots=True)
class ContactSubmission:
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    investment_range: Optional[str] = None
    message: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def tags(self) -> frozenset[str]:
        tags = {"contact"}
        if self.phone:
            tags.add("phone_provided")
        if self.investment_range:
            tags.add("investor")
        return frozenset(tags)


@dataclass(frozen=True, slots=True)
class LeadMagnetSubmission:
    email: str

    @property
    def tags(self) -> frozenset[str]:
        return frozenset({"lead_magnet"})


@dataclass(frozen=True, slots=True)
class QuizAnswers:
    """
    Canonical quiz answer set.

    frustration and benefit are multi-select questions; they are always sets
    here, whatever shape the client sent.
    """

    housing_status: HousingStatus
    monthly_cost: MonthlyCostBracket
    income_bracket: IncomeBracket
    timeline: Timeline
    frustration: frozenset[Frustration] = frozenset()
    benefit: frozenset[Benefit] = frozenset()
    concern: Optional[Concern] = None
    age_bracket: Optional[AgeBracket] = None

    def as_dict(self) -> dict[str, Any]:
        """JSON shape stored in quiz_leads.answers (sets as sorted lists)."""
        data: dict[str, Any] = {
            "housing_status": self.housing_status.value,
            "monthly_cost": self.monthly_cost.value,
            "income_bracket": self.income_bracket.value,
            "frustration": sorted(item.value for item in self.frustration),
            "benefit": sorted(item.value for item in self.benefit),
            "timeline": self.timeline.value,
        }
        if self.concern is not None:
            data["concern"] = self.concern.value
        if self.age_bracket is not None:
            data["age_bracket"] = self.age_bracket.value
        return data


@dataclass(frozen=True, slots=True)
class QuizSubmission:
    session_id: str
    first_name: str
    email: str
    sms_consent: bool
    answers: QuizAnswers
    phone: Optional[str] = None
    # Client-side estimate; informational only, the server recomputes.
    client_savings: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True, slots=True)
class QuizLead:
    """
    Terminal record of a completed quiz.

    session_pk is the primary key of the quiz_sessions row, not the
    client-generated session token.
    """

    session_pk: str
    first_name: str
    email: str
    sms_consent: bool
    answers: QuizAnswers
    savings: SavingsBreakdown
    tier: LeadTier
    priority: LeadPriority
    tags: frozenset[str]
    created_at: datetime
    phone: Optional[str] = None
    status: LeadStatus = field(default=LeadStatus.NEW)

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)

    @classmethod
    def create(
        cls,
        submission: QuizSubmission,
        session_pk: str,
        savings: SavingsBreakdown,
        tier: LeadTier,
        created_at: datetime,
    ) -> "QuizLead":
        """Build the lead, deriving priority and tags from the tier and answers."""

        answers = submission.answers
        return cls(
            session_pk=session_pk,
            first_name=submission.first_name,
            email=submission.email,
            phone=submission.phone,
            sms_consent=submission.sms_consent,
            answers=answers,
            savings=savings,
            tier=tier,
            priority=priority_for_tier(tier),
            tags=derive_quiz_tags(
                tier,
                answers.timeline,
                income_bracket=answers.income_bracket.value,
                has_age_bracket=answers.age_bracket is not None,
                sms_opt_in=bool(submission.phone) and submission.sms_consent,
            ),
            created_at=created_at,
        )


__all__ = [
    "FormType",
    "LeadStatus",
    "ContactSubmission",
    "LeadMagnetSubmission",
    "QuizAnswers",
    "QuizSubmission",
    "QuizLead",
]
