"""
Domain: lead tiering (pure).

Maps the quiz timeline answer and the computed annual savings to a sales tier,
first match wins:

1. urgency >= 2 and annual_savings >= 20000          -> hot
2. urgency >= 1 or 10000 <= annual_savings < 20000   -> warm
3. otherwise                                         -> cold

Urgency comes from TIMELINE_SCORES. The classifier is total: any timeline it
does not recognise (free text, None) scores 0 instead of raising.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from .brackets import TOP_INCOME_BRACKETS, Timeline

HOT_SAVINGS_THRESHOLD = 20000
WARM_SAVINGS_THRESHOLD = 10000

TIMELINE_SCORES: dict[str, int] = {
    Timeline.WITHIN_6_MONTHS.value: 3,
    Timeline.SIX_TO_12_MONTHS.value: 2,
    Timeline.ONE_TO_3_YEARS.value: 1,
    Timeline.SOMEDAY.value: 0,
}


class LeadTier(str, Enum):
    HOT = "tier_a_hot_lead"
    WARM = "tier_b_nurture_warm"
    COLD = "tier_c_nurture_cold"

    @property
    def label(self) -> str:
        """Short name used in tags and logs ('hot', 'warm', 'cold')."""
        return _TIER_LABELS[self]


class LeadPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_TIER_LABELS = {
    LeadTier.HOT: "hot",
    LeadTier.WARM: "warm",
    LeadTier.COLD: "cold",
}

_PRIORITY_BY_TIER = {
    LeadTier.HOT: LeadPriority.HIGH,
    LeadTier.WARM: LeadPriority.MEDIUM,
    LeadTier.COLD: LeadPriority.LOW,
}


def timeline_score(timeline: Union[Timeline, str, None]) -> int:
    """Urgency score for a timeline answer; unknown values score 0."""

    if isinstance(timeline, Timeline):
        timeline = timeline.value
    if not isinstance(timeline, str):
        return 0
    return TIMELINE_SCORES.get(timeline, 0)


def classify_tier(timeline: Union[Timeline, str, None], annual_savings: int) -> LeadTier:
    """
    Classify a quiz lead.

    Examples:
        classify_tier("0-6mo", 25000)   # LeadTier.HOT
        classify_tier("6-12mo", 12000)  # LeadTier.WARM (rule 1 needs >= 20000)
        classify_tier("1-3y", 5000)     # LeadTier.WARM (urgency 1)
        classify_tier("someday", 5000)  # LeadTier.COLD
    """
    score = timeline_score(timeline)

    if score >= 2 and annual_savings >= HOT_SAVINGS_THRESHOLD:
        return LeadTier.HOT
    if score >= 1 or WARM_SAVINGS_THRESHOLD <= annual_savings < HOT_SAVINGS_THRESHOLD:
        return LeadTier.WARM
    return LeadTier.COLD


def priority_for_tier(tier: LeadTier) -> LeadPriority:
    return _PRIORITY_BY_TIER[tier]


def derive_quiz_tags(
    tier: LeadTier,
    timeline: Union[Timeline, str, None],
    income_bracket: Optional[str] = None,
    has_age_bracket: bool = False,
    sms_opt_in: bool = False,
) -> frozenset[str]:
    """
    Operational tags attached to a quiz lead at creation time.

    Admin-managed tags are added later by the review UI; these are only the
    ones derivable from the submission itself.
    """
    tags = {tier.label}

    if isinstance(timeline, Timeline):
        timeline = timeline.value
    if timeline:
        tags.add(f"timeline:{timeline}")
    if income_bracket is not None and income_bracket in {b.value for b in TOP_INCOME_BRACKETS}:
        tags.add("top_income")
    if has_age_bracket:
        tags.add("retirement_projection")
    if sms_opt_in:
        tags.add("sms_opt_in")

    return frozenset(tags)


__all__ = [
    "HOT_SAVINGS_THRESHOLD",
    "WARM_SAVINGS_THRESHOLD",
    "TIMELINE_SCORES",
    "LeadTier",
    "LeadPriority",
    "timeline_score",
    "classify_tier",
    "priority_for_tier",
    "derive_quiz_tags",
]
