"""
Domain: quiz sessions and the per-question answer log.

A QuizSession is created once per visitor attempt and never changes; every
QuizAnswer and the final QuizLead reference it. Answers are append-only, one
row per question as it is answered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .time import require_utc_timestamp

_TABLET_PATTERN = re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE)
_MOBILE_PATTERN = re.compile(
    r"Mobile|Android|iP(hone|od)|IEMobile|BlackBerry|Kindle|Silk-Accelerated|(hpw|web)OS|Opera M(obi|ini)"
)


@dataclass(frozen=True, slots=True)
class QuizSession:
    session_id: str
    created_at: datetime
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.session_id:
            raise ValueError("session_id must be non-empty")
        require_utc_timestamp("created_at", self.created_at)


@dataclass(frozen=True, slots=True)
class QuizAnswer:
    """
    One answered question.

    session_pk is the quiz_sessions primary key the row links to.
    """

    session_pk: str
    step: int
    question_key: str
    answer_value: str

    def __post_init__(self) -> None:
        if self.step < 1:
            raise ValueError("step must be >= 1")
        if not self.question_key:
            raise ValueError("question_key must be non-empty")


def device_type_from_user_agent(user_agent: Optional[str]) -> str:
    """Classify a User-Agent as 'tablet', 'mobile' or 'desktop'."""

    ua = user_agent or ""
    if _TABLET_PATTERN.search(ua):
        return "tablet"
    if _MOBILE_PATTERN.search(ua):
        return "mobile"
    return "desktop"


def browser_from_user_agent(user_agent: Optional[str]) -> str:
    """
    Coarse browser family from a User-Agent.

    First substring match wins. Chromium Edge UAs contain "Chrome" and
    legacy Edge UAs contain "Safari", so Edge is reported as one of those.
    """

    ua = user_agent or ""
    for marker in ("Chrome", "Safari", "Firefox"):
        if marker in ua:
            return marker
    return "Other"


__all__ = [
    "QuizSession",
    "QuizAnswer",
    "device_type_from_user_agent",
    "browser_from_user_agent",
]
