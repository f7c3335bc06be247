"""
Submission repository (persistence).

This module provides *only* persistence operations for the three lead tables.
No business rules (validation, tiering, throttling) belong here.

Uniqueness of `email` per table is enforced by the database (see
migrations/0001_lead_capture.sql); a violation surfaces as DuplicateError.
"""

from __future__ import annotations

from typing import Any

from supabase import Client

from domain.submission import (
    ContactSubmission,
    FormType,
    LeadMagnetSubmission,
    QuizLead,
)
from domain.time import to_iso_utc
from repositories.client import execute_query

# Supabase table names. Keep these aligned with the migrations.
_CONTACT_TABLE: str = "contact_submissions"
_LEAD_MAGNET_TABLE: str = "lead_submissions"
_QUIZ_LEADS_TABLE: str = "quiz_leads"


def _contact_to_row(submission: ContactSubmission) -> dict[str, Any]:
    """Convert a contact submission to a Supabase row payload."""

    return {
        "name": submission.full_name,
        "email": submission.email,
        "phone": submission.phone,
        "location": submission.location,
        "investment_range": submission.investment_range,
        "message": submission.message,
        "tags": sorted(submission.tags),
    }


def _lead_magnet_to_row(submission: LeadMagnetSubmission) -> dict[str, Any]:
    return {
        "email": submission.email,
        "tags": sorted(submission.tags),
    }


def _quiz_lead_to_row(lead: QuizLead) -> dict[str, Any]:
    """Convert a quiz lead to a Supabase row payload."""

    return {
        # Identity and consent
        "session_id": lead.session_pk,
        "first_name": lead.first_name,
        "email": lead.email,
        "phone": lead.phone,
        "sms_consent": lead.sms_consent,

        # Answers and scoring
        "answers": lead.answers.as_dict(),
        "timeline": lead.answers.timeline.value,
        "savings_breakdown": lead.savings.as_dict(),
        "annual_savings": lead.savings.annual_savings,
        "tax_savings": lead.savings.tax_savings,
        "housing_savings": lead.savings.housing_savings,
        "retirement_savings": lead.savings.retirement_savings,
        "tier": lead.tier.value,

        # Workflow (initial values only; the admin UI owns later changes)
        "priority": lead.priority.value,
        "status": lead.status.value,
        "tags": sorted(lead.tags),

        "created_at": to_iso_utc(lead.created_at),
    }


class SubmissionRepository:
    """Writes lead records for all three forms."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def insert_contact(self, submission: ContactSubmission) -> None:
        """
        Insert a contact form submission.

        Raises:
        - DuplicateError if this email already has a contact submission.
        - TransientInfrastructureError for any other failure.
        """

        query = self._client.table(_CONTACT_TABLE).insert(_contact_to_row(submission))
        execute_query(
            query,
            "insert contact submission",
            duplicate_form_type=FormType.CONTACT.value,
            duplicate_email=submission.email,
        )

    def insert_lead_magnet(self, submission: LeadMagnetSubmission) -> None:
        """Insert a lead-magnet (email capture) submission."""

        query = self._client.table(_LEAD_MAGNET_TABLE).insert(_lead_magnet_to_row(submission))
        execute_query(
            query,
            "insert lead submission",
            duplicate_form_type=FormType.LEAD_MAGNET.value,
            duplicate_email=submission.email,
        )

    def insert_quiz_lead(self, lead: QuizLead) -> None:
        """
        Insert a completed quiz lead.

        Raises:
        - DuplicateError if this email already completed the quiz.
        - TransientInfrastructureError for any other failure.
        """

        query = self._client.table(_QUIZ_LEADS_TABLE).insert(_quiz_lead_to_row(lead))
        execute_query(
            query,
            "insert quiz lead",
            duplicate_form_type=FormType.QUIZ.value,
            duplicate_email=lead.email,
        )


__all__ = ["SubmissionRepository"]
