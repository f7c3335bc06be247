"""
Tests for `services/validation_service.py`.

Covers contract rules:
- Every violation is reported, not just the first.
- Violations are named by the field the client sent (aliases, nested paths).
- A phone number without SMS consent is a violation on sms_consent.
- Emails are trimmed and lower-cased; multi-select answers become sets.
- Non-object payloads are rejected without raising.
"""

from __future__ import annotations

import pytest

from domain.brackets import Benefit, Frustration, IncomeBracket, Timeline
from domain.submission import ContactSubmission, FormType, LeadMagnetSubmission, QuizSubmission
from services.validation_service import FieldViolation, validate_submission


def _fields(result) -> set[str]:
    return {violation.field for violation in result.violations}


# ============================================================================
# Quiz
# ============================================================================

def test_valid_quiz(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload())

    assert result.is_valid
    submission = result.payload
    assert isinstance(submission, QuizSubmission)
    assert submission.answers.income_bracket is IncomeBracket.FROM_250K_TO_400K
    assert submission.answers.timeline is Timeline.WITHIN_6_MONTHS
    assert submission.answers.frustration == {Frustration.TAXES, Frustration.WINTERS}
    assert submission.phone is None


def test_bad_email_and_short_name_both_reported(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(email="not-an-email", first_name="A"))

    assert not result.is_valid
    assert _fields(result) == {"email", "first_name"}
    assert FieldViolation("first_name", "First name must be at least 2 characters") in result.violations


def test_phone_without_consent_is_reported_on_consent(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(phone="(917) 555-0134", sms_consent=False))

    assert result.violations == (
        FieldViolation("sms_consent", "You must consent to SMS messages if providing a phone number"),
    )


def test_phone_with_consent(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(phone="917-555-0134", sms_consent=True))

    assert result.is_valid
    assert result.payload.phone == "917-555-0134"
    assert result.payload.sms_consent is True


def test_blank_phone_needs_no_consent(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(phone="  "))

    assert result.is_valid
    assert result.payload.phone is None


def test_invalid_us_phone(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(phone="555-01", sms_consent=True))

    assert result.violations == (FieldViolation("phone", "Please enter a valid US phone number"),)


def test_email_is_normalised(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(email="  Dana.Levy@Gmail.COM "))

    assert result.payload.email == "dana.levy@gmail.com"


def test_multi_select_accepts_single_string(quiz_payload) -> None:
    result = validate_submission(
        FormType.QUIZ,
        quiz_payload(answers={"frustration": "taxes", "benefit": ["no_tax", "no_tax", "networking"]}),
    )

    assert result.payload.answers.frustration == frozenset({Frustration.TAXES})
    assert result.payload.answers.benefit == frozenset({Benefit.NO_TAX, Benefit.NETWORKING})


def test_empty_multi_select_is_rejected(quiz_payload) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(answers={"benefit": []}))

    assert _fields(result) == {"answers.benefit"}


def test_unknown_answer_values_are_rejected(quiz_payload) -> None:
    result = validate_submission(
        FormType.QUIZ,
        quiz_payload(answers={"timeline": "next-week", "income_bracket": "5m_plus"}),
    )

    assert _fields(result) == {"answers.timeline", "answers.income_bracket"}


def test_missing_answers_and_session(quiz_payload) -> None:
    payload = quiz_payload()
    del payload["answers"]
    del payload["session_id"]

    result = validate_submission(FormType.QUIZ, payload)

    assert _fields(result) == {"answers", "session_id"}


def test_optional_answers(quiz_payload) -> None:
    result = validate_submission(
        FormType.QUIZ, quiz_payload(answers={"concern": "hurricanes", "age_bracket": "30_39"})
    )

    assert result.is_valid
    assert result.payload.answers.concern.value == "hurricanes"
    assert result.payload.answers.age_bracket.value == "30_39"


def test_client_savings_is_carried_not_trusted(quiz_payload) -> None:
    result = validate_submission(
        FormType.QUIZ, quiz_payload(savings_calculation={"annual_savings": 999999})
    )

    assert result.payload.client_savings == {"annual_savings": 999999}


@pytest.mark.parametrize("estimate", [35800, "35800", ["annual_savings"], None])
def test_non_object_client_savings_is_dropped(quiz_payload, estimate) -> None:
    result = validate_submission(FormType.QUIZ, quiz_payload(savings_calculation=estimate))

    assert result.is_valid
    assert result.payload.client_savings is None


# ============================================================================
# Contact
# ============================================================================

def test_valid_contact(contact_payload) -> None:
    result = validate_submission(FormType.CONTACT, contact_payload)

    assert result.is_valid
    submission = result.payload
    assert isinstance(submission, ContactSubmission)
    assert submission.full_name == "Dana Levy"
    assert submission.investment_range == "$1M - $2M"
    assert submission.tags == {"contact", "phone_provided", "investor"}


def test_contact_violations_use_client_field_names(contact_payload) -> None:
    contact_payload.update(firstName="   ", email="dana@", message="x" * 2001)
    del contact_payload["lastName"]

    result = validate_submission(FormType.CONTACT, contact_payload)

    assert _fields(result) == {"firstName", "lastName", "email", "message"}
    assert FieldViolation("firstName", "First name is required") in result.violations


@pytest.mark.parametrize(
    ("phone", "message"),
    [
        ("917-555-CALL", "Invalid phone format"),
        ("555 0134", "Phone too short"),
        ("+1 (917) 555-0134 0000 00", "Phone too long"),
    ],
)
def test_contact_phone_rules(contact_payload, phone: str, message: str) -> None:
    contact_payload["phone"] = phone

    result = validate_submission(FormType.CONTACT, contact_payload)

    assert result.violations == (FieldViolation("phone", message),)


def test_contact_optional_fields(contact_payload) -> None:
    for name in ("phone", "location", "investmentRange", "message"):
        del contact_payload[name]

    result = validate_submission(FormType.CONTACT, contact_payload)

    assert result.is_valid
    assert result.payload.tags == {"contact"}


# ============================================================================
# Lead magnet and payload shape
# ============================================================================

def test_lead_magnet() -> None:
    result = validate_submission(FormType.LEAD_MAGNET, {"email": " Guide@Gmail.com"})

    assert result.payload == LeadMagnetSubmission(email="guide@gmail.com")


def test_lead_magnet_missing_email() -> None:
    result = validate_submission(FormType.LEAD_MAGNET, {})

    assert _fields(result) == {"email"}


@pytest.mark.parametrize("payload", [None, "email=a@b.com", ["a"], 42])
def test_non_object_payload(payload) -> None:
    result = validate_submission(FormType.LEAD_MAGNET, payload)

    assert result.violations == (FieldViolation("body", "Payload must be a JSON object"),)
