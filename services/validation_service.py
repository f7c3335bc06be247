"""
Submission validation service.

Checks the shape and content of incoming form payloads before anything touches
the database. Validation is schema-based (pydantic) and collects *every*
violation in one pass so the caller can report them all at once.

Rules per form:
- contact:     firstName/lastName 1-100 chars, email, optional phone
               (digits, spaces, ()+- only, 10-20 chars), optional location (<=200),
               investmentRange (<=100), message (<=2000)
- lead magnet: email
- quiz:        session_id, first_name 2-50 chars, email, optional US phone,
               sms_consent, full answer set; a phone number requires
               sms_consent=true (reported against sms_consent)

Normalisation happens here and nowhere else:
- emails are trimmed and lower-cased
- empty phone strings become None
- multi-select answers (frustration, benefit) arrive as a string or a list and
  leave as a frozenset of enum values

The validator never raises for bad input and never checks business rules
such as duplicates or rate limits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

from domain.brackets import (
    AgeBracket,
    Benefit,
    Concern,
    Frustration,
    HousingStatus,
    IncomeBracket,
    MonthlyCostBracket,
    Timeline,
)
from domain.submission import (
    ContactSubmission,
    FormType,
    LeadMagnetSubmission,
    QuizAnswers,
    QuizSubmission,
)

MAX_EMAIL_LENGTH = 255

US_PHONE_PATTERN = re.compile(r"^\+?1?\s*\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}$")
CONTACT_PHONE_PATTERN = re.compile(r"^[\d\s()+-]+$")

Submission = Union[ContactSubmission, LeadMagnetSubmission, QuizSubmission]


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """One problem with one field, named as the client sent it."""

    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of validating a payload.

    Exactly one of `payload` (valid) or `violations` (invalid) is populated.
    """

    payload: Optional[Submission] = None
    violations: tuple[FieldViolation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations


# ============================================================================
# Field types
# ============================================================================

def _normalize_email(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    email = value.strip().lower()
    if len(email) > MAX_EMAIL_LENGTH:
        raise PydanticCustomError(
            "email_too_long", "Email must be less than 255 characters"
        )
    return email


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _check_us_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not US_PHONE_PATTERN.match(value):
        raise PydanticCustomError("invalid_phone", "Please enter a valid US phone number")
    return value


def _check_contact_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not CONTACT_PHONE_PATTERN.match(value):
        raise PydanticCustomError("invalid_phone", "Invalid phone format")
    if len(value) < 10:
        raise PydanticCustomError("phone_too_short", "Phone too short")
    if len(value) > 20:
        raise PydanticCustomError("phone_too_long", "Phone too long")
    return value


def _bounded(label: str, min_length: int, max_length: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value) < min_length:
            if min_length == 1:
                raise PydanticCustomError("too_short", f"{label} is required")
            raise PydanticCustomError(
                "too_short", f"{label} must be at least {min_length} characters"
            )
        if len(value) > max_length:
            raise PydanticCustomError(
                "too_long", f"{label} must be less than {max_length} characters"
            )
        return value

    return check


def _as_list(value: Any) -> Any:
    """Multi-select answers may arrive as a single string."""
    if isinstance(value, str):
        return [value]
    return value


def _object_or_none(value: Any) -> Any:
    """The client estimate is informational; anything but an object is dropped."""
    if isinstance(value, dict):
        return value
    return None


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]
USPhone = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_us_phone)]
ContactPhone = Annotated[
    Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_contact_phone)
]


# ============================================================================
# Form schemas
# ============================================================================

class _ContactForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Annotated[str, AfterValidator(_bounded("First name", 1, 100))] = Field(
        alias="firstName"
    )
    last_name: Annotated[str, AfterValidator(_bounded("Last name", 1, 100))] = Field(
        alias="lastName"
    )
    email: NormalizedEmail
    phone: ContactPhone = None
    location: Optional[str] = Field(default=None, max_length=200)
    investment_range: Optional[str] = Field(
        default=None, alias="investmentRange", max_length=100
    )
    message: Optional[str] = Field(default=None, max_length=2000)


class _LeadMagnetForm(BaseModel):
    email: NormalizedEmail


class _QuizAnswersForm(BaseModel):
    housing_status: HousingStatus
    monthly_cost: MonthlyCostBracket
    income_bracket: IncomeBracket
    frustration: Annotated[frozenset[Frustration], BeforeValidator(_as_list)] = Field(
        min_length=1
    )
    benefit: Annotated[frozenset[Benefit], BeforeValidator(_as_list)] = Field(min_length=1)
    timeline: Timeline
    concern: Optional[Concern] = None
    age_bracket: Optional[AgeBracket] = None


class _QuizForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    session_id: str = Field(min_length=1, max_length=100)
    first_name: Annotated[str, AfterValidator(_bounded("First name", 2, 50))]
    email: NormalizedEmail
    # phone must stay declared before sms_consent: the consent check reads it.
    phone: USPhone = None
    sms_consent: bool = Field(default=False, validate_default=True)
    answers: _QuizAnswersForm
    savings_calculation: Annotated[Optional[dict[str, Any]], BeforeValidator(_object_or_none)] = None

    @field_validator("sms_consent")
    @classmethod
    def require_consent_with_phone(cls, value: bool, info: ValidationInfo) -> bool:
        if info.data.get("phone") and not value:
            raise PydanticCustomError(
                "sms_consent_required",
                "You must consent to SMS messages if providing a phone number",
            )
        return value


# ============================================================================
# Public API
# ============================================================================

def validate_submission(form_type: FormType, payload: Any) -> ValidationResult:
    """
    Validate a raw request payload for the given form.

    Args:
        form_type: Which form the payload was posted to
        payload: Decoded JSON body (anything; non-objects are rejected)

    Returns:
        ValidationResult with either the normalised domain submission or the
        full list of violations.

    Example:
        result = validate_submission(FormType.LEAD_MAGNET, {"email": "bad"})
        if not result.is_valid:
            for violation in result.violations:
                print(violation.field, violation.message)
    """
    if not isinstance(payload, dict):
        return ValidationResult(
            violations=(FieldViolation("body", "Payload must be a JSON object"),)
        )

    try:
        if form_type is FormType.CONTACT:
            return ValidationResult(payload=_to_contact(_ContactForm.model_validate(payload)))
        if form_type is FormType.LEAD_MAGNET:
            form = _LeadMagnetForm.model_validate(payload)
            return ValidationResult(payload=LeadMagnetSubmission(email=str(form.email)))
        if form_type is FormType.QUIZ:
            return ValidationResult(payload=_to_quiz(_QuizForm.model_validate(payload)))
    except ValidationError as e:
        return ValidationResult(violations=_violations(e))

    raise ValueError(f"Unsupported form type: {form_type!r}")


def _violations(error: ValidationError) -> tuple[FieldViolation, ...]:
    violations = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        violations.append(FieldViolation(field=field, message=item["msg"]))
    return tuple(violations)


def _to_contact(form: _ContactForm) -> ContactSubmission:
    return ContactSubmission(
        first_name=form.first_name,
        last_name=form.last_name,
        email=str(form.email),
        phone=form.phone,
        location=form.location or None,
        investment_range=form.investment_range or None,
        message=form.message or None,
    )


def _to_quiz(form: _QuizForm) -> QuizSubmission:
    answers = form.answers
    return QuizSubmission(
        session_id=form.session_id,
        first_name=form.first_name,
        email=str(form.email),
        phone=form.phone,
        sms_consent=form.sms_consent,
        answers=QuizAnswers(
            housing_status=answers.housing_status,
            monthly_cost=answers.monthly_cost,
            income_bracket=answers.income_bracket,
            timeline=answers.timeline,
            frustration=answers.frustration,
            benefit=answers.benefit,
            concern=answers.concern,
            age_bracket=answers.age_bracket,
        ),
        client_savings=form.savings_calculation,
    )


__all__ = [
    "FieldViolation",
    "ValidationResult",
    "validate_submission",
    "US_PHONE_PATTERN",
    "CONTACT_PHONE_PATTERN",
]
