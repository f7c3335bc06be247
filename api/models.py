"""
API Request and Response Models.

Pydantic models for serializing responses and validating the request bodies
of the quiz-session and calculator endpoints. The three submission endpoints
read their raw JSON body and validate it in services.validation_service, so
that every violation is reported in one response.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from domain.brackets import AgeBracket, IncomeBracket, MonthlyCostBracket


# ============================================================================
# Submission Models
# ============================================================================

class SubmissionResponse(BaseModel):
    """Accepted contact or lead-magnet submission."""
    success: bool = True

    model_config = ConfigDict(json_schema_extra={"example": {"success": True}})


class QuizSubmissionResponse(BaseModel):
    """Accepted quiz submission."""
    success: bool = True
    tier: str  # "tier_a_hot_lead", "tier_b_nurture_warm" or "tier_c_nurture_cold"
    annual_savings: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "tier": "tier_a_hot_lead",
                "annual_savings": 35800,
            }
        }
    )


class ViolationItem(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Invalid submission; every violation is listed."""
    error: str
    violations: List[ViolationItem]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Please correct the highlighted fields.",
                "violations": [
                    {"field": "email", "message": "value is not a valid email address"},
                    {"field": "first_name", "message": "First name must be at least 2 characters"},
                ],
            }
        }
    )


# ============================================================================
# Quiz Session Models
# ============================================================================

class QuizSessionRequest(BaseModel):
    """Start a quiz session. Every field is optional."""
    session_id: Optional[str] = Field(None, min_length=1, max_length=100)
    utm_source: Optional[str] = Field(None, max_length=255)
    utm_medium: Optional[str] = Field(None, max_length=255)
    utm_campaign: Optional[str] = Field(None, max_length=255)
    utm_content: Optional[str] = Field(None, max_length=255)
    referrer: Optional[str] = Field(None, max_length=2048)
    device_type: Optional[str] = Field(None, max_length=20)
    browser: Optional[str] = Field(None, max_length=50)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "utm_source": "instagram",
                "utm_campaign": "nyc-exodus",
                "referrer": "https://www.instagram.com/",
            }
        }
    )


class QuizSessionResponse(BaseModel):
    session_id: str
    device_type: Optional[str] = None
    browser: Optional[str] = None
    created_at: datetime


class QuizAnswerRequest(BaseModel):
    """One answered question; multi-select answers may be sent as a list."""
    step: int = Field(..., ge=1, le=20)
    question_key: str = Field(..., min_length=1, max_length=100)
    answer_value: Union[str, List[str]]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "step": 1,
                "question_key": "frustration",
                "answer_value": ["taxes", "winters"],
            }
        }
    )


class QuizAnswerResponse(BaseModel):
    success: bool = True
    question_key: str
    answer_value: str


# ============================================================================
# Calculator Models
# ============================================================================

class SavingsEstimateRequest(BaseModel):
    income_bracket: IncomeBracket
    monthly_cost: MonthlyCostBracket
    age_bracket: Optional[AgeBracket] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "income_bracket": "250k_400k",
                "monthly_cost": "3.5k_5k",
                "age_bracket": "30_39",
            }
        }
    )


class SavingsEstimateResponse(BaseModel):
    ny_tax: int
    housing_ny: int
    housing_mia: int
    util_ny: int
    util_mia: int
    tax_savings: int
    housing_savings: int
    util_savings: int
    annual_savings: int
    retirement_savings: Optional[int] = None
    years_until_retirement: Optional[int] = None
    headline: int
    headline_display: str


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "Something went wrong. Please try again."}}
    )
