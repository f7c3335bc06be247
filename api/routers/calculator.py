"""
Savings Calculator API Endpoints.

Lets the quiz page preview the estimate before the visitor hands over an
email. Pure computation; nothing is stored.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_bracket_config
from api.models import SavingsEstimateRequest, SavingsEstimateResponse
from domain.bracket_config import BracketConfig
from domain.savings import compute_savings, format_currency

router = APIRouter()


@router.post(
    "/calculator/savings",
    response_model=SavingsEstimateResponse,
    summary="Estimate Annual Savings",
    description="Estimate yearly savings (tax, housing, utilities) of moving from New York to Miami.",
)
def estimate_savings(
    request: SavingsEstimateRequest,
    config: BracketConfig = Depends(get_bracket_config),
):
    """
    Estimate savings for an income and housing-cost bracket.

    With an age bracket, the response also carries the projected value of
    investing the annual savings until retirement, and `headline` switches to
    that projection.
    """
    breakdown = compute_savings(
        config,
        request.income_bracket,
        request.monthly_cost,
        age_bracket=request.age_bracket,
    )
    return SavingsEstimateResponse(
        **breakdown.as_dict(),
        headline=breakdown.headline,
        headline_display=format_currency(breakdown.headline),
    )
