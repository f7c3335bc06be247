"""
Domain: NYC-to-Miami savings calculator (pure).

Compares origin-market (New York) and destination-market (Miami) costs across
three line items:

- Taxes:     tax_savings = income_midpoint * ny_effective_rate
             (Florida has no state income tax, so the whole NY bill is saved)
- Housing:   housing_ny = monthly_midpoint * 12
             housing_mia = housing_ny * miami_housing_multiplier
             housing_savings = max(housing_ny - housing_mia, 0)
- Utilities: util_ny = utilities_baseline
             util_mia = util_ny * (1 + utilities_delta)
             util_savings = max(util_ny - util_mia, 0)

Line items never go negative: a market where Miami is more expensive yields
zero savings for that item. Arithmetic is exact (Decimal); reported figures are
rounded half-up to whole dollars when the breakdown is built, and
annual_savings is the sum of the rounded line items so the three parts always
add up to the headline.

When an age bracket is supplied the breakdown also projects the future value
of investing annual_savings every year until the configured retirement age.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union

from .bracket_config import BracketConfig
from .brackets import AgeBracket, IncomeBracket, MonthlyCostBracket
from .errors import ConfigurationError

E = TypeVar("E", bound=Enum)

_ZERO = Decimal("0")
_ONE = Decimal("1")
_MONTHS_PER_YEAR = 12


@dataclass(frozen=True, slots=True)
class SavingsAdjustments:
    """
    Per-call overrides for scenario testing.

    Each knob is independent: a knob left as None falls back to the
    BracketConfig default, the others still apply.
    """

    ny_tax_rate: Optional[Decimal] = None
    housing_multiplier: Optional[Decimal] = None
    utilities_delta: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class SavingsBreakdown:
    """Whole-dollar savings figures for one (income, housing[, age]) input."""

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

    @property
    def headline(self) -> int:
        """The figure to present: the retirement projection if there is one."""
        if self.retirement_savings is not None:
            return self.retirement_savings
        return self.annual_savings

    def as_dict(self) -> dict[str, Any]:
        data = {
            "ny_tax": self.ny_tax,
            "housing_ny": self.housing_ny,
            "housing_mia": self.housing_mia,
            "util_ny": self.util_ny,
            "util_mia": self.util_mia,
            "tax_savings": self.tax_savings,
            "housing_savings": self.housing_savings,
            "util_savings": self.util_savings,
            "annual_savings": self.annual_savings,
        }
        if self.retirement_savings is not None:
            data["retirement_savings"] = self.retirement_savings
            data["years_until_retirement"] = self.years_until_retirement
        return data


def compute_savings(
    config: BracketConfig,
    income_bracket: Union[IncomeBracket, str],
    housing_cost_bracket: Union[MonthlyCostBracket, str],
    age_bracket: Union[AgeBracket, str, None] = None,
    adjustments: Optional[SavingsAdjustments] = None,
) -> SavingsBreakdown:
    """
    Compute the savings breakdown for a set of brackets.

    Args:
        config: Midpoint/rate tables
        income_bracket: Annual household income bracket
        housing_cost_bracket: Current monthly housing cost bracket
        age_bracket: Optional age bracket; enables the retirement projection
        adjustments: Optional per-knob overrides of the config defaults

    Returns:
        SavingsBreakdown with whole-dollar figures

    Raises:
        ConfigurationError: if a bracket is not a known enum value. The input
        layer only ever passes validated enum values, so this is a programming
        error rather than a user error.

    Example:
        breakdown = compute_savings(config, IncomeBracket.FROM_250K_TO_400K,
                                    MonthlyCostBracket.FROM_3_5K_TO_5K)
        # breakdown.tax_savings == 22750 with the packaged config
    """
    income_key = _bracket(IncomeBracket, income_bracket)
    housing_key = _bracket(MonthlyCostBracket, housing_cost_bracket)
    age_key = _bracket(AgeBracket, age_bracket) if age_bracket is not None else None
    adjustments = adjustments or SavingsAdjustments()

    ny_tax_rate = _pick(adjustments.ny_tax_rate, config.ny_effective_tax_rates[income_key])
    housing_multiplier = _pick(adjustments.housing_multiplier, config.miami_housing_multiplier)
    utilities_delta = _pick(adjustments.utilities_delta, config.utilities_delta_percent)

    # 1. Taxes
    ny_tax = config.income_midpoints[income_key] * ny_tax_rate
    tax_savings = ny_tax

    # 2. Housing
    housing_ny = config.housing_midpoints[housing_key] * _MONTHS_PER_YEAR
    housing_mia = housing_ny * housing_multiplier
    housing_savings = max(housing_ny - housing_mia, _ZERO)

    # 3. Utilities
    util_ny = config.utilities_baseline
    util_mia = util_ny * (_ONE + utilities_delta)
    util_savings = max(util_ny - util_mia, _ZERO)

    # 4. Total (sum of the reported line items)
    rounded_tax = _round(tax_savings)
    rounded_housing = _round(housing_savings)
    rounded_util = _round(util_savings)
    annual_savings = rounded_tax + rounded_housing + rounded_util

    # 5. Retirement projection
    retirement_savings: Optional[int] = None
    years_until_retirement: Optional[int] = None
    if age_key is not None:
        years_until_retirement, projected = _project_retirement(
            config, age_key, tax_savings + housing_savings + util_savings
        )
        retirement_savings = _round(projected)

    return SavingsBreakdown(
        ny_tax=_round(ny_tax),
        housing_ny=_round(housing_ny),
        housing_mia=_round(housing_mia),
        util_ny=_round(util_ny),
        util_mia=_round(util_mia),
        tax_savings=rounded_tax,
        housing_savings=rounded_housing,
        util_savings=rounded_util,
        annual_savings=annual_savings,
        retirement_savings=retirement_savings,
        years_until_retirement=years_until_retirement,
    )


def format_currency(amount: Union[int, Decimal]) -> str:
    """Whole-dollar display string, e.g. 22750 -> '$22,750'."""

    value = _round(Decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,}"


def _project_retirement(
    config: BracketConfig, age_bracket: AgeBracket, annual: Decimal
) -> tuple[int, Decimal]:
    """
    Future value of investing `annual` at the end of each year until retirement:

        FV = PMT * ((1 + r)^n - 1) / r

    At or past retirement age the projection is just one year's savings.
    """
    age = config.age_midpoints[age_bracket]
    years = max(int(config.retirement_age - age), 0)
    if years == 0:
        return 0, annual

    rate = config.retirement_annual_return
    return years, annual * (((_ONE + rate) ** years) - _ONE) / rate


def _pick(override: Optional[Decimal], default: Decimal) -> Decimal:
    if override is None:
        return default
    return Decimal(str(override))


def _bracket(enum_cls: Type[E], value: Union[E, str]) -> E:
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ConfigurationError(f"Unknown {enum_cls.__name__}: {value!r}") from e


def _round(value: Decimal) -> int:
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


__all__ = [
    "SavingsAdjustments",
    "SavingsBreakdown",
    "compute_savings",
    "format_currency",
]
