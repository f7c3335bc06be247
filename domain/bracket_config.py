"""
Domain: calculator bracket configuration.

A BracketConfig is an immutable snapshot of the midpoint and rate tables the
savings calculator reads. It is built once by the composition root and passed
explicitly to whoever needs it; nothing here is a module-level global.

Contract:
- Every member of IncomeBracket, MonthlyCostBracket and AgeBracket must have an
  entry in each table keyed by that enum. A missing key is a configuration
  error, detected at load time rather than on the first request that hits it.
- Effective tax rates are fractions in [0, 1).
- The housing multiplier and the utilities baseline are non-negative.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type, TypeVar

from .brackets import AgeBracket, IncomeBracket, MonthlyCostBracket
from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).with_name("miami_calculator.json")

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True, slots=True)
class BracketConfig:
    """Midpoint and rate tables for the savings calculator."""

    income_midpoints: Mapping[IncomeBracket, Decimal]
    housing_midpoints: Mapping[MonthlyCostBracket, Decimal]
    ny_effective_tax_rates: Mapping[IncomeBracket, Decimal]
    age_midpoints: Mapping[AgeBracket, Decimal]
    miami_housing_multiplier: Decimal
    utilities_delta_percent: Decimal
    utilities_baseline: Decimal = Decimal("3000")
    retirement_age: int = 65
    retirement_annual_return: Decimal = Decimal("0.07")

    def __post_init__(self) -> None:
        _require_complete("income_midpoints", IncomeBracket, self.income_midpoints)
        _require_complete("housing_midpoints", MonthlyCostBracket, self.housing_midpoints)
        _require_complete("ny_effective_tax_rates", IncomeBracket, self.ny_effective_tax_rates)
        _require_complete("age_midpoints", AgeBracket, self.age_midpoints)

        for bracket, rate in self.ny_effective_tax_rates.items():
            if not Decimal("0") <= rate < Decimal("1"):
                raise ConfigurationError(
                    f"ny_effective_tax_rates[{bracket.value}] must be in [0, 1), got {rate}"
                )
        if self.miami_housing_multiplier < 0:
            raise ConfigurationError("miami_housing_multiplier must be >= 0")
        if self.utilities_baseline < 0:
            raise ConfigurationError("utilities_baseline must be >= 0")
        if self.retirement_annual_return <= 0:
            raise ConfigurationError("retirement annual_return must be > 0")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BracketConfig":
        """
        Build a config from the JSON document shape:

        {
          "income_midpoints": {...}, "housing_midpoints": {...},
          "tax_rates": {"ny_effective_rates": {...}}, "age_midpoints": {...},
          "miami_housing_multiplier": 0.75, "utilities_delta_percent": -0.1,
          "utilities_baseline": 3000, "retirement": {"age": 65, "annual_return": 0.07}
        }

        Raises:
            ConfigurationError: for missing sections, unknown keys or bad numbers.
        """

        try:
            tax_rates = data["tax_rates"]["ny_effective_rates"]
            retirement = data.get("retirement", {})
            return cls(
                income_midpoints=_enum_table(IncomeBracket, data["income_midpoints"]),
                housing_midpoints=_enum_table(MonthlyCostBracket, data["housing_midpoints"]),
                ny_effective_tax_rates=_enum_table(IncomeBracket, tax_rates),
                age_midpoints=_enum_table(AgeBracket, data["age_midpoints"]),
                miami_housing_multiplier=_decimal(data["miami_housing_multiplier"]),
                utilities_delta_percent=_decimal(data["utilities_delta_percent"]),
                utilities_baseline=_decimal(data.get("utilities_baseline", 3000)),
                retirement_age=int(retirement.get("age", 65)),
                retirement_annual_return=_decimal(retirement.get("annual_return", "0.07")),
            )
        except KeyError as e:
            raise ConfigurationError(f"Calculator config is missing section {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Calculator config is malformed: {e}") from e


def load_bracket_config(path: Optional[Path] = None) -> BracketConfig:
    """
    Load a BracketConfig from a JSON file (defaults to the packaged table).

    Raises:
        ConfigurationError: if the file is unreadable, not JSON, or incomplete.
    """

    config_path = path or DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except OSError as e:
        raise ConfigurationError(f"Cannot read calculator config {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Calculator config {config_path} is not valid JSON: {e}") from e

    return BracketConfig.from_mapping(data)


def _decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"expected a number, got {value!r}") from e


def _enum_table(enum_cls: Type[E], raw: Mapping[str, Any]) -> Mapping[E, Decimal]:
    table = {}
    for key, value in raw.items():
        try:
            member = enum_cls(key)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown {enum_cls.__name__} key in calculator config: {key!r}"
            ) from e
        table[member] = _decimal(value)
    return MappingProxyType(table)


def _require_complete(name: str, enum_cls: Type[Enum], table: Mapping[Any, Any]) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise ConfigurationError(f"{name} is missing brackets: {', '.join(missing)}")


__all__ = [
    "BracketConfig",
    "DEFAULT_CONFIG_PATH",
    "load_bracket_config",
]
