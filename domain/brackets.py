"""
Domain: quiz answer enumerations.

Bracket values are the exact option values the quiz front end submits. Income,
monthly housing cost and age brackets are lookup keys into BracketConfig; the
remaining enums are qualitative answers that only feed tagging and storage.
"""

from __future__ import annotations

from enum import Enum


class IncomeBracket(str, Enum):
    UNDER_100K = "under_100k"
    FROM_100K_TO_150K = "100k_150k"
    FROM_150K_TO_250K = "150k_250k"
    FROM_250K_TO_400K = "250k_400k"
    FROM_400K_TO_750K = "400k_750k"
    OVER_750K = "over_750k"
    FROM_750K_TO_1M = "750k_1m"
    FROM_1M_TO_1_5M = "1m_1.5m"
    FROM_1_5M_TO_2M = "1.5m_2m"
    OVER_2M = "over_2m"
    PREFER_NOT_SAY = "prefer_not_say"


# Brackets the results page treats as the top of the market.
TOP_INCOME_BRACKETS = frozenset(
    {
        IncomeBracket.OVER_750K,
        IncomeBracket.FROM_750K_TO_1M,
        IncomeBracket.FROM_1M_TO_1_5M,
        IncomeBracket.FROM_1_5M_TO_2M,
        IncomeBracket.OVER_2M,
    }
)


class MonthlyCostBracket(str, Enum):
    UNDER_2K = "under_2k"
    FROM_2K_TO_3_5K = "2k_3.5k"
    FROM_3_5K_TO_5K = "3.5k_5k"
    FROM_5K_TO_7_5K = "5k_7.5k"
    FROM_7_5K_TO_10K = "7.5k_10k"
    OVER_10K = "over_10k"
    PREFER_NOT_SAY = "prefer_not_say"


class AgeBracket(str, Enum):
    UNDER_30 = "under_30"
    FROM_30_TO_39 = "30_39"
    FROM_40_TO_49 = "40_49"
    FROM_50_TO_59 = "50_59"
    SIXTY_PLUS = "60_plus"


class HousingStatus(str, Enum):
    RENT = "rent"
    OWN_CONDO = "own_condo"
    OWN_HOUSE = "own_house"
    EXPLORING = "exploring"


class Frustration(str, Enum):
    TAXES = "taxes"
    COST_OF_LIVING = "cost_of_living"
    WINTERS = "winters"
    CONGESTION = "congestion"
    REGULATIONS = "regulations"
    SPACE = "space"


class Benefit(str, Enum):
    NO_TAX = "no_tax"
    OUTDOOR_LIFESTYLE = "outdoor_lifestyle"
    MORE_SPACE = "more_space"
    PRO_BUSINESS = "pro_business"
    WORK_LIFE_BALANCE = "work_life_balance"
    NETWORKING = "networking"


class Timeline(str, Enum):
    WITHIN_6_MONTHS = "0-6mo"
    SIX_TO_12_MONTHS = "6-12mo"
    ONE_TO_3_YEARS = "1-3y"
    SOMEDAY = "someday"


class Concern(str, Enum):
    HURRICANES = "hurricanes"
    HEAT = "heat"
    TRANSIT = "transit"
    CAREER_NETWORK = "career_network"
    INDUSTRY_REMOTE = "industry_remote"
    SCHOOLS = "schools"


__all__ = [
    "IncomeBracket",
    "TOP_INCOME_BRACKETS",
    "MonthlyCostBracket",
    "AgeBracket",
    "HousingStatus",
    "Frustration",
    "Benefit",
    "Timeline",
    "Concern",
]
