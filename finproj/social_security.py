"""
Social Security style benefit rules for FinProj.

US claiming adjustment relative to full retirement age (67):

- before 62: no benefit (factor 0)
- early (62-66): 5/9 of 1% per month for the first 36 months early,
  5/12 of 1% per additional month
- delayed (68-70): 8/12 of 1% per month past full retirement age
- 70 and later: capped at the age-70 credit (factor 1.24)

Benefits escalate each year after claiming by a cost-of-living adjustment
of 80% of the projection's inflation rate.
"""

from __future__ import annotations

from typing import Optional

from .config import SocialSecurityConfig
from .constants import (
    EARLIEST_CLAIM_AGE,
    FULL_RETIREMENT_AGE,
    MAX_DELAYED_CLAIM_AGE,
    MONTHS_PER_YEAR,
    SS_COLA_FACTOR,
)

__all__ = [
    "claiming_adjustment",
    "annual_benefit",
    "social_security_income",
]

_EARLY_TIER_MONTHS = 36


def claiming_adjustment(claim_age: int, full_retirement_age: int = FULL_RETIREMENT_AGE) -> float:
    """
    Benefit multiplier for claiming at *claim_age*.

    >>> claiming_adjustment(67)
    1.0
    >>> round(claiming_adjustment(62), 4)
    0.7
    >>> round(claiming_adjustment(70), 2)
    1.24
    """
    if claim_age < EARLIEST_CLAIM_AGE:
        return 0.0
    if claim_age >= MAX_DELAYED_CLAIM_AGE:
        return 1.24
    months = (claim_age - full_retirement_age) * MONTHS_PER_YEAR
    if months < 0:
        early = -months
        reduction = (
            min(early, _EARLY_TIER_MONTHS) * 5 / 900
            + max(0, early - _EARLY_TIER_MONTHS) * 5 / 1200
        )
        return 1.0 - reduction
    return 1.0 + months * 8 / 1200


def annual_benefit(
    monthly_benefit: float,
    claim_year: int,
    year: int,
    inflation_rate: float,
    adjustment: float = 1.0,
) -> float:
    """Benefit paid in *year* (0 before *claim_year*), COLA-escalated since claiming."""
    if year < claim_year:
        return 0.0
    cola = (1 + SS_COLA_FACTOR * inflation_rate) ** (year - claim_year)
    return monthly_benefit * MONTHS_PER_YEAR * adjustment * cola


def social_security_income(
    config: Optional[SocialSecurityConfig],
    year: int,
    inflation_rate: float,
) -> float:
    """
    Household benefit for *year*: primary (with the US claiming
    adjustment) plus spouse (unadjusted) once each claim year arrives.
    """
    if config is None:
        return 0.0
    adjustment = 1.0
    if config.country == "US":
        claim_age = config.claim_age if config.claim_age is not None else FULL_RETIREMENT_AGE
        adjustment = claiming_adjustment(claim_age)

    total = annual_benefit(config.monthly_benefit, config.claim_year, year, inflation_rate, adjustment)
    if config.spouse_monthly_benefit and config.spouse_claim_year is not None:
        total += annual_benefit(
            config.spouse_monthly_benefit, config.spouse_claim_year, year, inflation_rate
        )
    return total
