"""
Progressive income tax for FinProj.

Bracket tables are validated when they are built (contiguous, ordered,
non-zero width, rates in [0, 1]), so tax computation itself never meets a
degenerate table.

Tables
------
- US federal 2024, single (also used for married_separate and
  head_of_household)
- US federal 2024, married filing jointly
- Mexico ISR 2024 (annual)

Example
-------
>>> US_SINGLE.tax(50_000)
6053.0
>>> calculate_income_tax(80_000, TaxConfig(country="US", state_tax_rate=0.05))
16653.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

from .config import Country, FilingStatus, TaxConfig
from .constants import SS_TAXABLE_FRACTION_US
from .exceptions import BracketTableError

__all__ = [
    "TaxBracket",
    "BracketTable",
    "calculate_progressive_tax",
    "US_SINGLE",
    "US_MARRIED_JOINT",
    "MX_ISR",
    "brackets_for",
    "taxable_social_security",
    "calculate_income_tax",
]


@dataclass(frozen=True)
class TaxBracket:
    lower: float
    upper: float
    rate: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


BracketLike = Union[TaxBracket, Tuple[float, float, float]]


class BracketTable:
    """
    Ordered, contiguous progressive bracket table.

    Parameters
    ----------
    brackets : sequence of TaxBracket or (lower, upper, rate)
        First bracket must start at 0; each next bracket starts where the
        previous one ends. The last upper bound may be ``math.inf``.
    name : str
        Label used in error messages and repr.

    Raises
    ------
    BracketTableError
        Empty table, gap/overlap, zero-width or inverted bracket, rate
        outside [0, 1].
    """

    def __init__(self, brackets: Sequence[BracketLike], name: str = "custom"):
        self.name = name
        parsed = tuple(b if isinstance(b, TaxBracket) else TaxBracket(*b) for b in brackets)
        if not parsed:
            raise BracketTableError(f"Bracket table '{name}' is empty")
        if parsed[0].lower != 0:
            raise BracketTableError(
                f"Bracket table '{name}' must start at 0 (got {parsed[0].lower})"
            )
        for i, b in enumerate(parsed, start=1):
            if not b.upper > b.lower:
                raise BracketTableError(
                    f"Bracket {i} of '{name}' has zero or negative width "
                    f"(min={b.lower}, max={b.upper})"
                )
            if not 0.0 <= b.rate <= 1.0:
                raise BracketTableError(
                    f"Bracket {i} of '{name}' has rate {b.rate} outside [0, 1]"
                )
        for i, (prev, nxt) in enumerate(zip(parsed, parsed[1:]), start=2):
            if nxt.lower != prev.upper:
                raise BracketTableError(
                    f"Bracket {i} of '{name}' starts at {nxt.lower} but the previous "
                    f"bracket ends at {prev.upper}"
                )
        self._brackets = parsed

    def __iter__(self) -> Iterator[TaxBracket]:
        return iter(self._brackets)

    def __len__(self) -> int:
        return len(self._brackets)

    def __repr__(self) -> str:
        return f"BracketTable(name={self.name!r}, brackets={len(self._brackets)})"

    def tax(self, income: float) -> float:
        """Progressive tax owed on *income* (0 for non-positive income)."""
        owed = 0.0
        remaining = income
        for b in self._brackets:
            if remaining <= 0:
                break
            taxed = min(remaining, b.width)
            owed += taxed * b.rate
            remaining -= taxed
        return owed

    def marginal_rate(self, income: float) -> float:
        """Rate of the bracket containing *income*."""
        for b in self._brackets:
            if income < b.upper:
                return b.rate
        return self._brackets[-1].rate


def calculate_progressive_tax(income: float, brackets: Union[BracketTable, Sequence[BracketLike]]) -> float:
    """Progressive tax on *income* against *brackets* (validated if raw)."""
    table = brackets if isinstance(brackets, BracketTable) else BracketTable(brackets)
    return table.tax(income)


# ---------------------------------------------------------------------------
# Jurisdiction tables
# ---------------------------------------------------------------------------

US_SINGLE = BracketTable(
    [
        (0, 11_600, 0.10),
        (11_600, 47_150, 0.12),
        (47_150, 100_525, 0.22),
        (100_525, 191_950, 0.24),
        (191_950, 243_725, 0.32),
        (243_725, 609_350, 0.35),
        (609_350, math.inf, 0.37),
    ],
    name="US single 2024",
)

US_MARRIED_JOINT = BracketTable(
    [
        (0, 23_200, 0.10),
        (23_200, 94_300, 0.12),
        (94_300, 201_050, 0.22),
        (201_050, 383_900, 0.24),
        (383_900, 487_450, 0.32),
        (487_450, 731_200, 0.35),
        (731_200, math.inf, 0.37),
    ],
    name="US married joint 2024",
)

MX_ISR = BracketTable(
    [
        (0, 8_952.49, 0.0192),
        (8_952.49, 75_984.55, 0.064),
        (75_984.55, 133_536.07, 0.1088),
        (133_536.07, 155_229.80, 0.16),
        (155_229.80, 185_852.57, 0.1792),
        (185_852.57, 374_837.88, 0.2136),
        (374_837.88, 590_795.99, 0.2352),
        (590_795.99, 1_127_926.84, 0.30),
        (1_127_926.84, 1_503_902.46, 0.32),
        (1_503_902.46, 4_511_707.37, 0.34),
        (4_511_707.37, math.inf, 0.35),
    ],
    name="MX ISR 2024",
)


def brackets_for(country: Country, filing_status: FilingStatus = "single") -> BracketTable:
    """Bracket table for a jurisdiction; US married_joint has its own table."""
    if country == "MX":
        return MX_ISR
    if filing_status == "married_joint":
        return US_MARRIED_JOINT
    return US_SINGLE


def taxable_social_security(social_security_income: float, country: Country) -> float:
    """Portion of Social Security income subject to income tax."""
    if country == "US":
        return social_security_income * SS_TAXABLE_FRACTION_US
    return 0.0


def calculate_income_tax(
    taxable_income: float,
    config: TaxConfig,
    social_security_income: float = 0.0,
) -> float:
    """
    Annual income tax under *config*.

    Taxable base = taxable income + taxable Social Security - deductions.
    US adds a flat state tax on the same base.
    """
    base = (
        taxable_income
        + taxable_social_security(social_security_income, config.country)
        - config.annual_deductions
    )
    tax = brackets_for(config.country, config.filing_status).tax(base)
    if config.country == "US" and config.state_tax_rate:
        tax += max(0.0, base * config.state_tax_rate)
    return tax
