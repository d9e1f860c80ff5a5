"""Statistical utilities for FinProj

Contents
--------
- Moments (mean, variance, std_dev)
- Order statistics (percentile, median, confidence_interval)
- Dependence (covariance, correlation)
- Sampling (Box–Muller normal deviates from an explicit Generator)
- Time value of money (cagr, future_value, future_value_of_annuity, present_value)
- Aggregation (SummaryStatistics, summarize)

All functions are pure: given the same inputs (and the same Generator
state for the samplers) they return the same outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .constants import MONTHS_PER_YEAR

__all__ = [
    # Moments
    "mean",
    "variance",
    "std_dev",
    # Order statistics
    "percentile",
    "median",
    "confidence_interval",
    # Dependence
    "covariance",
    "correlation",
    # Sampling
    "normal_random",
    "normal_random_array",
    # Time value of money
    "cagr",
    "future_value",
    "future_value_of_annuity",
    "present_value",
    # Aggregation
    "SummaryStatistics",
    "summarize",
]

ArrayLike = Union[Sequence[float], np.ndarray]


def _as_array(values: ArrayLike, *, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size == 0:
        raise ValueError(f"Cannot calculate {what} of empty array")
    return arr


# ---------------------------------------------------------------------------
# Moments
# ---------------------------------------------------------------------------

def mean(values: ArrayLike) -> float:
    """Arithmetic mean. Raises on empty input."""
    return float(np.mean(_as_array(values, what="mean")))


def variance(values: ArrayLike) -> float:
    """Sample variance (n - 1 denominator). Requires at least 2 values."""
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size < 2:
        raise ValueError("Variance requires at least 2 values")
    return float(np.var(arr, ddof=1))


def std_dev(values: ArrayLike) -> float:
    """Sample standard deviation (n - 1 denominator). Requires at least 2 values."""
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size < 2:
        raise ValueError("Standard deviation requires at least 2 values")
    return float(np.std(arr, ddof=1))


# ---------------------------------------------------------------------------
# Order statistics
# ---------------------------------------------------------------------------

def percentile(values: ArrayLike, p: float) -> float:
    """Percentile *p* (0-100) with linear interpolation between order statistics.

    The rank is ``p / 100 * (n - 1)``; a fractional rank interpolates
    between the two neighbouring sorted values.
    """
    arr = _as_array(values, what="percentile")
    if p < 0 or p > 100:
        raise ValueError("Percentile must be between 0 and 100")
    return float(np.percentile(arr, p, method="linear"))


def median(values: ArrayLike) -> float:
    """50th percentile."""
    return percentile(values, 50)


def confidence_interval(values: ArrayLike, confidence: float = 0.95) -> Tuple[float, float]:
    """Symmetric percentile interval holding *confidence* of the mass.

    For ``confidence=0.95`` this is ``(P2.5, P97.5)``.
    """
    if confidence <= 0 or confidence >= 1:
        raise ValueError("Confidence must be between 0 and 1")
    alpha = 1.0 - confidence
    return (
        percentile(values, alpha / 2 * 100),
        percentile(values, (1 - alpha / 2) * 100),
    )


# ---------------------------------------------------------------------------
# Dependence
# ---------------------------------------------------------------------------

def _paired(x: ArrayLike, y: ArrayLike, what: str) -> Tuple[np.ndarray, np.ndarray]:
    xa = np.asarray(x, dtype=float).ravel()
    ya = np.asarray(y, dtype=float).ravel()
    if xa.size != ya.size:
        raise ValueError(f"Arrays must have equal length for {what}")
    if xa.size < 2:
        raise ValueError(f"{what.capitalize()} requires at least 2 data points")
    return xa, ya


def covariance(x: ArrayLike, y: ArrayLike) -> float:
    """Sample covariance (n - 1 denominator)."""
    xa, ya = _paired(x, y, "covariance")
    return float(np.sum((xa - xa.mean()) * (ya - ya.mean())) / (xa.size - 1))


def correlation(x: ArrayLike, y: ArrayLike) -> float:
    """Pearson correlation in [-1, 1]; 0 when either series is constant."""
    xa, ya = _paired(x, y, "correlation")
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denom = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denom == 0:
        return 0.0
    return float(np.sum(dx * dy) / denom)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def normal_random_array(
    count: int,
    mean: float = 0.0,
    std: float = 1.0,
    *,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Draw *count* normal deviates with the Box–Muller transform.

    Each deviate consumes two uniforms from *rng*:

        z = sqrt(-2 ln u1) * cos(2 pi u2),   u1 in (0, 1], u2 in [0, 1)

    and is scaled to ``z * std + mean``. ``u1`` is taken as ``1 - U[0, 1)``
    so the logarithm never sees zero.

    Parameters
    ----------
    count : int
        Number of deviates (>= 0).
    mean, std : float
        Location and scale of the target distribution.
    rng : numpy.random.Generator, optional
        Random stream. A fresh unseeded Generator is used when omitted.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative (got {count}).")
    gen = rng if rng is not None else np.random.default_rng()
    u1 = 1.0 - gen.random(count)
    u2 = gen.random(count)
    z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
    return z * std + mean


def normal_random(
    mean: float = 0.0,
    std: float = 1.0,
    *,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Single Box–Muller normal deviate. See normal_random_array()."""
    return float(normal_random_array(1, mean, std, rng=rng)[0])


# ---------------------------------------------------------------------------
# Time value of money
# ---------------------------------------------------------------------------

def cagr(beginning_value: float, ending_value: float, years: float) -> float:
    """Compound annual growth rate between two values."""
    if beginning_value <= 0:
        raise ValueError("Beginning value must be positive")
    if years <= 0:
        raise ValueError("Years must be positive")
    return float((ending_value / beginning_value) ** (1.0 / years) - 1.0)


def future_value(
    present_value: float,
    rate: float,
    years: float,
    periods_per_year: int = MONTHS_PER_YEAR,
) -> float:
    """Future value of a lump sum under periodic compounding of a nominal rate."""
    periodic = rate / periods_per_year
    return float(present_value * (1.0 + periodic) ** (years * periods_per_year))


def future_value_of_annuity(
    payment: float,
    rate: float,
    years: float,
    periods_per_year: int = MONTHS_PER_YEAR,
) -> float:
    """Future value of a level end-of-period payment stream."""
    periodic = rate / periods_per_year
    periods = years * periods_per_year
    if periodic == 0:
        return float(payment * periods)
    return float(payment * (((1.0 + periodic) ** periods - 1.0) / periodic))


def present_value(future_value: float, rate: float, years: float) -> float:
    """Discount *future_value* at an annually compounded *rate*."""
    return float(future_value / (1.0 + rate) ** years)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SummaryStatistics:
    count: int
    mean: float
    median: float
    std_dev: float
    variance: float
    min: float
    max: float
    p10: float
    p25: float
    p75: float
    p90: float


def summarize(values: ArrayLike) -> SummaryStatistics:
    """Full percentile/mean/min/max bundle for a sample.

    Dispersion fields are 0 for single-element samples.
    """
    arr = _as_array(values, what="summary")
    p10, p25, p50, p75, p90 = np.percentile(arr, [10, 25, 50, 75, 90], method="linear")
    has_spread = arr.size >= 2
    return SummaryStatistics(
        count=int(arr.size),
        mean=float(arr.mean()),
        median=float(p50),
        std_dev=float(np.std(arr, ddof=1)) if has_spread else 0.0,
        variance=float(np.var(arr, ddof=1)) if has_spread else 0.0,
        min=float(arr.min()),
        max=float(arr.max()),
        p10=float(p10),
        p25=float(p25),
        p75=float(p75),
        p90=float(p90),
    )
