"""
Custom exceptions for FinProj.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across the projection engines. All exceptions inherit from FinProjError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
FinProjError (base)
├── ConfigurationError - Invalid static configuration
│   └── BracketTableError - Malformed progressive tax bracket table
└── ValidationError - Input fails a documented bound
    └── ConfigValidationError - Monte Carlo bound violated (iterations, years, volatility)

Usage
-----
>>> from finproj.exceptions import ConfigValidationError
>>>
>>> try:
...     engine.simulate(config)
... except ConfigValidationError as e:
...     print(f"{e.field}: {e}")
"""

from typing import Optional, Union

__all__ = [
    "FinProjError",
    "ConfigurationError",
    "BracketTableError",
    "ValidationError",
    "ConfigValidationError",
]


class FinProjError(Exception):
    """
    Base exception for all FinProj errors.

    Examples
    --------
    >>> try:
    ...     engine.simulate(config)
    ... except FinProjError as e:
    ...     logger.error(f"Simulation failed: {e}")
    """
    pass


class ConfigurationError(FinProjError):
    """
    Invalid static configuration.

    Raised when a configuration cannot be used at all, such as:
    - Unknown scenario identifiers
    - What-if overrides naming fields that do not exist
    - Unsupported jurisdiction/filing-status combinations

    Examples
    --------
    >>> raise ConfigurationError("Unknown scenario type 'alien_invasion'")
    """
    pass


class BracketTableError(ConfigurationError):
    """
    Malformed progressive tax bracket table.

    Raised at table construction time, never during a projection:
    - Zero-width or inverted brackets (max <= min)
    - Gaps or overlaps between consecutive brackets
    - Marginal rates outside [0, 1]

    Examples
    --------
    >>> raise BracketTableError(
    ...     "Bracket 3 has zero width (min=47150.0, max=47150.0)"
    ... )
    """
    pass


class ValidationError(FinProjError):
    """
    Input fails a documented bound.

    Examples
    --------
    >>> raise ValidationError("success_probability must be in (0, 1), got 1.5")
    """
    pass


class ConfigValidationError(ValidationError):
    """
    Monte Carlo configuration violates one of the engine bounds.

    Raised synchronously before any sampling. Always recoverable by the
    caller correcting the input; never retried internally.

    Parameters
    ----------
    message : str
        Human-readable message naming the field and the bound.
    field : str, optional
        Name of the offending configuration field.
    bound : int or float, optional
        The bound that was violated.

    Examples
    --------
    >>> raise ConfigValidationError(
    ...     "Iterations must be at least 100 for meaningful results",
    ...     field="iterations",
    ...     bound=100,
    ... )
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        bound: Optional[Union[int, float]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.bound = bound
