"""
Type definitions for FinProj.

Purpose
-------
Provides TypedDict definitions for the itemized rows carried by yearly
cashflow snapshots and for the plain-dict shapes written by the
serialization layer. Using TypedDicts documents the expected keys and
keeps the rows JSON-ready.

Usage
-----
>>> from finproj.types import IncomeItemDict, LoanItemDict
>>>
>>> salary: IncomeItemDict = {"name": "Salary", "amount": 90_000.0}
>>> mortgage: LoanItemDict = {
...     "name": "Mortgage", "balance": 240_000.0, "payment_this_year": 18_000.0
... }

Type Definitions
----------------
IncomeItemDict
    One income source in a year: {"name", "amount"}

ExpenseItemDict
    One expense line in a year: {"name", "amount"}

AssetItemDict
    One asset at year end: {"name", "value", "type"}

LoanItemDict
    One loan at year end: {"name", "balance", "payment_this_year"}

ResultEnvelopeDict
    Serialized result wrapper: {"schema_version", "kind", "result"}

PlotColorsDict
    Color overrides accepted by plotting functions
"""

from typing import Any, Dict
from typing_extensions import TypedDict, NotRequired

__all__ = [
    "IncomeItemDict",
    "ExpenseItemDict",
    "AssetItemDict",
    "LoanItemDict",
    "ResultEnvelopeDict",
    "PlotColorsDict",
]


class IncomeItemDict(TypedDict):
    """
    One income line of a yearly snapshot.

    Income streams appear under their own name; Social Security as
    "Social Security", asset withdrawals as "<asset> Withdrawal" and
    positive life events under the event name.
    """

    name: str
    amount: float


class ExpenseItemDict(TypedDict):
    """
    One expense line of a yearly snapshot.

    Loan payments appear as "<loan> Payment"; negative life events are
    listed with their absolute amount.
    """

    name: str
    amount: float


class AssetItemDict(TypedDict):
    """Year-end value of one asset."""

    name: str
    value: float
    type: str


class LoanItemDict(TypedDict):
    """Year-end balance and payments made on one loan."""

    name: str
    balance: float
    payment_this_year: float


class ResultEnvelopeDict(TypedDict):
    """
    JSON envelope written by serialization.save_result().

    Attributes
    ----------
    schema_version : str
        Serialization schema version; mismatches warn on load.
    kind : str
        Result class name (e.g., "SimulationResult").
    result : dict
        The result converted to plain data.
    """

    schema_version: str
    kind: str
    result: Dict[str, Any]


class PlotColorsDict(TypedDict, total=False):
    """
    Color overrides for plotting functions.

    Examples
    --------
    >>> colors: PlotColorsDict = {"median": "navy", "band": "lightsteelblue"}
    """

    median: NotRequired[str]
    band: NotRequired[str]
    inner_band: NotRequired[str]
    baseline: NotRequired[str]
    stressed: NotRequired[str]
