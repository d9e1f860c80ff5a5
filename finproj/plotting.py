"""
Plotting utilities for FinProj results.

Purpose
-------
Quick matplotlib views of engine outputs. The engines never import this
module; matplotlib is loaded lazily inside each function so headless
callers and worker processes never pay for it.

Available plots
---------------
- plot_fan_chart: yearly percentile bands of a Monte Carlo run
- plot_success_by_age: solvency probability through retirement
- plot_scenario_comparison: baseline vs stressed medians and final spreads
- plot_cashflow_projection: net worth, income and expenses by year

Every function accepts ``show``, ``save_path`` and ``return_fig_ax``:

    fig, ax = plot_fan_chart(result, show=False, return_fig_ax=True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Union

import numpy as np

from .types import PlotColorsDict

if TYPE_CHECKING:
    import matplotlib.pyplot as plt
    from .cashflow import LongTermProjectionResult
    from .monte_carlo import RetirementSimulationResult, SimulationResult
    from .scenarios import ScenarioComparisonResult

__all__ = [
    "plot_fan_chart",
    "plot_success_by_age",
    "plot_scenario_comparison",
    "plot_cashflow_projection",
]

_DEFAULT_COLORS: PlotColorsDict = {
    "median": "tab:blue",
    "band": "tab:blue",
    "inner_band": "tab:blue",
    "baseline": "tab:green",
    "stressed": "tab:red",
}


def _fmt_thousands():
    import matplotlib.ticker as mticker
    return mticker.FuncFormatter(lambda x, _: f"{x/1_000:,.0f}K")


def _colors(overrides: Optional[PlotColorsDict]) -> PlotColorsDict:
    merged: PlotColorsDict = dict(_DEFAULT_COLORS)  # type: ignore[assignment]
    if overrides:
        merged.update(overrides)
    return merged


def _finish(fig, ax, *, title: str, show: bool, save_path: Optional[str], return_fig_ax: bool):
    import matplotlib.pyplot as plt

    fig.suptitle(title, fontsize=14, fontweight='bold')
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, bbox_inches='tight', dpi=150)
    if show:
        plt.show()
    if return_fig_ax:
        return fig, ax
    return None


def plot_fan_chart(
    result: Union["SimulationResult", "RetirementSimulationResult"],
    *,
    colors: Optional[PlotColorsDict] = None,
    title: Optional[str] = None,
    figsize=(10, 5),
    show: bool = True,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Percentile fan of yearly balances: P10-P90 outer band, P25-P75 inner
    band and the median line.

    Parameters
    ----------
    result : SimulationResult or RetirementSimulationResult
    colors : PlotColorsDict, optional
        Overrides for "median", "band" and "inner_band".
    title : str, optional
    figsize : tuple, default (10, 5)
    show : bool, default True
        If True, calls plt.show().
    save_path : str, optional
        Write the figure to this path (dpi=150).
    return_fig_ax : bool, default False
        Return (fig, ax) for further customization.
    """
    import matplotlib.pyplot as plt

    c = _colors(colors)
    frame = result.projections_frame()
    years = frame.index.to_numpy()

    fig, ax = plt.subplots(figsize=figsize)
    ax.fill_between(years, frame["p10"], frame["p90"], color=c["band"], alpha=0.15, label="P10-P90")
    ax.fill_between(years, frame["p25"], frame["p75"], color=c["inner_band"], alpha=0.3, label="P25-P75")
    ax.plot(years, frame["median"], color=c["median"], lw=2.5, label="Median")

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("Balance", fontsize=11)
    ax.yaxis.set_major_formatter(_fmt_thousands())
    ax.legend(loc='upper left', fontsize=10)
    ax.grid(True, linestyle="--", alpha=0.4)

    return _finish(
        fig, ax,
        title=title or "Monte Carlo balance projection",
        show=show, save_path=save_path, return_fig_ax=return_fig_ax,
    )


def plot_success_by_age(
    result: "RetirementSimulationResult",
    *,
    colors: Optional[PlotColorsDict] = None,
    title: Optional[str] = None,
    figsize=(10, 5),
    show: bool = True,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """Share of trials still solvent at each age, with the retirement age marked."""
    import matplotlib.pyplot as plt

    c = _colors(colors)
    ages = np.array([p.age for p in result.success_by_age])
    rates = np.array([p.success_rate for p in result.success_by_age]) * 100

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(ages, rates, color=c["median"], lw=2.5)
    ax.axvline(result.config.retirement_age, color='black', linestyle=':', linewidth=1, alpha=0.6,
               label=f"Retirement ({result.config.retirement_age})")
    ax.set_ylim(0, 105)
    ax.set_xlabel("Age", fontsize=11)
    ax.set_ylabel("Solvent trials (%)", fontsize=11)
    ax.legend(loc='lower left', fontsize=10)
    ax.grid(True, alpha=0.3)

    return _finish(
        fig, ax,
        title=title or f"Retirement success: {result.success_probability:.1%}",
        show=show, save_path=save_path, return_fig_ax=return_fig_ax,
    )


def plot_scenario_comparison(
    results: Union["ScenarioComparisonResult", Sequence["ScenarioComparisonResult"]],
    *,
    colors: Optional[PlotColorsDict] = None,
    title: Optional[str] = None,
    figsize=(14, 6),
    show: bool = True,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Two panels: median trajectories (baseline dashed, one line per
    stressed scenario) and boxplots of final balances.

    Accepts one ScenarioComparisonResult or a list from
    ScenarioAnalysisEngine.analyze_multiple_scenarios().
    """
    import matplotlib.pyplot as plt

    items = [results] if not isinstance(results, (list, tuple)) else list(results)
    if not items:
        raise ValueError("plot_scenario_comparison requires at least one result")
    c = _colors(colors)

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    baseline = items[0].baseline.projections_frame()
    axes[0].plot(baseline.index, baseline["median"], color=c["baseline"], lw=2.5,
                 linestyle="--", label="Baseline")
    for item in items:
        frame = item.stressed.projections_frame()
        line_color = c["stressed"] if len(items) == 1 else None
        axes[0].plot(frame.index, frame["median"], color=line_color, lw=1.8, label=item.scenario.name)

    axes[0].set_xlabel("Year", fontsize=11)
    axes[0].set_ylabel("Median balance", fontsize=11)
    axes[0].set_title("Median Trajectories", fontsize=12, fontweight='bold')
    axes[0].yaxis.set_major_formatter(_fmt_thousands())
    axes[0].legend(loc='best', fontsize=9)
    axes[0].grid(True, alpha=0.3)

    final_data = [items[0].baseline.all_outcomes] + [i.stressed.all_outcomes for i in items]
    labels = ["Baseline"] + [i.scenario.type.value for i in items]
    axes[1].boxplot(final_data, showfliers=False)
    axes[1].set_xticks(range(1, len(labels) + 1))
    axes[1].set_xticklabels(labels)
    axes[1].set_ylabel("Final balance", fontsize=11)
    axes[1].set_title("Distribution at horizon", fontsize=12, fontweight='bold')
    axes[1].yaxis.set_major_formatter(_fmt_thousands())
    axes[1].grid(True, alpha=0.3, axis='y')
    axes[1].tick_params(axis='x', rotation=45)

    return _finish(
        fig, axes,
        title=title or "Scenario stress test",
        show=show, save_path=save_path, return_fig_ax=return_fig_ax,
    )


def plot_cashflow_projection(
    result: "LongTermProjectionResult",
    *,
    title: Optional[str] = None,
    figsize=(14, 6),
    show: bool = True,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Left: net worth with assets and debt. Right: gross income, expenses
    and net cashflow per year. The retirement year is marked on both.
    """
    import matplotlib.pyplot as plt

    df = result.to_frame()
    retirement_year = int(df.index.min()) + (
        result.config.retirement_age - result.config.current_age
    )

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    axes[0].plot(df.index, df["net_worth"], lw=2.5, label="Net worth")
    axes[0].plot(df.index, df["total_assets"], lw=1.5, label="Assets")
    axes[0].plot(df.index, -df["total_debt"], lw=1.5, label="Debt (negative)")
    axes[0].set_title("Balance sheet", fontsize=12, fontweight='bold')

    axes[1].plot(df.index, df["gross_income"], lw=1.8, label="Gross income")
    axes[1].plot(df.index, df["total_expenses"], lw=1.8, label="Expenses")
    axes[1].bar(df.index, df["net_cashflow"], alpha=0.3, label="Net cashflow")
    axes[1].set_title("Annual cashflow", fontsize=12, fontweight='bold')

    for ax in axes:
        if df.index.min() <= retirement_year <= df.index.max():
            ax.axvline(retirement_year, color='black', linestyle=':', linewidth=1, alpha=0.5)
        ax.axhline(0, color='gray', linewidth=0.8)
        ax.set_xlabel("Year", fontsize=11)
        ax.yaxis.set_major_formatter(_fmt_thousands())
        ax.legend(loc='best', fontsize=9)
        ax.grid(True, alpha=0.3)

    return _finish(
        fig, axes,
        title=title or "Long-term cashflow projection",
        show=show, save_path=save_path, return_fig_ax=return_fig_ax,
    )
