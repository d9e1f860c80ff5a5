"""
Command-Line Interface for FinProj.

Purpose
-------
Runs the projection engines from JSON configuration files without
writing Python code.

Commands
--------
- simulate: Monte Carlo portfolio simulation
- retire: Accumulation + drawdown retirement simulation
- withdrawal-rate: Safe withdrawal rate search
- goal: Probability of reaching a savings goal
- stress: Baseline vs stressed scenario comparison
- scenarios: List the predefined stress scenarios
- project: Long-term deterministic cashflow projection
- config: Create and validate configuration files

Example Usage
-------------
    # Create a starter config, then run it
    $ finproj config create sim.json --kind simulation
    $ finproj simulate -c sim.json --seed 42 -o results/sim.json

    # Stress test against two scenarios
    $ finproj stress -c sim.json -S market_crash -S recession

    # Show version
    $ finproj --version

Engine settings (executor, workers, default seed, log level) come from
FINPROJ_* environment variables; see config.AppSettings.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import click

from . import __version__
from .exceptions import FinProjError


def _import_rich():
    """Lazy import Rich for better startup time."""
    from rich.console import Console
    from rich.table import Table
    from rich.panel import Panel
    return Console, Table, Panel


def _get_console():
    Console, *_ = _import_rich()
    return Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _show(ctx: click.Context, title: str, rows: Iterable[Tuple[str, str]]) -> None:
    """Print metric/value rows as a Rich table, or plain lines when quiet."""
    console = ctx.obj.get("console")
    rows = list(rows)
    if ctx.obj.get("quiet") or console is None:
        for metric, value in rows:
            if metric:
                click.echo(f"{metric}: {value}")
        return

    _, Table, _ = _import_rich()
    table = Table(title=title, show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for metric, value in rows:
        table.add_row(metric, value)
    console.print(table)


def _money(x: Optional[float]) -> str:
    return "n/a" if x is None else f"${x:,.0f}"


def _pct(x: Optional[float]) -> str:
    return "n/a" if x is None else f"{x:.1%}"


def _load(path: Path, model):
    from .serialization import load_config

    try:
        return load_config(path, model)
    except (FinProjError, ValueError, OSError) as e:
        _fail(f"could not load {path}: {e}")


def _engine(ctx: click.Context, seed: Optional[int]):
    from .monte_carlo import MonteCarloEngine

    settings = ctx.obj["settings"]
    if seed is not None:
        settings = settings.model_copy(update={"seed": seed})
    return MonteCarloEngine.from_settings(settings)


def _save(ctx: click.Context, result, output: Optional[Path]) -> None:
    if output is None:
        return
    from .serialization import save_result

    save_result(result, output)
    if not ctx.obj.get("quiet"):
        click.echo(f"Results saved to {output}")


_config_option = click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to configuration file (JSON)",
)
_seed_option = click.option(
    "--seed", "-s", type=int, default=None,
    help="Random seed for reproducibility (overrides FINPROJ_SEED)",
)
_output_option = click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Write the result as JSON to this file",
)


@click.group()
@click.version_option(version=__version__, prog_name="finproj")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    FinProj - Financial projection engines.

    Monte Carlo simulation, stress testing and long-term cashflow
    projection for personal finance planning.

    Use 'finproj COMMAND --help' for command-specific help.
    """
    from pydantic import ValidationError as PydanticValidationError
    from .config import AppSettings

    try:
        settings = AppSettings()
    except PydanticValidationError as e:
        _fail(f"invalid FINPROJ_* settings: {e}")
    _configure_logging(settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = _get_console()
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# Monte Carlo
# ---------------------------------------------------------------------------

@main.command()
@_config_option
@_seed_option
@_output_option
@click.option("--plot", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Save a fan chart image to this path")
@click.pass_context
def simulate(
    ctx: click.Context,
    config: Path,
    seed: Optional[int],
    output: Optional[Path],
    plot: Optional[Path],
) -> None:
    """
    Run a Monte Carlo portfolio simulation.

    Example:
        finproj simulate -c sim.json --seed 42
    """
    from .config import SimulationConfig

    cfg = _load(config, SimulationConfig)
    try:
        result = _engine(ctx, seed).simulate(cfg)
    except FinProjError as e:
        _fail(str(e))

    fb = result.final_balance
    _show(ctx, "Simulation Results", [
        ("Years", f"{cfg.years}"),
        ("Iterations", f"{cfg.iterations:,}"),
        ("", ""),
        ("Median Final Balance", _money(fb.median)),
        ("10th Percentile", _money(fb.p10)),
        ("90th Percentile", _money(fb.p90)),
        ("Success Rate", _pct(result.probabilities.success_rate)),
        ("Doubling Probability", _pct(result.probabilities.doubling_probability)),
        ("Keeps Purchasing Power", _pct(result.probabilities.maintaining_purchasing_power)),
        ("Runtime", f"{result.execution_time_ms:.0f} ms"),
    ])
    _save(ctx, result, output)

    if plot is not None:
        import matplotlib
        matplotlib.use("Agg")
        from .plotting import plot_fan_chart

        plot_fan_chart(result, show=False, save_path=str(plot))


@main.command()
@_config_option
@_seed_option
@_output_option
@click.pass_context
def retire(ctx: click.Context, config: Path, seed: Optional[int], output: Optional[Path]) -> None:
    """
    Simulate saving until retirement and drawing down afterwards.

    Example:
        finproj retire -c retirement.json
    """
    from .config import RetirementSimulationConfig

    cfg = _load(config, RetirementSimulationConfig)
    try:
        result = _engine(ctx, seed).simulate_retirement(cfg)
    except FinProjError as e:
        _fail(str(e))

    depletion = result.median_years_until_depletion
    _show(ctx, "Retirement Simulation", [
        ("Ages", f"{cfg.current_age} -> {cfg.retirement_age} -> {cfg.life_expectancy}"),
        ("Success Probability", _pct(result.success_probability)),
        ("Median at Retirement", _money(result.balance_at_retirement.median)),
        ("Median at Life Expectancy", _money(result.balance_at_life_expectancy.median)),
        ("Years Until Depletion", "never" if depletion is None else f"{depletion:.1f}"),
    ])
    _save(ctx, result, output)


@main.command("withdrawal-rate")
@_config_option
@_seed_option
@click.pass_context
def withdrawal_rate(ctx: click.Context, config: Path, seed: Optional[int]) -> None:
    """
    Find the highest sustainable withdrawal rate.

    Example:
        finproj withdrawal-rate -c swr.json --seed 1
    """
    from .config import SafeWithdrawalParams

    params = _load(config, SafeWithdrawalParams)
    try:
        result = _engine(ctx, seed).solve_safe_withdrawal_rate(params)
    except FinProjError as e:
        _fail(str(e))

    _show(ctx, "Safe Withdrawal Rate", [
        ("Target Success", _pct(params.success_probability)),
        ("Withdrawal Rate", f"{result.rate:.2%}"),
        ("Annual Withdrawal", _money(result.rate * params.portfolio_value)),
        ("Achieved Success", _pct(result.achieved_success_rate)),
        ("Converged", "yes" if result.converged else "no (fallback)"),
        ("Probes", f"{result.probes}"),
    ])


@main.command()
@_config_option
@_seed_option
@_output_option
@click.pass_context
def goal(ctx: click.Context, config: Path, seed: Optional[int], output: Optional[Path]) -> None:
    """
    Estimate the chance of reaching a savings goal.

    Example:
        finproj goal -c goal.json
    """
    from .config import GoalProbabilityConfig

    cfg = _load(config, GoalProbabilityConfig)
    try:
        result = _engine(ctx, seed).calculate_goal_probability(cfg)
    except FinProjError as e:
        _fail(str(e))

    low, high = result.outcome_range
    _show(ctx, "Goal Probability", [
        ("Target", _money(cfg.target_amount)),
        ("Probability", _pct(result.probability)),
        ("Median Outcome", _money(result.median_outcome)),
        ("P10-P90 Range", f"{_money(low)} - {_money(high)}"),
        ("Expected Shortfall", _money(result.expected_shortfall)),
        ("Current Contribution", _money(result.current_contribution)),
        ("Recommended Contribution", _money(result.recommended_contribution)),
    ])
    _save(ctx, result, output)


# ---------------------------------------------------------------------------
# Scenario analysis
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def scenarios(ctx: click.Context) -> None:
    """List the predefined stress scenarios."""
    from .scenarios import get_predefined_scenarios

    items = get_predefined_scenarios()
    console = ctx.obj.get("console")
    if ctx.obj.get("quiet") or console is None:
        for s in items:
            click.echo(f"{s.type.value}: {s.name}")
        return

    _, Table, _ = _import_rich()
    table = Table(title="Predefined Scenarios")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Shocks", justify="right")
    for s in items:
        table.add_row(s.type.value, s.name, s.severity, str(len(s.shocks)))
    console.print(table)


@main.command()
@_config_option
@click.option(
    "--scenario", "-S", "scenario_types", multiple=True,
    help="Scenario type to run (repeatable; default: all predefined)",
)
@_seed_option
@click.pass_context
def stress(
    ctx: click.Context,
    config: Path,
    scenario_types: Tuple[str, ...],
    seed: Optional[int],
) -> None:
    """
    Compare a simulation against stressed copies of itself.

    Example:
        finproj stress -c sim.json -S job_loss -S market_crash
    """
    from .config import SimulationConfig
    from .scenarios import ScenarioAnalysisEngine

    cfg = _load(config, SimulationConfig)
    engine = ScenarioAnalysisEngine(_engine(ctx, seed))
    try:
        results = engine.analyze_multiple_scenarios(cfg, list(scenario_types) or None)
    except FinProjError as e:
        _fail(str(e))

    console = ctx.obj.get("console")
    if ctx.obj.get("quiet") or console is None:
        for r in results:
            c = r.comparison
            click.echo(
                f"{r.scenario.type.value}: median -{c.median_difference_percent:.1f}% "
                f"({c.impact_severity})"
            )
        return

    _, Table, _ = _import_rich()
    table = Table(title="Stress Test", show_header=True)
    table.add_column("Scenario", style="cyan")
    table.add_column("Median Impact", justify="right")
    table.add_column("P10 Impact", justify="right")
    table.add_column("Severity")
    table.add_column("Recovery (yrs)", justify="right")
    for r in results:
        c = r.comparison
        table.add_row(
            r.scenario.name,
            f"{c.median_difference_percent:.1f}%",
            f"{c.p10_difference_percent:.1f}%",
            c.impact_severity,
            "n/a" if c.recovery_years is None else f"{c.recovery_years:.1f}",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Cashflow projection
# ---------------------------------------------------------------------------

@main.command()
@_config_option
@click.option(
    "--what-if", "what_if", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None, help="JSON list of what-if scenarios to compare against the baseline",
)
@_output_option
@click.pass_context
def project(
    ctx: click.Context,
    config: Path,
    what_if: Optional[Path],
    output: Optional[Path],
) -> None:
    """
    Project yearly cashflows, net worth and retirement readiness.

    Example:
        finproj project -c household.json --what-if changes.json
    """
    import json
    from .cashflow import LongTermCashflowEngine
    from .config import LongTermProjectionConfig

    cfg = _load(config, LongTermProjectionConfig)
    engine = LongTermCashflowEngine()
    try:
        result = engine.project(cfg)
    except FinProjError as e:
        _fail(str(e))

    s = result.summary
    _show(ctx, "Long-Term Projection", [
        ("Years", f"{result.yearly_snapshots[0].year}-{result.yearly_snapshots[-1].year}"),
        ("Final Net Worth", _money(result.yearly_snapshots[-1].net_worth)),
        ("Peak Net Worth", f"{_money(s.peak_net_worth.amount)} ({s.peak_net_worth.year})"),
        ("Debt Free", "n/a" if s.debt_free_year is None else str(s.debt_free_year)),
        ("Financially Independent",
         "n/a" if s.financial_independence_year is None else str(s.financial_independence_year)),
        ("Average Savings Rate", _pct(s.average_savings_rate)),
        ("Income Replacement", _pct(s.income_replacement_ratio)),
        ("Risk Score", f"{s.risk_score}/100"),
    ])
    for w in result.warnings:
        click.echo(f"Warning: {w}", err=True)

    if what_if is not None:
        try:
            with open(what_if, "r") as f:
                raw = json.load(f)
            comparison = engine.compare_scenarios(cfg, raw if isinstance(raw, list) else [raw])
        except (FinProjError, ValueError, OSError) as e:
            _fail(f"what-if comparison failed: {e}")
        click.echo(comparison.summary_frame().to_string())

    _save(ctx, result, output)


# ---------------------------------------------------------------------------
# Config management
# ---------------------------------------------------------------------------

def _templates() -> Dict[str, object]:
    from .config import (
        AssetConfig,
        ExpenseCategory,
        GoalProbabilityConfig,
        IncomeStream,
        LoanConfig,
        LongTermProjectionConfig,
        RetirementSimulationConfig,
        SafeWithdrawalParams,
        SimulationConfig,
    )

    return {
        "simulation": SimulationConfig(
            initial_balance=50_000, monthly_contribution=1_000, years=20,
            expected_return=0.07, return_volatility=0.15, inflation_rate=0.03,
        ),
        "retirement": RetirementSimulationConfig(
            current_age=35, retirement_age=65, life_expectancy=90,
            current_savings=100_000, monthly_contribution=1_500, monthly_withdrawal=5_000,
            pre_retirement_return=0.07, post_retirement_return=0.05,
            return_volatility=0.15, inflation_rate=0.03,
        ),
        "withdrawal": SafeWithdrawalParams(
            portfolio_value=1_000_000, years_in_retirement=30, success_probability=0.9,
            expected_return=0.06, return_volatility=0.12, inflation_rate=0.03,
            iterations=1_000,
        ),
        "goal": GoalProbabilityConfig(
            initial_balance=20_000, monthly_contribution=800, years=10,
            target_amount=200_000, expected_return=0.06, return_volatility=0.12,
        ),
        "projection": LongTermProjectionConfig(
            start_year=2025, projection_years=30, current_age=35,
            retirement_age=65, life_expectancy=90,
            income_streams=[IncomeStream(name="Salary", annual_amount=90_000, growth_rate=0.03)],
            expenses=[
                ExpenseCategory(name="Housing", annual_amount=24_000, growth_rate=0.03),
                ExpenseCategory(name="Travel", annual_amount=6_000, essential=False),
            ],
            loans=[LoanConfig(name="Car", balance=20_000, interest_rate=0.05,
                              monthly_payment=450, remaining_months=48, type="auto")],
            assets=[AssetConfig(name="Brokerage", current_value=60_000,
                                expected_return=0.06, monthly_contribution=500)],
            emergency_fund_months=6, current_liquid_savings=15_000,
        ),
    }


@main.group()
def config() -> None:
    """
    Configuration management commands.

    Create and validate engine configuration files.
    """
    pass


@config.command("create")
@click.argument("output_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--kind", "-k",
    type=click.Choice(["simulation", "retirement", "withdrawal", "goal", "projection"]),
    default="simulation",
)
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, kind: str) -> None:
    """
    Create a starter configuration file.

    Example:
        finproj config create my_sim.json --kind simulation
    """
    from .serialization import save_config

    if output_file.exists():
        if not click.confirm(f"{output_file} exists. Overwrite?"):
            click.echo("Aborted.")
            return

    save_config(_templates()[kind], output_file)
    if not ctx.obj.get("quiet"):
        click.echo(f"Created {kind} config at {output_file}")


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate a configuration file written by 'config create'.

    Example:
        finproj config validate my_sim.json
    """
    cfg = _load(config_file, None)
    _show(ctx, "Configuration Valid", [
        (name, str(value))
        for name, value in cfg.model_dump().items()
        if not isinstance(value, (list, dict))
    ])


if __name__ == "__main__":
    main()
