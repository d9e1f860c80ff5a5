"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
"""

import json

import pytest
from click.testing import CliRunner

from finproj import __version__
from finproj.cli import main
from finproj.serialization import save_config


# ============================================================================
# FIXTURES
# ============================================================================

ENV = {"FINPROJ_EXECUTOR": "none", "FINPROJ_LOG_LEVEL": "ERROR"}


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner):
    """Invoke the CLI with inline execution."""
    def _invoke(*args, **kwargs):
        return runner.invoke(main, list(args), env=ENV, **kwargs)
    return _invoke


@pytest.fixture
def sim_file(tmp_path, sim_config):
    path = tmp_path / "sim.json"
    save_config(sim_config.model_copy(update={"iterations": 200}), path)
    return path


@pytest.fixture
def household_file(tmp_path, household_config):
    path = tmp_path / "household.json"
    save_config(household_config, path)
    return path


# ============================================================================
# MAIN GROUP
# ============================================================================

class TestMainCommand:
    """Test main command group."""

    def test_main_help(self, invoke):
        """Test main help message."""
        result = invoke("--help")
        assert result.exit_code == 0
        for command in ("simulate", "retire", "stress", "project", "config"):
            assert command in result.output

    def test_main_version(self, invoke):
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_settings(self, runner):
        result = runner.invoke(main, ["scenarios"], env={"FINPROJ_EXECUTOR": "gpu"})
        assert result.exit_code == 1
        assert "FINPROJ_" in result.output


# ============================================================================
# MONTE CARLO COMMANDS
# ============================================================================

class TestSimulateCommand:
    """Test simulate command."""

    def test_simulate_requires_config(self, invoke):
        result = invoke("simulate")
        assert result.exit_code != 0
        assert "--config" in result.output

    def test_simulate_table(self, invoke, sim_file):
        result = invoke("simulate", "-c", str(sim_file), "--seed", "42")
        assert result.exit_code == 0
        assert "Simulation Results" in result.output
        assert "Median Final Balance" in result.output

    def test_simulate_quiet_is_reproducible(self, invoke, sim_file):
        def run():
            result = invoke("-q", "simulate", "-c", str(sim_file), "--seed", "7")
            assert result.exit_code == 0
            return [line for line in result.output.splitlines() if not line.startswith("Runtime")]

        first = run()
        assert "Iterations: 200" in first
        assert any(line.startswith("Success Rate: ") for line in first)
        assert first == run()

    def test_simulate_with_output(self, invoke, sim_file, tmp_path):
        out = tmp_path / "results" / "sim_result.json"
        result = invoke("simulate", "-c", str(sim_file), "-s", "1", "-o", str(out))
        assert result.exit_code == 0
        assert out.exists()
        data = json.loads(out.read_text())
        assert data["kind"] == "SimulationResult"
        assert "all_outcomes" not in data["result"]

    def test_simulate_with_plot(self, invoke, sim_file, tmp_path):
        image = tmp_path / "fan.png"
        result = invoke("-q", "simulate", "-c", str(sim_file), "--plot", str(image))
        assert result.exit_code == 0
        assert image.exists()

    def test_simulate_engine_bounds(self, invoke, tmp_path, sim_config):
        path = tmp_path / "too_few.json"
        save_config(sim_config.model_copy(update={"iterations": 10}), path)
        result = invoke("simulate", "-c", str(path))
        assert result.exit_code == 1
        assert "Iterations must be at least 100" in result.output


class TestOtherMonteCarloCommands:
    """Test retire, withdrawal-rate and goal commands."""

    def test_retire(self, invoke, tmp_path, retirement_config):
        path = tmp_path / "retire.json"
        save_config(retirement_config.model_copy(update={"iterations": 200}), path)
        result = invoke("-q", "retire", "-c", str(path), "-s", "3")
        assert result.exit_code == 0
        assert "Ages: 55 -> 65 -> 85" in result.output
        assert "Success Probability: " in result.output

    def test_withdrawal_rate(self, invoke, tmp_path, swr_params):
        path = tmp_path / "swr.json"
        save_config(swr_params.model_copy(update={"iterations": 200}), path)
        result = invoke("-q", "withdrawal-rate", "-c", str(path), "-s", "5")
        assert result.exit_code == 0
        assert "Withdrawal Rate: " in result.output
        assert "Converged: " in result.output

    def test_goal(self, invoke, tmp_path, goal_config):
        path = tmp_path / "goal.json"
        save_config(goal_config.model_copy(update={"iterations": 200}), path)
        result = invoke("-q", "goal", "-c", str(path), "-s", "5")
        assert result.exit_code == 0
        assert "Target: $200,000" in result.output
        assert "Recommended Contribution: $" in result.output


# ============================================================================
# SCENARIO COMMANDS
# ============================================================================

class TestScenarioCommands:
    """Test scenarios and stress commands."""

    def test_scenarios_list(self, invoke):
        result = invoke("-q", "scenarios")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 7
        assert any(line.startswith("market_crash: ") for line in lines)

    def test_scenarios_table(self, invoke):
        result = invoke("scenarios")
        assert result.exit_code == 0
        assert "Predefined Scenarios" in result.output

    def test_stress_selected(self, invoke, sim_file):
        result = invoke("-q", "stress", "-c", str(sim_file), "-S", "market_crash", "-S", "job_loss")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert [line.split(":")[0] for line in lines] == ["market_crash", "job_loss"]

    def test_stress_table(self, invoke, sim_file):
        result = invoke("stress", "-c", str(sim_file), "-S", "recession", "-s", "2")
        assert result.exit_code == 0
        assert "Stress Test" in result.output

    def test_stress_unknown_scenario(self, invoke, sim_file):
        result = invoke("stress", "-c", str(sim_file), "-S", "alien_invasion")
        assert result.exit_code == 1
        assert "Unknown scenario type" in result.output


# ============================================================================
# CASHFLOW COMMAND
# ============================================================================

class TestProjectCommand:
    """Test project command."""

    def test_project(self, invoke, household_file):
        result = invoke("-q", "project", "-c", str(household_file))
        assert result.exit_code == 0
        assert "Years: 2025-2055" in result.output
        assert "Risk Score: " in result.output

    def test_project_with_what_if(self, invoke, household_file, tmp_path):
        changes = tmp_path / "changes.json"
        changes.write_text(json.dumps([
            {"name": "Retire at 60", "modifications": {"retirement_age": 60}},
        ]))
        result = invoke("-q", "project", "-c", str(household_file), "--what-if", str(changes))
        assert result.exit_code == 0
        assert "baseline" in result.output
        assert "Retire at 60" in result.output

    def test_project_bad_what_if(self, invoke, household_file, tmp_path):
        changes = tmp_path / "changes.json"
        changes.write_text(json.dumps({"name": "Typo", "modifications": {"retire": 60}}))
        result = invoke("-q", "project", "-c", str(household_file), "--what-if", str(changes))
        assert result.exit_code == 1
        assert "what-if comparison failed" in result.output

    def test_project_with_output(self, invoke, household_file, tmp_path):
        out = tmp_path / "projection.json"
        result = invoke("-q", "project", "-c", str(household_file), "-o", str(out))
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["kind"] == "LongTermProjectionResult"
        assert len(data["result"]["yearly_snapshots"]) == 31


# ============================================================================
# CONFIG COMMANDS
# ============================================================================

class TestConfigCommand:
    """Test config subcommands."""

    @pytest.mark.parametrize("kind", ["simulation", "retirement", "withdrawal", "goal", "projection"])
    def test_create_then_validate(self, invoke, tmp_path, kind):
        path = tmp_path / f"{kind}.json"
        created = invoke("config", "create", str(path), "--kind", kind)
        assert created.exit_code == 0
        assert path.exists()

        validated = invoke("-q", "config", "validate", str(path))
        assert validated.exit_code == 0

    def test_created_simulation_runs(self, invoke, tmp_path):
        path = tmp_path / "sim.json"
        invoke("config", "create", str(path))
        result = invoke("-q", "simulate", "-c", str(path), "-s", "1")
        assert result.exit_code == 0

    def test_create_refuses_overwrite(self, invoke, sim_file):
        before = sim_file.read_text()
        result = invoke("config", "create", str(sim_file), input="n\n")
        assert "Aborted." in result.output
        assert sim_file.read_text() == before

    def test_validate_shows_fields(self, invoke, sim_file):
        result = invoke("-q", "config", "validate", str(sim_file))
        assert "initial_balance: 100000.0" in result.output


# ============================================================================
# ERROR HANDLING
# ============================================================================

class TestErrorHandling:
    """Test CLI error handling."""

    def test_invalid_json(self, invoke, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = invoke("simulate", "-c", str(path))
        assert result.exit_code == 1
        assert "could not load" in result.output

    def test_invalid_fields(self, invoke, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({
            "current_age": 40, "retirement_age": 35, "life_expectancy": 90,
            "current_savings": 0, "pre_retirement_return": 0.05,
            "post_retirement_return": 0.04, "return_volatility": 0.1,
        }))
        result = invoke("retire", "-c", str(path))
        assert result.exit_code == 1
        assert "retirement_age" in result.output

    def test_validate_bare_file_needs_kind(self, invoke, tmp_path):
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"initial_balance": 1}))
        result = invoke("config", "validate", str(path))
        assert result.exit_code == 1
        assert "no 'kind'" in result.output
