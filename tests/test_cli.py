"""Tests for the command line interface."""

import csv
import json
import pytest
from typer.testing import CliRunner

from sweetspot.cli import app, ERROR_CODES, _resolve_sweep_inputs
from sweetspot.engine.models import eur

runner = CliRunner()


def _json(result):
    return json.loads(result.stdout)


class TestResolveSweepInputs:

    def test_defaults_from_config(self, cfg_2026):
        r, e, s, m = _resolve_sweep_inputs(cfg_2026, None, None, None, None)
        assert (r, e, s, m) == (eur(50000), eur(1000), eur(1000), eur(16576))

    def test_explicit_values_win(self, cfg_2026):
        r, e, s, m = _resolve_sweep_inputs(cfg_2026, 80000, 5000, 500, 20000)
        assert (r, e, s, m) == (eur(80000), eur(5000), eur(500), eur(20000))

    def test_step_must_be_positive(self, cfg_2026):
        with pytest.raises(ValueError, match="Step must be positive"):
            _resolve_sweep_inputs(cfg_2026, None, None, 0, None)


class TestOptimizeCommand:

    def test_json_output(self):
        result = runner.invoke(app, ["optimize", "--year", "2026", "--json"])
        assert result.exit_code == 0
        payload = _json(result)
        assert payload["success"] is True
        data = payload["data"]
        assert data["scenario_count"] == 33
        assert data["inputs"]["net_profit"] == 49000.0
        spot = data["sweet_spot"]
        assert spot["total_tax"] <= data["lowest_salary"]["total_tax"]
        assert spot["total_tax"] <= data["highest_salary"]["total_tax"]

    def test_rich_output(self):
        result = runner.invoke(app, ["optimize", "--year", "2026"])
        assert result.exit_code == 0
        assert "OPTIMAL SALARY" in result.stdout
        assert "Compared with Edge Strategies" in result.stdout

    def test_empty_sweep(self):
        result = runner.invoke(app, ["optimize", "--year", "2026", "--min-salary", "60000", "--json"])
        assert result.exit_code == ERROR_CODES["EMPTY_SWEEP"]
        payload = _json(result)
        assert payload["success"] is False
        assert payload["error"]["code"] == "EMPTY_SWEEP"

    def test_zero_step(self):
        result = runner.invoke(app, ["optimize", "--year", "2026", "--step", "0"])
        assert result.exit_code == ERROR_CODES["INVALID_INPUT"]
        assert "Step must be positive" in result.stdout

    def test_missing_year(self):
        result = runner.invoke(app, ["optimize", "--year", "1999", "--json"])
        assert result.exit_code == ERROR_CODES["FILE_NOT_FOUND"]
        assert _json(result)["error"]["code"] == "FILE_NOT_FOUND"


class TestSweepCommand:

    def test_json_scenarios(self):
        result = runner.invoke(app, ["sweep", "--year", "2026", "--json"])
        assert result.exit_code == 0
        scenarios = _json(result)["data"]["scenarios"]
        assert len(scenarios) == 33
        assert scenarios[0]["salary"] == 16576.0
        assert scenarios[0]["total_tax"] == pytest.approx(13688.82)

    def test_custom_inputs(self):
        result = runner.invoke(app, [
            "sweep", "--year", "2026", "--json",
            "--revenue", "30000", "--expenses", "0", "--step", "5000", "--min-salary", "20000",
        ])
        assert result.exit_code == 0
        salaries = [s["salary"] for s in _json(result)["data"]["scenarios"]]
        assert salaries == [20000.0, 25000.0, 30000.0]

    def test_csv_output(self, tmp_path):
        out = tmp_path / "scenarios.csv"
        result = runner.invoke(app, ["sweep", "--year", "2026", "--out", str(out)])
        assert result.exit_code == 0
        with out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 33
        assert list(rows[0].keys()) == [
            "salary", "income_tax", "corporate_tax", "dividend_tax",
            "corporate_and_dividend_tax", "total_tax",
        ]

    def test_empty_sweep_is_not_an_error(self):
        result = runner.invoke(app, ["sweep", "--year", "2026", "--min-salary", "60000", "--json"])
        assert result.exit_code == 0
        assert _json(result)["data"]["scenarios"] == []


class TestReportAndPlot:

    def test_report(self, tmp_path):
        out = tmp_path / "index.html"
        result = runner.invoke(app, ["report", "--year", "2026", "--out", str(out)])
        assert result.exit_code == 0
        assert out.exists()
        assert "Tax Sweet Spot Optimizer 2026" in out.read_text(encoding="utf-8")

    def test_report_empty_sweep(self, tmp_path):
        out = tmp_path / "index.html"
        result = runner.invoke(app, ["report", "--year", "2026", "--min-salary", "60000", "--out", str(out)])
        assert result.exit_code == ERROR_CODES["EMPTY_SWEEP"]
        assert not out.exists()

    def test_plot(self, tmp_path):
        out = tmp_path / "curve.png"
        result = runner.invoke(app, ["plot", "--year", "2026", "--out", str(out)])
        assert result.exit_code == 0
        assert out.read_bytes().startswith(b"\x89PNG")


class TestConfigCommands:

    def test_validate(self):
        result = runner.invoke(app, ["validate", "--year", "2026", "--json"])
        assert result.exit_code == 0
        assert _json(result)["data"]["status"] == "valid"

    def test_validate_missing_year(self):
        result = runner.invoke(app, ["validate", "--year", "1999"])
        assert result.exit_code == ERROR_CODES["VALIDATION_ERROR"]

    def test_list_years(self):
        result = runner.invoke(app, ["list-years", "--json"])
        assert result.exit_code == 0
        assert 2026 in _json(result)["data"]["years"]

    def test_config_summary(self):
        result = runner.invoke(app, ["config-summary", "--year", "2026", "--json"])
        assert result.exit_code == 0
        assert _json(result)["data"]["irpf_bracket_count"] == 10

    def test_config_summary_rich(self):
        result = runner.invoke(app, ["config-summary", "--year", "2026"])
        assert result.exit_code == 0
        assert "TAX CONFIGURATION SUMMARY" in result.stdout

    def test_update_irpf_brackets_bad_json(self):
        result = runner.invoke(app, ["update-irpf-brackets", "--year", "2026", "--brackets-json", "{not json"])
        assert result.exit_code == ERROR_CODES["INVALID_INPUT"]

    def test_version(self):
        result = runner.invoke(app, ["version", "--json"])
        assert result.exit_code == 0
        assert _json(result)["data"]["version"] == "0.1.0"
