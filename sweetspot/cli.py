from __future__ import annotations
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Dict, Any, Tuple
import json
import csv
import typer
from rich import print as rprint
import platform
from datetime import datetime, timezone

from .io.loader import load_tax_year_config
from .engine.models import TaxYearConfig, ScenarioResult, eur
from .engine.sweep import sweep_scenarios
from .engine.optimize import find_minimum_total, summarize_sweep, validate_sweep_inputs
from .engine.errors import EmptyInputError
from .viz.curve import plot_curve
from .report.html import render_html, write_report, format_eur
from .config.manager import ConfigManager

app = typer.Typer(help="Salary vs dividend sweet spot for Spanish SL owners (IRPF + IS + dividends), config driven")

CONFIG_ROOT = Path(__file__).parent / "configs"

SCHEMA_VERSION = "1.0"
SWEETSPOT_VERSION = "0.1.0"  # Should match pyproject.toml

# Error codes for JSON responses
ERROR_CODES = {
    "INVALID_INPUT": 2,
    "CALCULATION_ERROR": 3,
    "FILE_NOT_FOUND": 4,
    "VALIDATION_ERROR": 5,
    "EMPTY_SWEEP": 6,
    "INTERNAL_ERROR": 8,
}

SCENARIO_FIELDS = [
    "salary", "income_tax", "corporate_tax", "dividend_tax",
    "corporate_and_dividend_tax", "total_tax",
]


def _create_console_with_imports():
    """Create Rich console with all required imports."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text
    from rich.table import Table

    return Console(), Panel, Text, Table


def _create_json_response(data: Any, success: bool = True) -> Dict[str, Any]:
    """Create standardized JSON response envelope.

    Args:
        data: The response data to wrap
        success: Whether this is a success response

    Returns:
        Dict with standardized response envelope
    """
    return {
        "success": success,
        "schema_version": SCHEMA_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data
    }


def _create_json_error(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Create standardized JSON error response."""
    error_data = {
        "code": code,
        "message": message
    }
    if details:
        error_data["details"] = details

    return {
        "success": False,
        "schema_version": SCHEMA_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": error_data
    }


def _handle_json_error(error: Exception, json_mode: bool = False) -> None:
    """Report an exception in the requested format and exit with its code.

    EmptyInputError is checked before ValueError since it is one.
    """
    if isinstance(error, EmptyInputError):
        code = "EMPTY_SWEEP"
    elif isinstance(error, ValueError):
        code = "INVALID_INPUT"
    elif isinstance(error, FileNotFoundError):
        code = "FILE_NOT_FOUND"
    else:
        code = "INTERNAL_ERROR"

    message = str(error) if code != "INTERNAL_ERROR" else f"Unexpected error: {error}"
    if json_mode:
        print(json.dumps(_create_json_error(code, message), indent=2))
    else:
        rprint({"error": message})
    raise typer.Exit(code=ERROR_CODES[code])


def _resolve_sweep_inputs(
    cfg: TaxYearConfig,
    revenue: Optional[float],
    expenses: Optional[float],
    step: Optional[float],
    min_salary: Optional[float],
) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
    """Fill unset options from the year's defaults and check the numeric ranges.

    Returns:
        (revenue, expenses, step, min_salary) as Decimals

    Raises:
        ValueError: If a value is out of range
    """
    r = eur(cfg.defaults.revenue if revenue is None else revenue)
    e = eur(cfg.defaults.expenses if expenses is None else expenses)
    s = eur(cfg.defaults.step if step is None else step)
    m = eur(cfg.minimum_salary if min_salary is None else min_salary)
    validate_sweep_inputs(r, e, s, m)
    return r, e, s, m


def _run_sweep(
    year: int,
    revenue: Optional[float],
    expenses: Optional[float],
    step: Optional[float],
    min_salary: Optional[float],
) -> Tuple[TaxYearConfig, Dict[str, Decimal], List[ScenarioResult]]:
    """Load the year, resolve inputs and sweep all salaries."""
    cfg = load_tax_year_config(CONFIG_ROOT, year)
    r, e, s, m = _resolve_sweep_inputs(cfg, revenue, expenses, step, min_salary)
    results = sweep_scenarios(r, e, s, m, cfg)
    inputs = {"revenue": r, "expenses": e, "step": s, "min_salary": m}
    return cfg, inputs, results


def _inputs_as_json(inputs: Dict[str, Decimal]) -> Dict[str, float]:
    out = {k: float(v) for k, v in inputs.items()}
    out["net_profit"] = float(inputs["revenue"] - inputs["expenses"])
    return out


def _print_optimization_result(summary: Dict[str, Any], inputs: Dict[str, Decimal], year: int):
    """Print a user-friendly sweet spot result."""
    console, Panel, Text, Table = _create_console_with_imports()

    spot = summary["sweet_spot"]
    net_profit = inputs["revenue"] - inputs["expenses"]

    result_text = Text()
    result_text.append("💰 OPTIMAL SALARY (SWEET SPOT)\n\n", style="bold green")
    result_text.append(f"Salary: {format_eur(spot['salary'])}\n", style="bold cyan")
    result_text.append(f"Total tax: {format_eur(spot['total_tax'])}\n", style="bold yellow")
    result_text.append(f"Net profit: {format_eur(net_profit)}\n", style="dim")
    result_text.append(f"Scenarios evaluated: {summary['scenario_count']}", style="dim")
    console.print(Panel(result_text, title=f"SweetSpot {year}", border_style="green"))

    tax_table = Table(title="📊 Tax Breakdown at Sweet Spot", show_header=True, header_style="bold blue")
    tax_table.add_column("Component", style="cyan")
    tax_table.add_column("Amount (EUR)", justify="right", style="green")
    tax_table.add_row("IRPF", f"{spot['income_tax']:,.2f}")
    tax_table.add_row("Corporate tax (IS)", f"{spot['corporate_tax']:,.2f}")
    tax_table.add_row("Dividend tax", f"{spot['dividend_tax']:,.2f}")
    tax_table.add_row("[bold]Total Tax", f"[bold]{spot['total_tax']:,.2f}")
    console.print("\n", tax_table)

    cmp_table = Table(title="⚖️  Compared with Edge Strategies", show_header=True, header_style="bold magenta")
    cmp_table.add_column("Strategy", style="cyan")
    cmp_table.add_column("Salary", justify="right")
    cmp_table.add_column("Total Tax", justify="right", style="red")
    cmp_table.add_column("Sweet spot saves", justify="right", style="yellow")
    for label, key in (("Lowest salary", "lowest_salary"), ("Highest salary", "highest_salary")):
        edge = summary[key]
        cmp_table.add_row(
            label,
            format_eur(edge["salary"]),
            format_eur(edge["total_tax"]),
            f"{edge['sweet_spot_saving']:,.2f}",
        )
    console.print("\n", cmp_table)

    details_text = Text()
    details_text.append("🎯 DETAILS\n\n", style="bold blue")
    details_text.append(f"IRPF marginal rate at sweet spot: {summary['irpf_marginal_rate_percent']:.1f}%\n")
    upper = summary["irpf_bracket"]["upper"]
    upper_txt = format_eur(upper) if upper is not None else "∞"
    details_text.append(f"IRPF bracket: {format_eur(summary['irpf_bracket']['lower'])} – {upper_txt}")
    console.print(Panel(details_text, title="Technical Analysis", border_style="blue"))


@app.command()
def version(
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Show version information."""
    version_data = {
        "version": SWEETSPOT_VERSION,
        "schema_version": SCHEMA_VERSION,
        "platform": platform.system().lower()
    }
    if json_out:
        print(json.dumps(_create_json_response(version_data), indent=2))
    else:
        console, Panel, Text, _ = _create_console_with_imports()
        version_text = Text()
        version_text.append(f"SweetSpot version {SWEETSPOT_VERSION}\n", style="bold green")
        version_text.append(f"Platform: {platform.system()}\n")
        version_text.append(f"Schema version: {SCHEMA_VERSION}", style="cyan")
        console.print(Panel(version_text, title="Version Information", border_style="blue"))


@app.command()
def sweep(
    year: int = typer.Option(2026, min=1900, help="Tax year, e.g., 2026"),
    revenue: Optional[float] = typer.Option(None, min=0, help="Company revenue (EUR), defaults from config"),
    expenses: Optional[float] = typer.Option(None, min=0, help="Company expenses (EUR), defaults from config"),
    step: Optional[float] = typer.Option(None, help="Salary increment (EUR), defaults from config"),
    min_salary: Optional[float] = typer.Option(None, min=0, help="First salary to evaluate (EUR), defaults to the minimum salary"),
    out: str = typer.Option("scenarios.csv", help="Output CSV path"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON instead of writing CSV"),
):
    """
    Evaluate every salary from --min-salary up to the net profit (step=--step):
      - salary, IRPF
      - corporate tax, dividend tax, and their sum
      - total tax
    """
    try:
        _, inputs, results = _run_sweep(year, revenue, expenses, step, min_salary)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    rows = [r.as_dict() for r in results]
    if json_out:
        print(json.dumps(_create_json_response({"inputs": _inputs_as_json(inputs), "scenarios": rows}), indent=2))
        return

    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=SCENARIO_FIELDS)
        w.writeheader()
        w.writerows(rows)
    rprint({"saved": str(out_path), "rows": len(rows)})


@app.command()
def optimize(
    year: int = typer.Option(2026, min=1900, help="Tax year, e.g., 2026"),
    revenue: Optional[float] = typer.Option(None, min=0, help="Company revenue (EUR), defaults from config"),
    expenses: Optional[float] = typer.Option(None, min=0, help="Company expenses (EUR), defaults from config"),
    step: Optional[float] = typer.Option(None, help="Salary increment (EUR), defaults from config"),
    min_salary: Optional[float] = typer.Option(None, min=0, help="First salary to evaluate (EUR), defaults to the minimum salary"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Find the salary that minimises IRPF + corporate tax + dividend tax.

    Ties go to the lowest salary.
    """
    try:
        cfg, inputs, results = _run_sweep(year, revenue, expenses, step, min_salary)
        spot = find_minimum_total(results)
        summary = summarize_sweep(results, spot, cfg.irpf_brackets)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    if json_out:
        summary["inputs"] = _inputs_as_json(inputs)
        print(json.dumps(_create_json_response(summary), indent=2))
    else:
        _print_optimization_result(summary, inputs, year)


@app.command()
def plot(
    year: int = typer.Option(2026, min=1900, help="Tax year, e.g., 2026"),
    revenue: Optional[float] = typer.Option(None, min=0, help="Company revenue (EUR)"),
    expenses: Optional[float] = typer.Option(None, min=0, help="Company expenses (EUR)"),
    step: Optional[float] = typer.Option(None, help="Salary increment (EUR)"),
    min_salary: Optional[float] = typer.Option(None, min=0, help="First salary to evaluate (EUR)"),
    out: str = typer.Option("curve.png"),
    annotate_sweet_spot: bool = typer.Option(True, help="Mark the sweet spot on the curve"),
):
    """Plot IRPF, IS + dividend tax and total tax against salary."""
    try:
        _, _, results = _run_sweep(year, revenue, expenses, step, min_salary)
        spot = find_minimum_total(results) if annotate_sweet_spot else None
    except Exception as e:
        _handle_json_error(e)
        return

    plot_curve(results, out, sweet_spot=spot)
    rprint({"saved": out, "annotated": spot is not None})


@app.command()
def report(
    year: int = typer.Option(2026, min=1900, help="Tax year, e.g., 2026"),
    revenue: Optional[float] = typer.Option(None, min=0, help="Company revenue (EUR)"),
    expenses: Optional[float] = typer.Option(None, min=0, help="Company expenses (EUR)"),
    step: Optional[float] = typer.Option(None, help="Salary increment (EUR)"),
    min_salary: Optional[float] = typer.Option(None, min=0, help="First salary to evaluate (EUR)"),
    out: str = typer.Option("index.html", help="Output HTML path"),
):
    """Write the static HTML report with the sweet spot and the tax curve."""
    try:
        _, inputs, results = _run_sweep(year, revenue, expenses, step, min_salary)
        spot = find_minimum_total(results)
    except Exception as e:
        _handle_json_error(e)
        return

    html = render_html(results, spot, inputs["revenue"], inputs["expenses"], year=year)
    try:
        out_path = write_report(out, html)
    except OSError as e:
        rprint({"error": f"Could not write report: {e}"})
        raise typer.Exit(code=ERROR_CODES["CALCULATION_ERROR"])

    rprint({
        "saved": str(out_path),
        "sweet_spot_salary": format_eur(spot.salary),
        "total_tax": format_eur(spot.total_tax),
    })


@app.command()
def validate(
    year: int = typer.Option(..., help="Tax year to validate"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Validate the configuration file for given year."""
    try:
        load_tax_year_config(CONFIG_ROOT, year)
    except Exception as e:
        if json_out:
            error_response = _create_json_error("VALIDATION_ERROR", str(e), {"year": year})
            print(json.dumps(error_response, indent=2))
        else:
            rprint({"status": "invalid", "year": year, "error": str(e)})
        raise typer.Exit(code=ERROR_CODES["VALIDATION_ERROR"])

    result_data = {"status": "valid", "year": year, "message": "Configuration valid"}
    if json_out:
        print(json.dumps(_create_json_response(result_data), indent=2))
    else:
        rprint(result_data)


@app.command()
def config_summary(
    year: int = typer.Option(2026, min=1900, help="Tax year, e.g., 2026"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Summarize the tax parameters of a year."""
    try:
        config_manager = ConfigManager(CONFIG_ROOT)
        if not config_manager.year_exists(year):
            raise ValueError(f"Configuration for year {year} does not exist")
        summary = config_manager.get_config_summary(year)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    if json_out:
        print(json.dumps(_create_json_response(summary), indent=2))
        return

    console, Panel, Text, Table = _create_console_with_imports()
    summary_text = Text()
    summary_text.append(f"📋 TAX CONFIGURATION SUMMARY - {year}\n\n", style="bold green")
    summary_text.append(f"Country: {summary['country']}\n", style="cyan")
    summary_text.append(f"Currency: {summary['currency']}\n", style="cyan")
    summary_text.append(f"Schema Version: {summary['schema_version']}\n", style="dim")
    lo, hi = summary["irpf_rate_range_percent"]
    summary_text.append(f"IRPF: {summary['irpf_bracket_count']} brackets, {lo:.1f}% – {hi:.1f}%\n", style="yellow")
    summary_text.append(f"Corporate tax: {summary['corporate_tax_rate'] * 100:.1f}%\n", style="yellow")
    summary_text.append(f"Minimum salary: {format_eur(summary['minimum_salary'])}")
    console.print(Panel(summary_text, title="Configuration Overview", border_style="green"))

    savings = summary["savings"]
    savings_table = Table(title="🏦 Savings Tax (Dividends)", show_header=True, header_style="bold blue")
    savings_table.add_column("Tier", style="cyan")
    savings_table.add_column("Range", justify="right")
    savings_table.add_column("Rate", justify="right", style="yellow")
    savings_table.add_row("1", f"0 – {format_eur(savings['first_limit'])}", f"{savings['first_rate'] * 100:.0f}%")
    savings_table.add_row(
        "2", f"{format_eur(savings['first_limit'])} – {format_eur(savings['second_limit'])}",
        f"{savings['second_rate'] * 100:.0f}%",
    )
    savings_table.add_row("3", f"> {format_eur(savings['second_limit'])}", f"{savings['third_rate'] * 100:.0f}%")
    console.print("\n", savings_table)


@app.command()
def list_years(
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """List tax years with a configuration file."""
    years = ConfigManager(CONFIG_ROOT).get_available_years()
    if json_out:
        print(json.dumps(_create_json_response({"years": years}), indent=2))
    else:
        rprint({"years": years})


@app.command()
def create_year(
    source: int = typer.Option(..., help="Year to copy from"),
    target: int = typer.Option(..., help="Year to create"),
    overwrite: bool = typer.Option(False, help="Replace the target year if it exists"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Create a new tax year by copying an existing one."""
    try:
        result = ConfigManager(CONFIG_ROOT).create_year(source, target, overwrite)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    if json_out:
        print(json.dumps(_create_json_response(result), indent=2))
    else:
        rprint(result)


@app.command()
def update_irpf_brackets(
    year: int = typer.Option(..., help="Tax year to update"),
    brackets_json: str = typer.Option(..., help='JSON list, e.g. \'[{"upper_limit": 12450, "rate": 0.19}, {"upper_limit": null, "rate": 0.45}]\''),
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Replace the IRPF bracket schedule of a year (previous file is archived)."""
    try:
        brackets = json.loads(brackets_json)
        if not isinstance(brackets, list):
            raise ValueError("Brackets must be a JSON list")
        result = ConfigManager(CONFIG_ROOT).update_irpf_brackets(year, brackets)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    if json_out:
        print(json.dumps(_create_json_response(result), indent=2))
    else:
        rprint(result)


@app.command()
def update_parameters(
    year: int = typer.Option(..., help="Tax year to update"),
    corporate_tax_rate: Optional[float] = typer.Option(None, min=0, max=1, help="Flat corporate tax rate (0-1)"),
    minimum_salary: Optional[float] = typer.Option(None, min=0, help="Annual minimum salary (EUR)"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON format"),
):
    """Update the corporate tax rate and/or minimum salary of a year."""
    try:
        result = ConfigManager(CONFIG_ROOT).update_parameters(year, corporate_tax_rate, minimum_salary)
    except Exception as e:
        _handle_json_error(e, json_out)
        return

    if json_out:
        print(json.dumps(_create_json_response(result), indent=2))
    else:
        rprint(result)
