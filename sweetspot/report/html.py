"""Static HTML report: summary panels plus the tax curve embedded as a PNG."""

from __future__ import annotations
import base64
import io
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..engine.models import ScenarioResult, eur
from ..viz.curve import plot_curve


def format_eur(amount) -> str:
    """
    es-ES currency without decimals: 50.000 €, 1000 €, -12.345 €.
    es-ES only groups thousands from five digits on, and a no-break space
    keeps € on the same line as the amount.
    """
    value = eur(amount).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = str(abs(int(value)))
    if len(digits) > 4:
        groups = []
        while digits:
            groups.insert(0, digits[-3:])
            digits = digits[:-3]
        digits = ".".join(groups)
    return f"{sign}{digits}\u00a0€"


REPORT_ROOT = Path(__file__).resolve().parent
TEMPLATES = Environment(
    loader=FileSystemLoader(str(REPORT_ROOT / "templates")),
    autoescape=select_autoescape(["html", "j2"]),
)
REPORT_TEMPLATE = "report.html.j2"


def render_chart_png(results: Sequence[ScenarioResult], sweet_spot: ScenarioResult) -> bytes:
    buf = io.BytesIO()
    plot_curve(results, buf, sweet_spot=sweet_spot)
    return buf.getvalue()


def render_html(
    results: Sequence[ScenarioResult],
    sweet_spot: ScenarioResult,
    revenue,
    expenses,
    year: int = 2026,
) -> str:
    """Build the report page; the caller decides where it goes."""
    chart = base64.b64encode(render_chart_png(results, sweet_spot)).decode("ascii")
    return TEMPLATES.get_template(REPORT_TEMPLATE).render(
        year=year,
        revenue=format_eur(revenue),
        expenses=format_eur(expenses),
        net_profit=format_eur(eur(revenue) - eur(expenses)),
        salary=format_eur(sweet_spot.salary),
        income_tax=format_eur(sweet_spot.income_tax),
        corporate_and_dividend_tax=format_eur(sweet_spot.corporate_and_dividend_tax),
        total_tax=format_eur(sweet_spot.total_tax),
        chart=chart,
    )


def write_report(path: str | Path, html: str) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(html, encoding="utf-8")
    return out_path
