from decimal import Decimal
from typing import Dict, Any, Sequence

from .models import ScenarioResult, TaxBracket
from .brackets import bracket_info
from .errors import EmptyInputError

Number = Decimal


def validate_sweep_inputs(
    revenue: Number,
    expenses: Number,
    step: Number,
    min_salary: Number,
):
    if revenue < 0:
        raise ValueError("Revenue must be non-negative")
    if expenses < 0:
        raise ValueError("Expenses must be non-negative")
    if step <= 0:
        raise ValueError("Step must be positive")
    if min_salary < 0:
        raise ValueError("Min salary must be non-negative")


def find_minimum_total(results: Sequence[ScenarioResult]) -> ScenarioResult:
    """
    Sweet spot: the scenario with the lowest total tax.
    Strict '<' keeps the first of equal totals, i.e. the lowest salary wins a tie.
    """
    if not results:
        raise EmptyInputError("No results provided to find sweet spot")
    best = results[0]
    for r in results[1:]:
        if r.total_tax < best.total_tax:
            best = r
    return best


def summarize_sweep(
    results: Sequence[ScenarioResult],
    sweet_spot: ScenarioResult,
    irpf_brackets: Sequence[TaxBracket],
) -> Dict[str, Any]:
    """
    Compare the sweet spot with the two edge strategies:
      - lowest_salary: pay the minimum salary, take the rest as dividends
      - highest_salary: pay out the whole net profit as salary
    Also reports the IRPF bracket the sweet-spot salary sits in.
    """
    if not results:
        raise EmptyInputError("No results provided to summarize")

    lowest = results[0]
    highest = results[-1]
    irpf = bracket_info(sweet_spot.salary, irpf_brackets)

    def _edge(r: ScenarioResult) -> Dict[str, Any]:
        return {
            "salary": float(r.salary),
            "total_tax": float(r.total_tax),
            "sweet_spot_saving": float(r.total_tax - sweet_spot.total_tax),
        }

    return {
        "scenario_count": len(results),
        "sweet_spot": sweet_spot.as_dict(),
        "lowest_salary": _edge(lowest),
        "highest_salary": _edge(highest),
        "irpf_marginal_rate_percent": irpf["rate"] * 100,
        "irpf_bracket": {"lower": irpf["lower"], "upper": irpf["upper"]},
    }
