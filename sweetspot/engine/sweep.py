from decimal import Decimal
from typing import List
from .models import TaxYearConfig, ScenarioResult, eur
from .brackets import compute_progressive_tax, compute_savings_tax
from .rounding import round_cents


def scenario_for_salary(salary: Decimal, net_profit: Decimal, cfg: TaxYearConfig) -> ScenarioResult:
    """Tax picture for one salary: IRPF on the salary, IS and dividend tax on what stays in the company."""
    income_tax = compute_progressive_tax(salary, cfg.irpf_brackets)
    profit_before_cit = net_profit - salary
    # flat rate; a loss yields a negative corporate tax and that is kept as is
    corporate_tax = profit_before_cit * eur(cfg.corporate_tax_rate)
    dividends = profit_before_cit - corporate_tax
    dividend_tax = compute_savings_tax(dividends, cfg.savings, rounded=False)

    # components rounded on their own, sums rounded from the unrounded IS and dividend tax
    return ScenarioResult(
        salary=salary,
        income_tax=income_tax,
        corporate_tax=round_cents(corporate_tax),
        dividend_tax=round_cents(dividend_tax),
        corporate_and_dividend_tax=round_cents(corporate_tax + dividend_tax),
        total_tax=round_cents(income_tax + corporate_tax + dividend_tax),
    )


def sweep_scenarios(
    revenue: Decimal,
    expenses: Decimal,
    step: Decimal,
    min_salary: Decimal,
    cfg: TaxYearConfig,
) -> List[ScenarioResult]:
    """
    One ScenarioResult per salary in min_salary, min_salary+step, ... <= revenue - expenses,
    ascending. The first salary is min_salary itself, not snapped to the step grid.
    Returns an empty list when min_salary exceeds the net profit.
    """
    net_profit = eur(revenue) - eur(expenses)
    step = eur(step)
    if step <= 0:
        raise ValueError("Step must be positive")
    salary = max(eur(min_salary), Decimal(0))

    results: List[ScenarioResult] = []
    while salary <= net_profit:
        results.append(scenario_for_salary(salary, net_profit, cfg))
        salary += step
    return results
