"""Common test fixtures and configuration for SweetSpot tests."""

import pytest
import matplotlib
from pathlib import Path
from decimal import Decimal

from sweetspot.io.loader import load_tax_year_config
from sweetspot.engine.models import TaxBracket, SavingsTiers, eur
from sweetspot.engine.sweep import sweep_scenarios

matplotlib.use("Agg")

# Path to the packaged configs
CONFIG_ROOT = Path(__file__).resolve().parents[1] / "sweetspot" / "configs"


@pytest.fixture
def config_root():
    """Path to configuration files."""
    return CONFIG_ROOT


@pytest.fixture
def year_2026():
    """Tax year for testing."""
    return 2026


@pytest.fixture
def cfg_2026(config_root, year_2026):
    """Load 2026 tax parameters."""
    return load_tax_year_config(config_root, year_2026)


@pytest.fixture
def irpf_2026(cfg_2026):
    return cfg_2026.irpf_brackets


@pytest.fixture
def reference_savings():
    """Savings tiers with the reference constants L1=6000, R1=0.19, L2=50000, R2=0.21, R3=0.23."""
    return SavingsTiers(
        first_limit=6000, first_rate=0.19,
        second_limit=50000, second_rate=0.21,
        third_rate=0.23,
    )


@pytest.fixture
def simple_schedule():
    """Small progressive schedule: 10% to 10k, 20% to 20k, 30% above."""
    return (
        TaxBracket(upper_limit=10000, rate=0.10),
        TaxBracket(upper_limit=20000, rate=0.20),
        TaxBracket(upper_limit=None, rate=0.30),
    )


@pytest.fixture
def reference_sweep(cfg_2026):
    """Sweep for revenue 50,000, expenses 1,000, step 1,000 from the 2026 minimum salary."""
    return sweep_scenarios(eur(50000), eur(1000), eur(1000), eur(16576), cfg_2026)


class ScenarioCase:
    """Expected figures for one salary of the reference sweep."""
    def __init__(self, salary, income_tax: str, corporate_tax: str,
                 dividend_tax: str, corporate_and_dividend_tax: str, total_tax: str,
                 description: str = ""):
        self.salary = Decimal(salary)
        self.income_tax = Decimal(income_tax)
        self.corporate_tax = Decimal(corporate_tax)
        self.dividend_tax = Decimal(dividend_tax)
        self.corporate_and_dividend_tax = Decimal(corporate_and_dividend_tax)
        self.total_tax = Decimal(total_tax)
        self.description = description

    def __repr__(self):
        return f"ScenarioCase(salary={self.salary}, total={self.total_tax})"


@pytest.fixture
def reference_cases():
    """Hand-computed scenarios for net profit 49,000 with the 2026 parameters."""
    return [
        ScenarioCase(
            salary=16576,
            income_tax="3157.54",
            corporate_tax="4863.60",
            dividend_tax="5667.68",
            corporate_and_dividend_tax="10531.28",
            total_tax="13688.82",
            description="Minimum salary - most profit paid out as dividends",
        ),
        ScenarioCase(
            salary=48576,
            income_tax="12966.94",
            corporate_tax="63.60",
            dividend_tax="68.48",
            corporate_and_dividend_tax="132.08",
            total_tax="13099.02",
            description="Last swept salary - only 424 left in the company",
        ),
    ]


@pytest.fixture
def fractional_case():
    """
    Second salary of the sweep revenue 77,777.77, expenses 123.45, step 333.33.
    IS is 9111.7485 and the raw dividend tax 10755.645545; the sums only come
    out right when both stay unrounded until the final rounding.
    """
    return ScenarioCase(
        salary="16909.33",
        income_tax="3233.20",
        corporate_tax="9111.75",
        dividend_tax="10755.65",
        corporate_and_dividend_tax="19867.39",
        total_tax="23100.59",
        description="Net profit 77,654.32 with cents",
    )
