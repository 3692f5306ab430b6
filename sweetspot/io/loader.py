from pathlib import Path
from typing import Sequence
import yaml
from ..engine.models import TaxYearConfig, TaxBracket, SavingsTiers
from ..engine.errors import InvalidScheduleError

CONFIG_FILE_NAME = "spain.yaml"


def load_yaml(path: Path):
    """Load YAML file safely."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_tax_year_config(root: Path, year: int) -> TaxYearConfig:
    """Load and validate the tax parameters for one year."""
    y = str(year)
    config_file = root / y / CONFIG_FILE_NAME
    if not config_file.exists():
        raise FileNotFoundError(f"Spain config not found: {config_file}")

    data = load_yaml(config_file)
    config = TaxYearConfig(**data)
    if config.year != year:
        raise ValueError(f"Config in {config_file} declares year {config.year}, expected {year}")
    validate_tax_year_config(config)
    return config


def validate_tax_year_config(config: TaxYearConfig):
    """Validate the semantic rules pydantic cannot express."""
    validate_schedule(config.irpf_brackets, "IRPF")
    _validate_savings_tiers(config.savings)

    if not 0 <= config.corporate_tax_rate <= 1:
        raise ValueError("Corporate tax rate must be between 0 and 1")
    if config.minimum_salary < 0:
        raise ValueError("Minimum salary must be non-negative")
    if config.defaults.revenue < 0 or config.defaults.expenses < 0:
        raise ValueError("Default revenue/expenses must be non-negative")
    if config.defaults.step <= 0:
        raise ValueError("Default step must be positive")


def validate_schedule(brackets: Sequence[TaxBracket], name: str = "schedule"):
    """Check a bracket schedule covers [0, inf) in ascending, progressive order."""
    if not brackets:
        raise InvalidScheduleError(f"{name} schedule has no brackets")

    last_limit = 0.0
    last_rate = 0.0
    for idx, b in enumerate(brackets):
        if not 0 <= b.rate <= 1:
            raise InvalidScheduleError(f"{name} bracket {idx}: rate must be between 0 and 1")
        if b.rate < last_rate:
            raise InvalidScheduleError(f"{name} bracket {idx}: rates must be non-decreasing")
        last_rate = b.rate

        is_last = idx == len(brackets) - 1
        if b.upper_limit is None:
            if not is_last:
                raise InvalidScheduleError(f"{name} bracket {idx}: only the last bracket may be unbounded")
            continue
        if is_last:
            raise InvalidScheduleError(f"{name} schedule must end with an unbounded bracket (upper_limit: null)")
        if b.upper_limit <= last_limit:
            raise InvalidScheduleError(
                f"{name} brackets must be strictly increasing by 'upper_limit' (idx={idx})"
            )
        last_limit = b.upper_limit


def _validate_savings_tiers(tiers: SavingsTiers):
    if tiers.first_limit <= 0:
        raise InvalidScheduleError("Savings first_limit must be positive")
    if tiers.second_limit <= tiers.first_limit:
        raise InvalidScheduleError("Savings second_limit must be greater than first_limit")
    rates = [tiers.first_rate, tiers.second_rate, tiers.third_rate]
    if any(r < 0 or r > 1 for r in rates):
        raise InvalidScheduleError("Savings rates must be between 0 and 1")
    if rates != sorted(rates):
        raise InvalidScheduleError("Savings rates must be non-decreasing")
