from .brackets import compute_progressive_tax, compute_savings_tax, bracket_info
from .sweep import sweep_scenarios, scenario_for_salary
from .optimize import find_minimum_total, summarize_sweep, validate_sweep_inputs
from .errors import EmptyInputError, InvalidScheduleError
from .models import (
    TaxBracket, SavingsTiers, SweepDefaults, TaxYearConfig,
    ScenarioResult
)
