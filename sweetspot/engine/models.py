from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, getcontext
from typing import Optional, Literal, Tuple
from pydantic import BaseModel, ConfigDict

getcontext().prec = 28

EUR = Decimal

CENT = Decimal("0.01")


class TaxBracket(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    upper_limit: Optional[float] = None  # None = unbounded top bracket
    rate: float


class SavingsTiers(BaseModel):
    """Three-tier savings schedule (base del ahorro) applied to dividends."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    first_limit: float = 6000
    first_rate: float = 0.19
    second_limit: float = 50000
    second_rate: float = 0.21
    third_rate: float = 0.23


class SweepDefaults(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    revenue: float
    expenses: float
    step: float = 1000


class TaxYearConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    schema_version: str
    year: int
    currency: Literal["EUR"]
    country: Literal["Spain"]
    irpf_brackets: Tuple[TaxBracket, ...]
    savings: SavingsTiers
    corporate_tax_rate: float
    minimum_salary: float
    defaults: SweepDefaults
    notes: Optional[str] = None


@dataclass(frozen=True)
class ScenarioResult:
    salary: EUR
    income_tax: EUR
    corporate_tax: EUR
    dividend_tax: EUR
    corporate_and_dividend_tax: EUR
    total_tax: EUR

    def as_dict(self) -> dict:
        return {
            "salary": float(self.salary),
            "income_tax": float(self.income_tax),
            "corporate_tax": float(self.corporate_tax),
            "dividend_tax": float(self.dividend_tax),
            "corporate_and_dividend_tax": float(self.corporate_and_dividend_tax),
            "total_tax": float(self.total_tax),
        }


# helpers

def eur(x: float | int | str | Decimal) -> EUR:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))
