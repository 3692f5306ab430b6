from decimal import Decimal
from typing import Iterable, Tuple, Dict, Any
from .models import TaxBracket, SavingsTiers, eur
from .rounding import round_cents


def compute_progressive_tax(amount: Decimal, brackets: Iterable[TaxBracket], rounded: bool = True) -> Decimal:
    # each upper_limit is a cumulative ceiling, not a width
    # rounded=False returns the raw sum for callers that round a larger total themselves
    if amount <= 0:
        return Decimal(0)
    tax = Decimal(0)
    previous_limit = Decimal(0)
    for b in brackets:
        rate = eur(b.rate)
        if b.upper_limit is not None and amount > eur(b.upper_limit):
            limit = eur(b.upper_limit)
            tax += (limit - previous_limit) * rate
            previous_limit = limit
            continue
        tax += (amount - previous_limit) * rate
        break
    return round_cents(tax) if rounded else tax


def savings_schedule(tiers: SavingsTiers) -> Tuple[TaxBracket, ...]:
    """Expand the three savings tiers into an ordinary bracket schedule."""
    return (
        TaxBracket(upper_limit=tiers.first_limit, rate=tiers.first_rate),
        TaxBracket(upper_limit=tiers.second_limit, rate=tiers.second_rate),
        TaxBracket(upper_limit=None, rate=tiers.third_rate),
    )


def compute_savings_tax(amount: Decimal, tiers: SavingsTiers, rounded: bool = True) -> Decimal:
    """
    Savings tax on dividends (base del ahorro):
      amount <= L1        -> amount * R1
      L1 < amount <= L2   -> L1*R1 + (amount - L1)*R2
      amount > L2         -> L1*R1 + (L2 - L1)*R2 + (amount - L2)*R3
    Rounded once on the final amount, never per tier.
    """
    return compute_progressive_tax(amount, savings_schedule(tiers), rounded=rounded)


def bracket_info(amount: Decimal | int, brackets: Iterable[TaxBracket]) -> Dict[str, Any]:
    """
    Lightweight inspector used for the 'why' next to the sweet spot.
    Returns {'lower': float, 'upper': Optional[float], 'rate': float}.

    Brackets are (lower, upper]; amounts at or below zero map to the first bracket.
    """
    a = eur(amount)
    lower = 0.0
    info = {"lower": 0.0, "upper": None, "rate": 0.0}
    for b in brackets:
        info = {"lower": lower, "upper": b.upper_limit, "rate": b.rate}
        if b.upper_limit is None or a <= eur(b.upper_limit):
            return info
        lower = b.upper_limit
    # malformed schedule without an unbounded top: report the last bracket
    return info
