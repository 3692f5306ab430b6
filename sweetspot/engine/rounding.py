from decimal import Decimal, ROUND_HALF_UP
from .models import CENT


def round_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
