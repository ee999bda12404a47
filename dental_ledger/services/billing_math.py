# dental_ledger/services/billing_math.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

Q2 = Decimal("0.01")
ZERO = Decimal("0.00")


def D(x) -> Decimal:
    # str() first: Decimal(float) keeps the binary noise (sqlite sums are floats)
    return Decimal(str(x if x is not None else 0))


def money2(x) -> Decimal:
    return D(x).quantize(Q2, rounding=ROUND_HALF_UP)
