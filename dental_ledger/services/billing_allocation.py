# FILE: dental_ledger/services/billing_allocation.py
"""
FIFO allocation of a patient's total payments over billable items.

Walk items oldest to newest with `remaining = total_paid`. An item is paid
only if `remaining >= amount`, and then `remaining -= amount`. The first
item that does not fit stops the walk: it and every later item are unpaid,
even if a cheaper later item would fit in what is left. Settlement is never
partial and never out of order.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Tuple

from dental_ledger.services.billing_items import BillableItem
from dental_ledger.services.billing_math import money2

ItemKey = Tuple[str, int]


def allocate(total_paid: Decimal,
             ordered_items: Iterable[BillableItem]) -> Dict[ItemKey, bool]:
    """
    Returns {item.key: should_be_paid}. Pure: same input, same output.
    `ordered_items` must already be in FIFO order (see collect_billable_items).
    """
    remaining = money2(total_paid)
    target: Dict[ItemKey, bool] = {}
    blocked = False

    for item in ordered_items:
        amount = money2(item.amount)
        if not blocked and remaining >= amount:
            remaining -= amount
            target[item.key] = True
        else:
            blocked = True
            target[item.key] = False

    return target

