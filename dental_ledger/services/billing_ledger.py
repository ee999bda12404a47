# FILE: dental_ledger/services/billing_ledger.py
"""
Ledger recalculation: re-derive every billable item's paid flag from the
current total of active payments, then write only the flags that changed.

Always a full recompute (collect -> allocate -> diff); never an incremental
patch of the previous state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.models.appointment import Appointment
from dental_ledger.models.labwork import LabWork
from dental_ledger.services.billing_allocation import allocate
from dental_ledger.services.billing_balances import total_paid_for_patient
from dental_ledger.services.billing_items import (
    BillableItem,
    BillableKind,
    collect_billable_items,
)

logger = logging.getLogger(__name__)

KIND_MODEL = {
    BillableKind.APPOINTMENT: Appointment,
    BillableKind.LABWORK: LabWork,
}


@dataclass
class FlagChanges:
    """Ids whose flag must flip, grouped by kind and new value."""
    to_paid: Dict[BillableKind, List[int]] = field(
        default_factory=lambda: {k: [] for k in BillableKind})
    to_unpaid: Dict[BillableKind, List[int]] = field(
        default_factory=lambda: {k: [] for k in BillableKind})

    def add(self, item: BillableItem, should_be_paid: bool) -> None:
        bucket = self.to_paid if should_be_paid else self.to_unpaid
        bucket[item.kind].append(int(item.id))

    def __len__(self) -> int:
        return sum(len(v) for v in self.to_paid.values()) + sum(
            len(v) for v in self.to_unpaid.values())


def diff_flags(items: List[BillableItem],
               target: Dict[tuple, bool]) -> FlagChanges:
    changes = FlagChanges()
    for item in items:
        should_be_paid = target[item.key]
        if item.is_paid != should_be_paid:
            changes.add(item, should_be_paid)
    return changes


async def apply_flag_changes(db: AsyncSession, tenant_id: int,
                             changes: FlagChanges) -> None:
    # at most one UPDATE per (kind, value); all inside the caller's transaction
    for value, bucket in ((True, changes.to_paid), (False, changes.to_unpaid)):
        for kind, ids in bucket.items():
            if not ids:
                continue
            model = KIND_MODEL[kind]
            await db.execute(
                update(model).where(
                    model.tenant_id == int(tenant_id),
                    model.id.in_(ids),
                ).values(is_paid=value).execution_options(
                    synchronize_session=False))


async def recalculate_paid_status(db: AsyncSession, tenant_id: int,
                                  patient_id: int) -> int:
    """
    Bring stored paid flags in line with FIFO allocation of active payments.

    Writes go through `db` without committing: the caller owns the
    transaction, so the flag batch lands (or rolls back) together with
    whatever payment change triggered it. Returns the number of flags
    changed; a redundant call returns 0 and writes nothing.
    """
    total_paid = await total_paid_for_patient(db, tenant_id, patient_id)
    items = await collect_billable_items(db, tenant_id, patient_id)

    target = allocate(total_paid, items)
    changes = diff_flags(items, target)
    if not changes:
        return 0

    await apply_flag_changes(db, tenant_id, changes)
    await db.flush()

    logger.info(
        "Recalculated paid status tenant_id=%s patient_id=%s total_paid=%s changed=%s",
        tenant_id, patient_id, total_paid, len(changes))
    return len(changes)

