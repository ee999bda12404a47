# FILE: dental_ledger/services/billing_items.py
"""
Billable item collection.

A billable item is an active appointment with a positive cost or an active
lab work with a positive price, belonging to an active patient of the tenant.
Items come back oldest first; this order is what FIFO allocation consumes.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.models.appointment import Appointment
from dental_ledger.models.labwork import LabWork
from dental_ledger.models.patient import Patient
from dental_ledger.services.billing_math import money2


class BillableKind(str, enum.Enum):
    APPOINTMENT = "Appointment"
    LABWORK = "LabWork"


# same-day tie break: appointments settle before lab work
KIND_ORDER = {BillableKind.APPOINTMENT: 0, BillableKind.LABWORK: 1}


@dataclass(frozen=True)
class BillableItem:
    id: int
    kind: BillableKind
    amount: Decimal
    occurred_on: datetime
    is_paid: bool

    @property
    def key(self) -> Tuple[str, int]:
        # ids are per-table, so (kind, id) is the unique handle
        return (self.kind.value, int(self.id))


def sort_key(item: BillableItem):
    return (item.occurred_on, KIND_ORDER[item.kind], int(item.id))


# -------------------------
# Shared filters (collector + balance sums use the same ones)
# -------------------------
def appointment_filters(tenant_id: int, patient_id: int) -> list:
    return [
        Appointment.tenant_id == int(tenant_id),
        Appointment.patient_id == int(patient_id),
        Appointment.is_active.is_(True),
        Appointment.cost.isnot(None),
        Appointment.cost > 0,
    ]


def labwork_filters(tenant_id: int, patient_id: int) -> list:
    return [
        LabWork.tenant_id == int(tenant_id),
        LabWork.patient_id == int(patient_id),
        LabWork.is_active.is_(True),
        LabWork.price > 0,
    ]


def _active_patient_join(model):
    return (Patient.id == model.patient_id) & (
        Patient.tenant_id == model.tenant_id) & Patient.is_active.is_(True)


async def list_billable_appointments(db: AsyncSession, tenant_id: int,
                                     patient_id: int) -> List[BillableItem]:
    stmt = (select(Appointment.id, Appointment.cost, Appointment.start_time,
                   Appointment.is_paid).join(
                       Patient, _active_patient_join(Appointment)).where(
                           *appointment_filters(tenant_id, patient_id)).
            order_by(Appointment.start_time.asc(), Appointment.id.asc()))
    rows = (await db.execute(stmt)).all()
    return [
        BillableItem(
            id=int(r.id),
            kind=BillableKind.APPOINTMENT,
            amount=money2(r.cost),
            occurred_on=r.start_time,
            is_paid=bool(r.is_paid),
        ) for r in rows
    ]


async def list_billable_labworks(db: AsyncSession, tenant_id: int,
                                 patient_id: int) -> List[BillableItem]:
    stmt = (select(LabWork.id, LabWork.price, LabWork.date,
                   LabWork.is_paid).join(
                       Patient, _active_patient_join(LabWork)).where(
                           *labwork_filters(tenant_id, patient_id)).order_by(
                               LabWork.date.asc(), LabWork.id.asc()))
    rows = (await db.execute(stmt)).all()
    return [
        BillableItem(
            id=int(r.id),
            kind=BillableKind.LABWORK,
            amount=money2(r.price),
            occurred_on=r.date,
            is_paid=bool(r.is_paid),
        ) for r in rows
    ]


async def collect_billable_items(db: AsyncSession, tenant_id: int,
                                 patient_id: int) -> List[BillableItem]:
    """
    All billable items of the patient, merged and sorted by
    (occurred_on, appointments-before-labwork, id).

    No existence check: an unknown or inactive patient simply has no items.
    """
    # one AsyncSession cannot run two statements at once, so sequential
    items = await list_billable_appointments(db, tenant_id, patient_id)
    items += await list_billable_labworks(db, tenant_id, patient_id)
    items.sort(key=sort_key)
    return items
