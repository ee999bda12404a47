from datetime import datetime

from conftest import (
    add_appointment,
    add_labwork,
    add_patient,
    add_payment_row,
    paid_flags,
)
from dental_ledger.models import Appointment, LabWork
from dental_ledger.services.billing_items import BillableItem, BillableKind
from dental_ledger.services.billing_ledger import (
    diff_flags,
    recalculate_paid_status,
)


async def test_payment_covering_appointment_flips_flag(db, tenant, patient):
    appt = await add_appointment(db, patient, 100, datetime(2025, 1, 1))
    await add_payment_row(db, patient, 100, datetime(2025, 1, 2))

    changed = await recalculate_paid_status(db, tenant.id, patient.id)
    await db.commit()

    assert changed == 1
    assert (await paid_flags(db, Appointment))[appt.id] is True


async def test_second_recalculation_writes_nothing(db, tenant, patient):
    await add_appointment(db, patient, 50, datetime(2025, 1, 1))
    await add_labwork(db, patient, 80, datetime(2025, 1, 10))
    await add_payment_row(db, patient, 50, datetime(2025, 1, 11))

    assert await recalculate_paid_status(db, tenant.id, patient.id) == 1
    await db.commit()
    assert await recalculate_paid_status(db, tenant.id, patient.id) == 0


async def test_stale_paid_flags_are_reset(db, tenant, patient):
    appt = await add_appointment(db, patient, 100, datetime(2025, 1, 1), is_paid=True)
    lab = await add_labwork(db, patient, 40, datetime(2025, 1, 2), is_paid=True)

    changed = await recalculate_paid_status(db, tenant.id, patient.id)
    await db.commit()

    assert changed == 2
    assert (await paid_flags(db, Appointment))[appt.id] is False
    assert (await paid_flags(db, LabWork))[lab.id] is False


async def test_mixed_kinds_flip_in_both_directions(db, tenant, patient):
    a1 = await add_appointment(db, patient, 40, datetime(2025, 1, 1))
    l1 = await add_labwork(db, patient, 40, datetime(2025, 1, 2))
    a2 = await add_appointment(db, patient, 40, datetime(2025, 1, 3), is_paid=True)
    await add_payment_row(db, patient, 80, datetime(2025, 1, 4))

    changed = await recalculate_paid_status(db, tenant.id, patient.id)
    await db.commit()

    assert changed == 3
    appts = await paid_flags(db, Appointment)
    labs = await paid_flags(db, LabWork)
    assert (appts[a1.id], labs[l1.id], appts[a2.id]) == (True, True, False)


async def test_other_patients_are_untouched(db, tenant, patient):
    neighbour = await add_patient(db, tenant, first_name="Rosa")
    theirs = await add_appointment(db, neighbour, 10, datetime(2025, 1, 1), is_paid=True)
    await add_appointment(db, patient, 10, datetime(2025, 1, 1))
    await add_payment_row(db, patient, 10, datetime(2025, 1, 1))

    await recalculate_paid_status(db, tenant.id, patient.id)
    await db.commit()

    assert (await paid_flags(db, Appointment))[theirs.id] is True


async def test_inactive_billables_keep_their_flag(db, tenant, patient):
    cancelled = await add_appointment(db, patient, 70, datetime(2025, 1, 1),
                                      is_paid=True, is_active=False)

    assert await recalculate_paid_status(db, tenant.id, patient.id) == 0
    assert (await paid_flags(db, Appointment))[cancelled.id] is True


def test_diff_only_reports_changed_items():
    same = BillableItem(1, BillableKind.APPOINTMENT, 10, datetime(2025, 1, 1), True)
    flip = BillableItem(2, BillableKind.LABWORK, 10, datetime(2025, 1, 2), False)

    changes = diff_flags([same, flip], {same.key: True, flip.key: True})

    assert len(changes) == 1
    assert changes.to_paid[BillableKind.LABWORK] == [2]
    assert changes.to_paid[BillableKind.APPOINTMENT] == []
