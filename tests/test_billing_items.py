from datetime import datetime
from decimal import Decimal

from conftest import add_appointment, add_labwork, add_patient
from dental_ledger.services.billing_items import (
    BillableKind,
    collect_billable_items,
)


async def test_items_merged_oldest_first(db, tenant, patient):
    lab_jan10 = await add_labwork(db, patient, 80, datetime(2025, 1, 10))
    appt_feb = await add_appointment(db, patient, 120, datetime(2025, 2, 1, 9))
    appt_jan1 = await add_appointment(db, patient, 50, datetime(2025, 1, 1, 9))

    items = await collect_billable_items(db, tenant.id, patient.id)

    assert [(i.kind, i.id) for i in items] == [
        (BillableKind.APPOINTMENT, appt_jan1.id),
        (BillableKind.LABWORK, lab_jan10.id),
        (BillableKind.APPOINTMENT, appt_feb.id),
    ]
    assert items[0].amount == Decimal("50.00")
    assert items[0].occurred_on == datetime(2025, 1, 1, 9)
    assert items[0].is_paid is False


async def test_same_timestamp_puts_appointment_before_labwork(db, tenant, patient):
    when = datetime(2025, 3, 3, 12)
    lab = await add_labwork(db, patient, 30, when)
    appt = await add_appointment(db, patient, 30, when)

    items = await collect_billable_items(db, tenant.id, patient.id)

    assert [i.key for i in items] == [("Appointment", appt.id), ("LabWork", lab.id)]


async def test_non_billable_rows_are_excluded(db, tenant, other_tenant, patient):
    when = datetime(2025, 1, 5)
    keep = await add_appointment(db, patient, 10, when)
    await add_appointment(db, patient, None, when)
    await add_appointment(db, patient, 0, when)
    await add_appointment(db, patient, 25, when, is_active=False)
    await add_labwork(db, patient, 0, when)
    await add_labwork(db, patient, 40, when, is_active=False)

    other_patient = await add_patient(db, tenant, first_name="Luis")
    await add_appointment(db, other_patient, 99, when)
    foreign = await add_patient(db, other_tenant)
    await add_labwork(db, foreign, 99, when)

    items = await collect_billable_items(db, tenant.id, patient.id)

    assert [i.key for i in items] == [("Appointment", keep.id)]


async def test_paid_flag_is_carried(db, tenant, patient):
    await add_appointment(db, patient, 10, datetime(2025, 1, 1), is_paid=True)

    items = await collect_billable_items(db, tenant.id, patient.id)

    assert items[0].is_paid is True


async def test_inactive_or_unknown_patient_has_no_items(db, tenant):
    gone = await add_patient(db, tenant, is_active=False)
    await add_appointment(db, gone, 100, datetime(2025, 1, 1))

    assert await collect_billable_items(db, tenant.id, gone.id) == []
    assert await collect_billable_items(db, tenant.id, 999999) == []


async def test_wrong_tenant_sees_nothing(db, tenant, other_tenant, patient):
    await add_appointment(db, patient, 100, datetime(2025, 1, 1))

    assert await collect_billable_items(db, other_tenant.id, patient.id) == []
