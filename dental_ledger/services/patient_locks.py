# dental_ledger/services/patient_locks.py
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Tuple

LockKey = Tuple[int, int]


class PatientLocks:
    """
    In-process mutex per (tenant_id, patient_id).

    Serializes payment mutations of one patient inside a worker; the
    FOR UPDATE row lock on the patient covers other workers/processes.
    Entries are dropped when nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: Dict[LockKey, asyncio.Lock] = {}
        self._users: Dict[LockKey, int] = {}

    @asynccontextmanager
    async def hold(self, tenant_id: int, patient_id: int) -> AsyncIterator[None]:
        key = (int(tenant_id), int(patient_id))
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


patient_locks = PatientLocks()
