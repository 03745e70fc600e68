from datetime import datetime, timedelta

import pytest

from filmstock.infra.Record_Store import InMemoryRecordStore
from filmstock.logic.inventory_service import InventoryService


class StepClock:
    """Deterministic clock: every call is one minute after the previous one."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock():
    return StepClock(datetime(2025, 1, 1, 9, 0))


@pytest.fixture
def service(clock):
    svc = InventoryService(InMemoryRecordStore(), clock=clock)
    svc.manufacturers.seed()
    return svc


@pytest.fixture
def film_payload():
    def make(**overrides):
        payload = {
            "name": "Portra 400",
            "manufacturer": "Kodak",
            "type": "Color",
            "speed": 400,
            "format": "35mm",
            "quantity": 1,
            "expiry_dates": ["12/2026"],
        }
        payload.update(overrides)
        return payload
    return make
