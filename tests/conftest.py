from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from bookathing.catalog import ResourceCatalog
from bookathing.status import StatusMonitor
from bookathing.store import BookingStore

# 2030-01-07 is a Monday
MONDAY = datetime(2030, 1, 7, tzinfo=UTC)


def at(hour: int, minute: int = 0, day: datetime = MONDAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


def catalog_data() -> dict[str, Any]:
    return {
        "app": {"name": "BookAThing"},
        "business": {"name": "Makerspace"},
        "defaults": {"slotDuration": 30},
        "workingHours": {
            "monday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "tuesday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "wednesday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "thursday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "friday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "saturday": {"enabled": False},
        },
        "resources": [
            {
                "id": "w1",
                "name": "Workbench 1",
                "workingHours": {"monday": {"enabled": True, "start": "09:00", "end": "10:00"}},
                "slotDuration": 30,
            },
            {"id": "room", "name": "Meeting Room"},
            {"id": "capped", "name": "3D Printer", "maxBookingsPerDay": 1},
            {"id": "approval", "name": "Laser Cutter", "requiresConfirmation": True},
            {"id": "tracked", "name": "Kiln", "showStatus": True},
        ],
    }


@pytest.fixture()
def catalog() -> ResourceCatalog:
    return ResourceCatalog.from_mapping(catalog_data())


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2030, 1, 1, tzinfo=UTC))


@pytest.fixture()
def store(catalog: ResourceCatalog, clock: FixedClock) -> BookingStore:
    return BookingStore(catalog, clock=clock)


@pytest.fixture()
def monitor(catalog: ResourceCatalog, store: BookingStore, clock: FixedClock) -> StatusMonitor:
    return StatusMonitor(catalog, store, clock=clock)
