from __future__ import annotations

import pytest

from bookathing.errors import InvalidInputError, InvalidStatusError, NotFoundError
from bookathing.status import StatusMonitor
from bookathing.store import BookingStore

from conftest import at


def test_untracked_resource_ignores_everything(monitor: StatusMonitor, store: BookingStore, clock) -> None:
    clock.now = at(10, 15)
    store.create("room", at(10), at(11), "alice")
    monitor.set_status("room", "maintenance")

    assert monitor.compute_status("room") == "not_tracked"
    report = monitor.describe("room")
    assert report.current_booking is None


def test_tracked_resource_defaults_to_available(monitor: StatusMonitor) -> None:
    assert monitor.compute_status("tracked") == "available"


def test_manual_status_is_reported_when_idle(monitor: StatusMonitor) -> None:
    monitor.set_status("tracked", "maintenance")
    assert monitor.compute_status("tracked") == "maintenance"

    monitor.set_status("tracked", "offline")
    assert monitor.compute_status("tracked") == "offline"


def test_active_booking_overrides_manual_status(monitor: StatusMonitor, store: BookingStore, clock) -> None:
    monitor.set_status("tracked", "available")
    booking = store.create("tracked", at(10), at(11), "alice")
    clock.now = at(10, 30)

    assert monitor.compute_status("tracked") == "in_use"
    report = monitor.describe("tracked")
    assert report.current_booking is not None
    assert report.current_booking.id == booking.id
    assert report.current_booking.user_name == "alice"
    assert report.current_booking.end_time == at(11)
    assert report.last_updated == clock.now


def test_manual_status_returns_after_booking_ends(monitor: StatusMonitor, store: BookingStore, clock) -> None:
    monitor.set_status("tracked", "maintenance")
    store.create("tracked", at(10), at(11), "alice")

    clock.now = at(11)
    assert monitor.compute_status("tracked") == "maintenance"


def test_cancelled_booking_does_not_occupy(monitor: StatusMonitor, store: BookingStore, clock) -> None:
    booking = store.create("tracked", at(10), at(11), "alice")
    store.cancel(booking.id)
    clock.now = at(10, 30)

    assert monitor.compute_status("tracked") == "available"


def test_pending_booking_counts_as_in_use(monitor: StatusMonitor, store: BookingStore, clock) -> None:
    booking = store.create("tracked", at(10), at(11), "alice")
    store.set_status(booking.id, "pending")
    clock.now = at(10)

    assert monitor.compute_status("tracked") == "in_use"


def test_set_status_returns_the_stored_value(monitor: StatusMonitor) -> None:
    assert monitor.set_status("tracked", "in_use") == "in_use"
    assert monitor.compute_status("tracked") == "in_use"


@pytest.mark.parametrize("status", ["broken", "not_tracked", ""])
def test_set_status_rejects_unknown_values(monitor: StatusMonitor, status: str) -> None:
    with pytest.raises(InvalidStatusError) as exc_info:
        monitor.set_status("tracked", status)
    assert isinstance(exc_info.value, InvalidInputError)
    assert monitor.compute_status("tracked") == "available"


def test_unknown_resource(monitor: StatusMonitor) -> None:
    with pytest.raises(NotFoundError):
        monitor.compute_status("nope")
    with pytest.raises(NotFoundError):
        monitor.set_status("nope", "offline")
