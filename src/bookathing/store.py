from __future__ import annotations

import threading
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta

from aws_lambda_powertools import Logger

from .availability import compute_slots, intervals_overlap
from .catalog import ResourceCatalog
from .errors import (
    BookingError,
    CapacityExceededError,
    ConflictError,
    InvalidInputError,
    InvalidStatusError,
    NotFoundError,
)
from .mirror import BookingMirror, NullMirror
from .models import BOOKING_STATUSES, Booking, BookingStats, Slot
from .times import Clock, parse_instant, resolve_timezone, utcnow

logger = Logger()


class BookingStore:
    """In-memory owner of all bookings.

    ``create``, ``cancel`` and ``set_status`` run their validate-then-commit
    step while holding the lock of the booking's resource, so two requests for
    the same resource can never both pass the conflict check. Bookings are
    immutable models; every mutation replaces the stored instance.
    """

    def __init__(
        self,
        catalog: ResourceCatalog,
        *,
        mirror: BookingMirror | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.catalog = catalog
        self._mirror = mirror or NullMirror()
        self._clock = clock
        self._bookings: dict[str, Booking] = {}
        self._index_lock = threading.Lock()
        self._resource_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._lock_lock = threading.Lock()

    def _resource_lock(self, resource_id: str) -> threading.Lock:
        with self._lock_lock:
            return self._resource_locks[resource_id]

    def _snapshot(self, resource_id: str | None = None) -> list[Booking]:
        with self._index_lock:
            bookings = list(self._bookings.values())
        if resource_id is None:
            return bookings
        return [b for b in bookings if b.resource_id == resource_id]

    def _put(self, booking: Booking) -> None:
        with self._index_lock:
            self._bookings[booking.id] = booking

    def create(
        self,
        resource_id: str,
        start: datetime | str,
        end: datetime | str,
        user_name: str,
        user_email: str | None = None,
        user_phone: str | None = None,
        notes: str | None = None,
        *,
        timezone: str = "UTC",
    ) -> Booking:
        resource = self.catalog.get(resource_id)

        tz = resolve_timezone(timezone)
        start_time = parse_instant(start, "start_time", tz)
        end_time = parse_instant(end, "end_time", tz)
        if start_time >= end_time:
            raise InvalidInputError(
                "start_time must be before end_time",
                field="end_time",
                start=start_time,
                end=end_time,
            )
        if not user_name or not user_name.strip():
            raise InvalidInputError("user_name is required", field="user_name")

        with self._resource_lock(resource_id):
            active = [b for b in self._snapshot(resource_id) if b.status != "cancelled"]
            try:
                for existing in active:
                    if intervals_overlap(start_time, end_time, existing.start_time, existing.end_time):
                        raise ConflictError(resource_id, start_time, end_time, existing.id)

                if resource.max_bookings_per_day:
                    day = start_time.astimezone(tz).date()
                    same_day = [
                        b for b in active
                        if b.user_name == user_name and b.start_time.astimezone(tz).date() == day
                    ]
                    if len(same_day) >= resource.max_bookings_per_day:
                        raise CapacityExceededError(resource_id, user_name, resource.max_bookings_per_day, day)
            except BookingError as exc:
                logger.info("Booking rejected", extra=exc.to_dict())
                raise

            booking = Booking(
                id=str(uuid.uuid4()),
                resource_id=resource_id,
                resource_name=resource.name,
                start_time=start_time,
                end_time=end_time,
                user_name=user_name,
                user_email=user_email or "",
                user_phone=user_phone or "",
                notes=notes or "",
                status="pending" if resource.requires_confirmation else "confirmed",
                created_at=self._clock(),
            )
            self._put(booking)

        logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "resource_id": resource_id, "status": booking.status},
        )
        self._mirror.publish(booking)
        return booking

    def get(self, booking_id: str) -> Booking:
        with self._index_lock:
            booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("booking", booking_id)
        return booking

    def cancel(self, booking_id: str) -> Booking:
        """Cancel a booking; cancelling it again returns it unchanged."""
        resource_id = self.get(booking_id).resource_id
        with self._resource_lock(resource_id):
            current = self.get(booking_id)
            if current.status == "cancelled":
                return current
            booking = current.model_copy(update={"status": "cancelled", "cancelled_at": self._clock()})
            self._put(booking)

        logger.info("Booking cancelled", extra={"booking_id": booking_id, "resource_id": resource_id})
        self._mirror.publish(booking)
        return booking

    def set_status(self, booking_id: str, status: str) -> Booking:
        """Set any of the booking statuses; no transition is refused.

        Reactivating a cancelled booking skips conflict detection, so it can
        end up overlapping a booking made after the cancellation.
        """
        if status not in BOOKING_STATUSES:
            raise InvalidStatusError(status, BOOKING_STATUSES)
        resource_id = self.get(booking_id).resource_id
        with self._resource_lock(resource_id):
            current = self.get(booking_id)
            now = self._clock()
            update: dict[str, object] = {"status": status, "updated_at": now}
            if status == "cancelled" and current.cancelled_at is None:
                update["cancelled_at"] = now
            booking = current.model_copy(update=update)
            self._put(booking)

        logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "from": current.status, "to": status},
        )
        self._mirror.publish(booking)
        return booking

    def list_bookings(
        self,
        resource_id: str | None = None,
        start_date: datetime | str | None = None,
        end_date: datetime | str | None = None,
        status: str | None = None,
        user_name: str | None = None,
    ) -> list[Booking]:
        if status is not None and status not in BOOKING_STATUSES:
            raise InvalidStatusError(status, BOOKING_STATUSES)
        lower = parse_instant(start_date, "start_date") if start_date is not None else None
        upper = parse_instant(end_date, "end_date") if end_date is not None else None
        needle = user_name.lower() if user_name else None

        result = []
        for b in self._snapshot(resource_id):
            if lower is not None and b.start_time < lower:
                continue
            if upper is not None and b.start_time > upper:
                continue
            if status is not None and b.status != status:
                continue
            if needle is not None and needle not in b.user_name.lower():
                continue
            result.append(b)
        result.sort(key=lambda b: b.start_time)
        return result

    def active_booking(self, resource_id: str, at: datetime | None = None) -> Booking | None:
        at = at or self._clock()
        for b in self._snapshot(resource_id):
            if b.status != "cancelled" and b.start_time <= at < b.end_time:
                return b
        return None

    def available_slots(self, resource_id: str, day: date | str, timezone: str = "UTC") -> list[Slot]:
        resource = self.catalog.get(resource_id)
        return compute_slots(
            resource,
            day,
            timezone,
            [b for b in self._snapshot(resource_id) if b.status != "cancelled"],
            default_hours=self.catalog.default_working_hours,
            default_slot_duration=self.catalog.default_slot_duration,
            now=self._clock(),
        )

    def stats(self, timezone: str = "UTC") -> BookingStats:
        tz = resolve_timezone(timezone)
        today = self._clock().astimezone(tz).date()
        week_start = today - timedelta(days=today.weekday())
        week_end = week_start + timedelta(days=6)

        bookings = self._snapshot()
        live = [b for b in bookings if b.status != "cancelled"]
        local_days = [b.start_time.astimezone(tz).date() for b in live]
        return BookingStats(
            today_bookings=sum(1 for d in local_days if d == today),
            week_bookings=sum(1 for d in local_days if week_start <= d <= week_end),
            total_bookings=len(live),
            active_resources=len(self.catalog),
            pending_approvals=sum(1 for b in bookings if b.status == "pending"),
        )

