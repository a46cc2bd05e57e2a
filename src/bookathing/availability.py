from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, timedelta

from .models import WEEKDAYS, Booking, Resource, Slot, WorkingHours
from .times import parse_day, resolve_timezone, utcnow

DEFAULT_SLOT_DURATION = 30


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open ``[a_start, a_end)`` and ``[b_start, b_end)`` share an instant.

    Intervals that only touch (one ends where the other starts) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def resolve_working_hours(
    resource: Resource,
    weekday: str,
    default_hours: Mapping[str, WorkingHours] | None = None,
) -> WorkingHours | None:
    if resource.working_hours and weekday in resource.working_hours:
        return resource.working_hours[weekday]
    return (default_hours or {}).get(weekday)


def compute_slots(
    resource: Resource,
    day: date | str,
    timezone: str,
    existing_bookings: Iterable[Booking],
    *,
    default_hours: Mapping[str, WorkingHours] | None = None,
    default_slot_duration: int = DEFAULT_SLOT_DURATION,
    now: datetime | None = None,
) -> list[Slot]:
    """Return the bookable slots of ``resource`` for one calendar day.

    The day's weekday picks the working hours (resource override first, then
    ``default_hours``); a missing or disabled entry yields no slots. Slots are
    laid out back to back from the local opening time and a trailing interval
    that would run past closing is dropped. Boundaries are computed on UTC
    instants, so every slot lasts exactly the slot duration even across a DST
    change.
    """
    tz = resolve_timezone(timezone)
    day = parse_day(day)
    hours = resolve_working_hours(resource, weekday_name(day), default_hours)
    if hours is None or not hours.enabled:
        return []

    step = timedelta(minutes=resource.slot_duration or default_slot_duration)
    now = now or utcnow()
    cursor = datetime.combine(day, hours.start, tzinfo=tz).astimezone(UTC)
    bound = datetime.combine(day, hours.end, tzinfo=tz).astimezone(UTC)

    taken = [
        (b.start_time, b.end_time)
        for b in existing_bookings
        if b.resource_id == resource.id and b.status != "cancelled"
    ]

    slots: list[Slot] = []
    while cursor + step <= bound:
        end = cursor + step
        is_booked = any(intervals_overlap(cursor, end, start, stop) for start, stop in taken)
        is_past = cursor < now
        slots.append(
            Slot(
                start=cursor,
                end=end,
                start_formatted=cursor.astimezone(tz).strftime("%H:%M"),
                end_formatted=end.astimezone(tz).strftime("%H:%M"),
                available=not is_booked and not is_past,
                is_past=is_past,
                is_booked=is_booked,
            )
        )
        cursor = end
    return slots
