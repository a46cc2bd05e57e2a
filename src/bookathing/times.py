from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import TypeAdapter, ValidationError

from .errors import InvalidInputError

Clock = Callable[[], datetime]

_datetime_adapter = TypeAdapter(datetime)
_date_adapter = TypeAdapter(date)


def utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidInputError(f"Unknown timezone {name!r}", field="timezone", value=name) from exc


def parse_instant(value: datetime | str, field: str, tz: tzinfo = UTC) -> datetime:
    """Parse ``value`` into an aware UTC datetime.

    Naive values are read as wall-clock time in ``tz``.
    """
    try:
        dt = _datetime_adapter.validate_python(value)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid {field}: {value!r}", field=field, value=str(value)) from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt.astimezone(UTC)


def parse_day(value: date | str, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    try:
        return _date_adapter.validate_python(value)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid {field}: {value!r}", field=field, value=str(value)) from exc


def dt_to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()
