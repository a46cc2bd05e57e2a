from __future__ import annotations

from datetime import date, datetime
from typing import Any


class BookingError(Exception):
    """Base class for business-rule rejections raised by the core."""

    kind = "booking_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "detail": self.message,
            "context": {k: _jsonable(v) for k, v in self.context.items()},
        }


class NotFoundError(BookingError, LookupError):
    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity.capitalize()} not found", entity=entity, entity_id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class InvalidInputError(BookingError, ValueError):
    kind = "invalid_input"

    def __init__(self, message: str, *, field: str, **context: Any) -> None:
        super().__init__(message, field=field, **context)
        self.field = field


class InvalidStatusError(InvalidInputError):
    kind = "invalid_status"

    def __init__(self, status: str, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"Invalid status {status!r}; expected one of {', '.join(allowed)}",
            field="status",
            value=status,
        )
        self.status = status
        self.allowed = allowed


class ConflictError(BookingError):
    kind = "conflict"

    def __init__(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        conflicting_booking_id: str,
    ) -> None:
        super().__init__(
            "Time slot already booked",
            resource_id=resource_id,
            start=start,
            end=end,
            conflicting_booking_id=conflicting_booking_id,
        )
        self.resource_id = resource_id
        self.start = start
        self.end = end
        self.conflicting_booking_id = conflicting_booking_id


class CapacityExceededError(BookingError):
    kind = "capacity_exceeded"

    def __init__(self, resource_id: str, user_name: str, limit: int, day: date) -> None:
        super().__init__(
            f"Maximum {limit} bookings per day for this resource",
            resource_id=resource_id,
            user_name=user_name,
            limit=limit,
            day=day,
        )
        self.resource_id = resource_id
        self.user_name = user_name
        self.limit = limit
        self.day = day


class ConfigError(ValueError):
    """Raised when the resource catalog configuration is unusable."""


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
