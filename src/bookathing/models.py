from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
ResourceStatus = Literal["available", "in_use", "maintenance", "offline", "not_tracked"]
ManualStatus = Literal["available", "in_use", "maintenance", "offline"]

BOOKING_STATUSES: tuple[str, ...] = get_args(BookingStatus)
MANUAL_STATUSES: tuple[str, ...] = get_args(ManualStatus)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_HHMM = re.compile(r"\d{1,2}:\d{2}")


class _ConfigModel(BaseModel):
    # config documents use camelCase keys; python code uses snake_case
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class WorkingHours(_ConfigModel):
    enabled: bool = True
    start: time | None = None
    end: time | None = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _check_clock_time(cls, value: object) -> object:
        # YAML 1.1 reads an unquoted 9:00 as the base-60 integer 540
        if value is None or isinstance(value, time):
            return value
        if isinstance(value, str) and _HHMM.fullmatch(value.strip()):
            return value.strip().zfill(5)
        raise ValueError(f"working hours must be quoted HH:MM strings, got {value!r}")

    @model_validator(mode="after")
    def _check_window(self) -> WorkingHours:
        if not self.enabled:
            return self
        if self.start is None or self.end is None:
            raise ValueError("enabled working hours need both start and end")
        if self.start >= self.end:
            raise ValueError("working hours start must be before end")
        return self


def _normalize_weekdays(value: dict[str, WorkingHours] | None) -> dict[str, WorkingHours] | None:
    if value is None:
        return None
    normalized = {}
    for day, hours in value.items():
        key = day.strip().lower()
        if key not in WEEKDAYS:
            raise ValueError(f"unknown weekday {day!r}")
        normalized[key] = hours
    return normalized


class Resource(_ConfigModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    working_hours: dict[str, WorkingHours] | None = None
    slot_duration: int | None = Field(default=None, gt=0)
    requires_confirmation: bool = False
    max_bookings_per_day: int | None = Field(default=None, gt=0)
    show_status: bool = False

    @field_validator("working_hours")
    @classmethod
    def _check_weekdays(cls, value: dict[str, WorkingHours] | None) -> dict[str, WorkingHours] | None:
        return _normalize_weekdays(value)


class Defaults(_ConfigModel):
    # unknown keys are kept and passed through to clients
    model_config = ConfigDict(extra="allow")

    slot_duration: int = Field(default=30, gt=0)


class CatalogDocument(_ConfigModel):
    resources: list[Resource] = Field(default_factory=list)
    working_hours: dict[str, WorkingHours] | None = None
    defaults: Defaults = Field(default_factory=Defaults)
    business: dict | None = None
    app: dict | None = None
    embed: dict | None = None

    @field_validator("working_hours")
    @classmethod
    def _check_weekdays(cls, value: dict[str, WorkingHours] | None) -> dict[str, WorkingHours] | None:
        return _normalize_weekdays(value)


class Booking(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    resource_id: str
    resource_name: str
    start_time: datetime
    end_time: datetime
    user_name: str
    user_email: str = ""
    user_phone: str = ""
    notes: str = ""
    status: BookingStatus
    created_at: datetime
    cancelled_at: datetime | None = None
    updated_at: datetime | None = None


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    start_formatted: str
    end_formatted: str
    available: bool
    is_past: bool
    is_booked: bool


class BookingCreate(BaseModel):
    # validated by the store so that an unknown resource is reported before bad input
    resource_id: str
    start_time: str | datetime
    end_time: str | datetime
    user_name: str
    user_email: str | None = None
    user_phone: str | None = None
    notes: str | None = None
    timezone: str | None = None


class BookingStatusUpdate(BaseModel):
    status: str


class ResourceStatusUpdate(BaseModel):
    status: str


class DaySlots(BaseModel):
    resource: str
    day: date
    timezone: str
    slot_duration: int
    slots: list[Slot]
    message: str | None = None


class ActiveBookingSummary(BaseModel):
    id: str
    user_name: str
    end_time: datetime


class StatusReport(BaseModel):
    status: ResourceStatus
    current_booking: ActiveBookingSummary | None = None
    last_updated: datetime


class BookingStats(BaseModel):
    today_bookings: int
    week_bookings: int
    total_bookings: int
    active_resources: int
    pending_approvals: int
