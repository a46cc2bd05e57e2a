from http import HTTPStatus
from typing import Annotated, Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.metrics import Metrics, MetricUnit
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from bookathing.errors import (
    BookingError,
    CapacityExceededError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from bookathing.models import (
    Booking,
    BookingCreate,
    BookingStats,
    BookingStatusUpdate,
    DaySlots,
    Resource,
    ResourceStatusUpdate,
    StatusReport,
)
from bookathing.times import dt_to_iso, parse_day, utcnow
from bookathing.wiring import Services

logger = Logger()
tracer = Tracer()
metrics = Metrics(namespace="BookAThing")

API_VERSION = "2.0.0"

router = APIRouter(prefix="/api")

_STATUS_BY_ERROR: list[tuple[type[BookingError], HTTPStatus]] = [
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ConflictError, HTTPStatus.CONFLICT),
    (CapacityExceededError, HTTPStatus.BAD_REQUEST),
    (InvalidInputError, HTTPStatus.BAD_REQUEST),
]


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), HTTPStatus.BAD_REQUEST)
    return JSONResponse(status_code=status, content=exc.to_dict())


def create_app(services: Services) -> FastAPI:
    app = FastAPI(title="BookAThing API", version=API_VERSION)
    app.state.services = services
    app.add_exception_handler(BookingError, booking_error_handler)
    app.include_router(router)
    return app


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy", "timestamp": dt_to_iso(utcnow()), "version": API_VERSION}


@router.get("/config")
def get_config(services: ServicesDep) -> dict[str, Any]:
    catalog = services.catalog
    return {
        "app": catalog.app_info,
        "business": catalog.business,
        "embed": catalog.embed_settings,
        "defaults": catalog.defaults,
    }


@router.get("/embed/config")
def get_embed_config(services: ServicesDep) -> dict[str, Any]:
    # trimmed resource cards for the iframe widget
    catalog = services.catalog
    return {
        "embed": catalog.embed_settings,
        "app": catalog.app_info,
        "resources": [r.model_dump(include={"id", "name", "type", "color", "icon"}) for r in catalog.all()],
    }


@router.get("/resources", response_model=list[Resource])
@tracer.capture_method
def list_resources(services: ServicesDep) -> list[Resource]:
    return services.catalog.all()


@router.get("/resources/{resource_id}", response_model=Resource)
@tracer.capture_method
def get_resource(resource_id: str, services: ServicesDep) -> Resource:
    return services.catalog.get(resource_id)


@router.get("/resources/{resource_id}/status", response_model=StatusReport)
@tracer.capture_method
def get_resource_status(resource_id: str, services: ServicesDep) -> StatusReport:
    return services.monitor.describe(resource_id)


@router.put("/resources/{resource_id}/status")
@tracer.capture_method
def set_resource_status(resource_id: str, payload: ResourceStatusUpdate, services: ServicesDep) -> dict[str, Any]:
    status = services.monitor.set_status(resource_id, payload.status)
    return {"success": True, "status": status}


@router.get("/resources/{resource_id}/slots", response_model=DaySlots)
@tracer.capture_method
def get_slots(
    resource_id: str,
    services: ServicesDep,
    date: str | None = None,
    timezone: str | None = None,
) -> DaySlots:
    resource = services.catalog.get(resource_id)
    if not date:
        raise InvalidInputError("Date parameter required", field="date")
    tz = timezone or services.settings.default_timezone
    day = parse_day(date)
    slots = services.store.available_slots(resource_id, day, tz)
    return DaySlots(
        resource=resource.name,
        day=day,
        timezone=tz,
        slot_duration=services.catalog.slot_duration(resource_id),
        slots=slots,
        message=None if slots else "Resource not available on this day",
    )


@router.post("/bookings", response_model=Booking, status_code=201)
@tracer.capture_method
def create_booking(payload: BookingCreate, services: ServicesDep) -> Booking:
    booking = services.store.create(
        payload.resource_id,
        payload.start_time,
        payload.end_time,
        payload.user_name,
        payload.user_email,
        payload.user_phone,
        payload.notes,
        timezone=payload.timezone or services.settings.default_timezone,
    )
    metrics.add_metric(name="CreateBooking", value=1, unit=MetricUnit.Count)
    return booking


@router.get("/bookings", response_model=list[Booking])
@tracer.capture_method
def list_bookings(
    services: ServicesDep,
    resource_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    status: str | None = None,
    user_name: str | None = None,
) -> list[Booking]:
    return services.store.list_bookings(
        resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        user_name=user_name,
    )


@router.get("/bookings/{booking_id}", response_model=Booking)
@tracer.capture_method
def get_booking(booking_id: str, services: ServicesDep) -> Booking:
    return services.store.get(booking_id)


@router.delete("/bookings/{booking_id}", response_model=Booking)
@tracer.capture_method
def cancel_booking(booking_id: str, services: ServicesDep) -> Booking:
    metrics.add_metric(name="CancelBooking", value=1, unit=MetricUnit.Count)
    return services.store.cancel(booking_id)


@router.put("/bookings/{booking_id}/status", response_model=Booking)
@tracer.capture_method
def update_booking_status(booking_id: str, payload: BookingStatusUpdate, services: ServicesDep) -> Booking:
    return services.store.set_status(booking_id, payload.status)


@router.get("/stats", response_model=BookingStats)
@tracer.capture_method
def get_stats(services: ServicesDep, timezone: str | None = None) -> BookingStats:
    return services.store.stats(timezone or services.settings.default_timezone)
