from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol, TypedDict

import boto3
from aws_lambda_powertools import Logger

if TYPE_CHECKING:
    # Only for static type checking; not imported at runtime
    from mypy_boto3_dynamodb.service_resource import Table as DynamoDBTable
else:
    DynamoDBTable = Any  # type: ignore[assignment]

from .models import Booking
from .times import dt_to_iso

logger = Logger()


class BookingMirror(Protocol):
    def publish(self, booking: Booking) -> None: ...

    def close(self) -> None: ...


class NullMirror:
    """Mirror used when no external store is configured."""

    def publish(self, booking: Booking) -> None:
        return None

    def close(self) -> None:
        return None


class BookingItem(TypedDict, total=False):
    booking_id: str
    resource_id: str
    resource_name: str
    start_time: str
    end_time: str
    user_name: str
    user_email: str
    user_phone: str
    notes: str
    status: str
    created_at: str
    cancelled_at: str
    updated_at: str


def to_item(booking: Booking) -> BookingItem:
    item: BookingItem = {
        "booking_id": booking.id,
        "resource_id": booking.resource_id,
        "resource_name": booking.resource_name,
        "start_time": dt_to_iso(booking.start_time),
        "end_time": dt_to_iso(booking.end_time),
        "user_name": booking.user_name,
        "status": booking.status,
        "created_at": dt_to_iso(booking.created_at),
    }
    # optional contact fields are omitted when empty
    if booking.user_email:
        item["user_email"] = booking.user_email
    if booking.user_phone:
        item["user_phone"] = booking.user_phone
    if booking.notes:
        item["notes"] = booking.notes
    if booking.cancelled_at is not None:
        item["cancelled_at"] = dt_to_iso(booking.cancelled_at)
    if booking.updated_at is not None:
        item["updated_at"] = dt_to_iso(booking.updated_at)
    return item


class DynamoBookingMirror:
    """Best-effort copy of committed bookings into a DynamoDB table.

    Writes run on a background pool; a failed write is logged and dropped.
    ``publish`` never raises, so the in-memory commit that triggered it is
    never affected.
    """

    def __init__(
        self,
        table_name: str,
        *,
        table: DynamoDBTable | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 1,
    ) -> None:
        self.table_name = table_name
        self._table = table
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="booking-mirror")

    @property
    def table(self) -> DynamoDBTable:
        if self._table is None:
            self._table = boto3.resource("dynamodb").Table(self.table_name)
        return self._table

    def publish(self, booking: Booking) -> None:
        item = to_item(booking)
        try:
            future = self._executor.submit(self._write, item)
        except RuntimeError:
            # executor already shut down
            logger.exception("Mirror write not scheduled", extra={"booking_id": booking.id})
            return
        future.add_done_callback(partial(self._log_failure, booking.id))

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _write(self, item: BookingItem) -> str:
        self.table.put_item(Item=item)  # type: ignore
        return item["booking_id"]

    def _log_failure(self, booking_id: str, future: Future[str]) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Mirror write failed",
                extra={"table": self.table_name, "booking_id": booking_id, "error": repr(exc)},
            )
