from __future__ import annotations

import threading

from aws_lambda_powertools import Logger

from .catalog import ResourceCatalog
from .errors import InvalidStatusError
from .models import MANUAL_STATUSES, ActiveBookingSummary, ResourceStatus, StatusReport
from .store import BookingStore
from .times import Clock, utcnow

logger = Logger()


class StatusMonitor:
    """Live occupancy of resources.

    A booking running right now always reports ``in_use``; otherwise the last
    status pushed from outside (e.g. an IoT sensor) wins, defaulting to
    ``available``. Resources with ``show_status`` off are ``not_tracked``.
    """

    def __init__(self, catalog: ResourceCatalog, store: BookingStore, *, clock: Clock = utcnow) -> None:
        self.catalog = catalog
        self.store = store
        self._clock = clock
        self._manual: dict[str, str] = {}
        self._lock = threading.Lock()

    def compute_status(self, resource_id: str) -> ResourceStatus:
        return self.describe(resource_id).status

    def describe(self, resource_id: str) -> StatusReport:
        resource = self.catalog.get(resource_id)
        now = self._clock()
        if not resource.show_status:
            return StatusReport(status="not_tracked", last_updated=now)

        current = self.store.active_booking(resource_id, at=now)
        if current is not None:
            return StatusReport(
                status="in_use",
                current_booking=ActiveBookingSummary(
                    id=current.id,
                    user_name=current.user_name,
                    end_time=current.end_time,
                ),
                last_updated=now,
            )

        with self._lock:
            manual = self._manual.get(resource_id, "available")
        return StatusReport(status=manual, last_updated=now)

    def set_status(self, resource_id: str, status: str) -> ResourceStatus:
        self.catalog.get(resource_id)
        if status not in MANUAL_STATUSES:
            raise InvalidStatusError(status, MANUAL_STATUSES)
        with self._lock:
            previous = self._manual.get(resource_id)
            self._manual[resource_id] = status
        logger.info("Resource status set", extra={"resource_id": resource_id, "from": previous, "to": status})
        return status  # type: ignore[return-value]
