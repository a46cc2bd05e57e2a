from __future__ import annotations

from dataclasses import dataclass

from .catalog import ResourceCatalog, load_catalog
from .config import Settings
from .mirror import BookingMirror, DynamoBookingMirror, NullMirror
from .status import StatusMonitor
from .store import BookingStore


@dataclass
class Services:
    settings: Settings
    catalog: ResourceCatalog
    store: BookingStore
    monitor: StatusMonitor
    mirror: BookingMirror


def build_services(settings: Settings, catalog: ResourceCatalog | None = None) -> Services:
    catalog = catalog or load_catalog(settings.catalog_path)
    mirror: BookingMirror = (
        DynamoBookingMirror(settings.table_name, max_workers=settings.mirror_workers)
        if settings.table_name
        else NullMirror()
    )
    store = BookingStore(catalog, mirror=mirror)
    monitor = StatusMonitor(catalog, store)
    return Services(settings=settings, catalog=catalog, store=store, monitor=monitor, mirror=mirror)
