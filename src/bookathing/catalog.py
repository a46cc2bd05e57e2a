from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any

import yaml
from aws_lambda_powertools import Logger
from pydantic import ValidationError

from .availability import resolve_working_hours
from .errors import ConfigError, NotFoundError
from .models import CatalogDocument, Resource, WorkingHours

logger = Logger()


class ResourceCatalog:
    """Read-only view over the configured resources and the global schedule defaults."""

    def __init__(self, document: CatalogDocument) -> None:
        if not document.resources:
            raise ConfigError("No resources defined in configuration")
        if not document.working_hours:
            raise ConfigError("Working hours not defined in configuration")
        duplicates = sorted(rid for rid, n in Counter(r.id for r in document.resources).items() if n > 1)
        if duplicates:
            raise ConfigError(f"Duplicate resource IDs found: {', '.join(duplicates)}")

        self._document = document
        self._resources: dict[str, Resource] = {r.id: r for r in document.resources}

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ResourceCatalog:
        try:
            document = CatalogDocument.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid catalog configuration: {exc}") from exc
        return cls(document)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._resources

    @property
    def default_working_hours(self) -> dict[str, WorkingHours]:
        return dict(self._document.working_hours or {})

    @property
    def default_slot_duration(self) -> int:
        return self._document.defaults.slot_duration

    @property
    def business(self) -> dict[str, Any]:
        return dict(self._document.business or {})

    @property
    def app_info(self) -> dict[str, Any]:
        return dict(self._document.app or {})

    @property
    def embed_settings(self) -> dict[str, Any]:
        return dict(self._document.embed or {})

    @property
    def defaults(self) -> dict[str, Any]:
        """The whole ``defaults`` block, camelCase keys included as configured."""
        return self._document.defaults.model_dump(by_alias=True)

    def all(self) -> list[Resource]:
        return list(self._resources.values())

    def find(self, resource_id: str) -> Resource | None:
        return self._resources.get(resource_id)

    def get(self, resource_id: str) -> Resource:
        resource = self._resources.get(resource_id)
        if resource is None:
            raise NotFoundError("resource", resource_id)
        return resource

    def working_hours(self, resource_id: str, weekday: str) -> WorkingHours | None:
        return resolve_working_hours(self.get(resource_id), weekday, self._document.working_hours)

    def slot_duration(self, resource_id: str) -> int:
        return self.get(resource_id).slot_duration or self.default_slot_duration


def load_catalog(path: str | Path) -> ResourceCatalog:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read catalog configuration at {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Catalog configuration at {path} must be a mapping")

    catalog = ResourceCatalog.from_mapping(data)
    logger.info("Configuration loaded", extra={"path": str(path), "resources": len(catalog)})
    return catalog
