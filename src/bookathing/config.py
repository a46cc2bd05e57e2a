from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    catalog_path: str = "config.yaml"
    table_name: str = ""
    default_timezone: str = "UTC"
    mirror_workers: int = 1

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            catalog_path=os.environ.get("CATALOG_PATH", "config.yaml"),
            table_name=os.environ.get("TABLE_NAME", ""),
            default_timezone=os.environ.get("DEFAULT_TIMEZONE", "UTC"),
            mirror_workers=int(os.environ.get("MIRROR_WORKERS", "1")),
        )
