"""
Static store configuration.

The store names and their persistence keys are a fixed contract shared by
the upload endpoint and the upload orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoreConfig:
    name: str
    key: str
    label: str
    description: str

    @property
    def hint(self) -> str:
        """Blob path the snapshot ends up at, e.g. ``records/data.json``."""
        return blob_path(self.name, self.key)


STORE_CONFIGS: tuple[StoreConfig, ...] = (
    StoreConfig(
        name="records",
        key="data",
        label="Records",
        description="Main database records",
    ),
    StoreConfig(
        name="users",
        key="all_users",
        label="Users",
        description="User accounts and roles",
    ),
    StoreConfig(
        name="stats",
        key="recent_logs",
        label="Statistics",
        description="Activity logs and metrics",
    ),
)

STORE_NAMES: tuple[str, ...] = tuple(config.name for config in STORE_CONFIGS)


def blob_path(store_name: str, key: str) -> str:
    return f"{store_name}/{key}.json"


def get_store_config(store_name: str) -> Optional[StoreConfig]:
    for config in STORE_CONFIGS:
        if config.name == store_name:
            return config
    return None
