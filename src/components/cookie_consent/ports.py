"""
Cookie consent component - Port interfaces.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import Store, StoreModuleSettings


class ConsentSettingsRepoPort(Protocol):
    """Settings store gateway, one record per (store, module)."""

    def get(self, store_id: int, module_slug: str) -> StoreModuleSettings | None:
        """Get the stored record, or None if the store was never configured."""
        ...

    def save(self, record: StoreModuleSettings) -> StoreModuleSettings:
        """
        Replace the stored record (upsert).

        Raises PersistenceError if the write fails; the previous record
        must remain intact in that case.
        """
        ...

    def list_for_module(self, module_slug: str) -> list[StoreModuleSettings]:
        """All stored records for a module."""
        ...


class StoreDirectoryPort(Protocol):
    """Lookup of existing stores."""

    def get(self, store_id: int) -> Store | None:
        """Get a store, or None if no store has this id."""
        ...

    def list_all(self) -> list[Store]:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
