import json
import sqlite3
from datetime import UTC, datetime
from typing import Any

from src.components.cookie_consent.models import PersistenceError
from src.domain.entities import Store, StoreModuleSettings


SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteStoreDirectory:
    """SQLite adapter for the stores table (read mostly)."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def get(self, store_id: int) -> Store | None:
        # Ids SQLite cannot represent never match a row
        if not SQLITE_INT_MIN <= store_id <= SQLITE_INT_MAX:
            return None
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM stores WHERE id = ?", (store_id,)).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def list_all(self) -> list[Store]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM stores ORDER BY id").fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def add(self, name: str) -> Store:
        conn = self._get_conn()
        try:
            created_at = datetime.now(UTC)
            cursor = conn.execute(
                "INSERT INTO stores (name, created_at) VALUES (?, ?)",
                (name, created_at.isoformat()),
            )
            conn.commit()
            store_id = cursor.lastrowid
            if store_id is None:
                raise RuntimeError("Store insert did not return an id")
            return Store(id=store_id, name=name, created_at=created_at)
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Store:
        return Store(
            id=row["id"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteConsentSettingsRepo:
    """SQLite adapter for per-store module settings (one row per store and module)."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def get(self, store_id: int, module_slug: str) -> StoreModuleSettings | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM store_module_settings WHERE store_id = ? AND module_slug = ?",
                (store_id, module_slug),
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def list_for_module(self, module_slug: str) -> list[StoreModuleSettings]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM store_module_settings WHERE module_slug = ? ORDER BY store_id",
                (module_slug,),
            ).fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def save(self, record: StoreModuleSettings) -> StoreModuleSettings:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO store_module_settings (
                    store_id, module_slug, is_enabled, settings_json, updated_at
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(store_id, module_slug) DO UPDATE SET
                    is_enabled=excluded.is_enabled,
                    settings_json=excluded.settings_json,
                    updated_at=excluded.updated_at
            """,
                (
                    record.store_id,
                    record.module_slug,
                    1 if record.is_enabled else 0,
                    json.dumps(record.settings),
                    record.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return record
        except (sqlite3.Error, OverflowError) as e:
            conn.rollback()
            raise PersistenceError(record.store_id, str(e)) from e
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> StoreModuleSettings:
        settings = json.loads(row["settings_json"]) if row["settings_json"] else {}
        return StoreModuleSettings(
            store_id=row["store_id"],
            module_slug=row["module_slug"],
            is_enabled=bool(row["is_enabled"]),
            settings=settings if isinstance(settings, dict) else {},
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
