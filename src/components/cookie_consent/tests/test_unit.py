"""
Cookie consent component unit tests.

Tests for reading, replacing and resetting per-store settings.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from src.components.cookie_consent import (
    CookieConsentService,
    GetConsentSettingsInput,
    ListStoresInput,
    PersistenceError,
    ResetConsentSettingsInput,
    UpdateConsentSettingsInput,
    get_default_settings,
    run,
    run_get,
    run_list,
    run_reset,
    run_update,
)
from src.components.cookie_consent.defaults import get_default_settings_dict
from src.domain.entities import Store, StoreModuleSettings

# --- Mock Ports ---


class MockConsentRepo:
    """In-memory settings repository for testing."""

    def __init__(self) -> None:
        self._records: dict[tuple[int, str], StoreModuleSettings] = {}
        self.save_calls = 0
        self.fail_saves = False

    def get(self, store_id: int, module_slug: str) -> StoreModuleSettings | None:
        return self._records.get((store_id, module_slug))

    def save(self, record: StoreModuleSettings) -> StoreModuleSettings:
        self.save_calls += 1
        if self.fail_saves:
            raise PersistenceError(record.store_id, "disk full")
        self._records[(record.store_id, record.module_slug)] = record
        return record

    def list_for_module(self, module_slug: str) -> list[StoreModuleSettings]:
        return [r for (_, slug), r in self._records.items() if slug == module_slug]


class MockStoreDirectory:
    """Fixed set of stores."""

    def __init__(self, stores: list[Store]) -> None:
        self._stores = {s.id: s for s in stores}

    def get(self, store_id: int) -> Store | None:
        return self._stores.get(store_id)

    def list_all(self) -> list[Store]:
        return list(self._stores.values())


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now_utc(self) -> datetime:
        return self._now


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def scenario_payload() -> dict[str, Any]:
    payload = get_default_settings_dict()
    payload.update(
        enabled=True,
        position="top",
        layout="box",
        theme="dark",
        cookie_expiry_days=180,
        sort_order=2,
    )
    payload["scripts"] = {"analytics": "ga.js"}
    return payload


@pytest.fixture
def repo() -> MockConsentRepo:
    return MockConsentRepo()


@pytest.fixture
def service(repo: MockConsentRepo) -> CookieConsentService:
    stores = MockStoreDirectory([Store(id=7, name="Outlet"), Store(id=42, name="Flagship")])
    return CookieConsentService(repo=repo, stores=stores, time_port=FixedClock(NOW))


# --- Read Tests ---


class TestGetSettings:
    """Test reading settings."""

    def test_unconfigured_store_returns_defaults(self, service: CookieConsentService) -> None:
        result = run_get(GetConsentSettingsInput(store_id=42), service)

        assert result.success is True
        assert result.view is not None
        assert result.view.settings == get_default_settings()
        assert result.view.is_default is True
        assert result.view.is_enabled is False
        assert result.view.updated_at is None
        assert result.view.store_name == "Flagship"

    def test_options_are_included(self, service: CookieConsentService) -> None:
        result = run_get(GetConsentSettingsInput(store_id=42), service)

        assert [o.value for o in result.options["position"]] == ["bottom", "top", "center"]
        assert [o.value for o in result.options["layout"]] == ["bar", "box", "popup"]
        assert [o.value for o in result.options["theme"]] == ["light", "dark", "auto"]

    def test_unknown_store(self, service: CookieConsentService) -> None:
        result = run_get(GetConsentSettingsInput(store_id=999), service)

        assert result.success is False
        assert result.view is None
        assert result.errors[0].field == "store_id"
        assert result.errors[0].code == "not_found"

    def test_partial_stored_blob_is_merged_with_defaults(
        self, service: CookieConsentService, repo: MockConsentRepo
    ) -> None:
        repo.save(
            StoreModuleSettings(
                store_id=7,
                module_slug=service.module_slug,
                is_enabled=True,
                settings={"theme": "dark", "texts": {"close": "X"}},
                updated_at=NOW,
            )
        )

        result = run_get(GetConsentSettingsInput(store_id=7), service)

        assert result.view is not None
        settings = result.view.settings
        assert settings.theme == "dark"
        assert settings.texts.close == "X"
        assert settings.texts.accept_all == "Accept All"
        assert settings.categories.necessary.enabled is True
        assert result.view.is_default is False

    def test_corrupt_stored_blob_falls_back_to_defaults(
        self, service: CookieConsentService, repo: MockConsentRepo
    ) -> None:
        repo.save(
            StoreModuleSettings(
                store_id=7,
                module_slug=service.module_slug,
                is_enabled=True,
                settings={"position": "sideways"},
                updated_at=NOW,
            )
        )

        result = run_get(GetConsentSettingsInput(store_id=7), service)

        assert result.view is not None
        assert result.view.settings == get_default_settings()
        assert result.view.is_enabled is True


# --- Update Tests ---


class TestUpdateSettings:
    """Test replacing settings."""

    def test_write_then_read_returns_same_document(self, service: CookieConsentService) -> None:
        payload = scenario_payload()

        updated = run_update(
            UpdateConsentSettingsInput(store_id=42, settings=payload), service
        )
        assert updated.success is True
        assert updated.view is not None

        read = run_get(GetConsentSettingsInput(store_id=42), service)
        assert read.view is not None
        assert read.view.settings == updated.view.settings
        assert read.view.settings.enabled is True
        assert read.view.settings.position == "top"
        assert read.view.settings.layout == "box"
        assert read.view.settings.theme == "dark"
        assert read.view.settings.cookie_expiry_days == 180
        assert read.view.settings.scripts.analytics == "ga.js"
        assert read.view.settings.scripts.marketing == ""
        assert read.view.settings.sort_order == 2
        assert read.view.is_enabled is True
        assert read.view.updated_at == NOW
        assert read.view.store_name == "Flagship"
        assert updated.view.store_name == "Flagship"

    def test_toggle_overrides_document_flag(self, service: CookieConsentService) -> None:
        result = run_update(
            UpdateConsentSettingsInput(store_id=42, settings=scenario_payload(), is_enabled="0"),
            service,
        )

        assert result.view is not None
        assert result.view.is_enabled is False
        assert result.view.settings.enabled is True

    def test_invalid_position_is_not_persisted(
        self, service: CookieConsentService, repo: MockConsentRepo
    ) -> None:
        payload = scenario_payload()
        payload["position"] = "left"

        result = run_update(UpdateConsentSettingsInput(store_id=42, settings=payload), service)

        assert result.success is False
        assert result.view is None
        assert [e.field for e in result.errors] == ["position"]
        assert repo.save_calls == 0

    def test_unknown_store_is_reported_on_store_id(
        self, service: CookieConsentService, repo: MockConsentRepo
    ) -> None:
        result = run_update(
            UpdateConsentSettingsInput(store_id=999, settings=scenario_payload()), service
        )

        assert result.success is False
        assert result.errors[0].field == "store_id"
        assert result.errors[0].code == "not_found"
        assert repo.save_calls == 0

    def test_store_and_field_errors_reported_together(self, service: CookieConsentService) -> None:
        payload = scenario_payload()
        payload["theme"] = "neon"

        result = run_update(UpdateConsentSettingsInput(store_id=None, settings=payload), service)

        fields = {e.field for e in result.errors}
        assert fields == {"store_id", "theme"}

    @pytest.mark.parametrize("store_id", ["²", "9" * 5000, "abc"])
    def test_unparseable_store_id(self, service: CookieConsentService, store_id: str) -> None:
        result = run_update(
            UpdateConsentSettingsInput(store_id=store_id, settings=scenario_payload()), service
        )

        assert result.success is False
        assert result.errors[0].field == "store_id"
        assert result.errors[0].code == "invalid_type"

    def test_invalid_toggle(self, service: CookieConsentService) -> None:
        result = run_update(
            UpdateConsentSettingsInput(
                store_id=42, settings=scenario_payload(), is_enabled="maybe"
            ),
            service,
        )

        assert result.success is False
        assert result.errors[0].field == "is_enabled"

    def test_persistence_failure_keeps_previous_document(
        self, service: CookieConsentService, repo: MockConsentRepo
    ) -> None:
        run_update(UpdateConsentSettingsInput(store_id=42, settings=scenario_payload()), service)

        repo.fail_saves = True
        changed = scenario_payload()
        changed["theme"] = "light"
        result = run_update(UpdateConsentSettingsInput(store_id=42, settings=changed), service)

        assert result.success is False
        assert result.errors[0].code == "persistence_failed"

        repo.fail_saves = False
        read = run_get(GetConsentSettingsInput(store_id=42), service)
        assert read.view is not None
        assert read.view.settings.theme == "dark"

    def test_write_replaces_whole_document(self, service: CookieConsentService) -> None:
        first = scenario_payload()
        first["scripts"] = {"analytics": "ga.js", "marketing": "pixel.js"}
        run_update(UpdateConsentSettingsInput(store_id=42, settings=first), service)

        second = scenario_payload()
        second.pop("scripts")
        run_update(UpdateConsentSettingsInput(store_id=42, settings=second), service)

        read = run_get(GetConsentSettingsInput(store_id=42), service)
        assert read.view is not None
        assert read.view.settings.scripts.analytics == ""
        assert read.view.settings.scripts.marketing == ""


# --- Reset / List Tests ---


class TestResetAndList:
    def test_reset_restores_defaults_and_keeps_toggle(
        self, service: CookieConsentService
    ) -> None:
        run_update(UpdateConsentSettingsInput(store_id=42, settings=scenario_payload()), service)

        result = run_reset(ResetConsentSettingsInput(store_id=42), service)

        assert result.success is True
        assert result.view is not None
        assert result.view.settings == get_default_settings()
        assert result.view.is_enabled is True
        assert result.view.store_name == "Flagship"

    def test_reset_unknown_store(self, service: CookieConsentService) -> None:
        result = run_reset(ResetConsentSettingsInput(store_id=5), service)

        assert result.success is False
        assert result.errors[0].code == "not_found"

    def test_list_stores(self, service: CookieConsentService) -> None:
        run_update(UpdateConsentSettingsInput(store_id=42, settings=scenario_payload()), service)

        result = run_list(ListStoresInput(), service)

        assert result.total == 2
        by_id = {s.store_id: s for s in result.stores}
        assert by_id[7].has_custom_settings is False
        assert by_id[7].is_enabled is False
        assert by_id[42].has_custom_settings is True
        assert by_id[42].is_enabled is True
        assert by_id[42].store_name == "Flagship"


class TestDispatch:
    def test_run_dispatches_by_input_type(self, service: CookieConsentService) -> None:
        result = run(GetConsentSettingsInput(store_id=7), service)
        assert result.success is True

    def test_run_rejects_unknown_input(self, service: CookieConsentService) -> None:
        with pytest.raises(ValueError):
            run("not an input", service)  # type: ignore[arg-type]
