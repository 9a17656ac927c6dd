"""
Cookie consent component - Store-scoped consent banner settings.

Shell Layer - converts service results and errors into output objects.
"""

from __future__ import annotations

from ._impl import CookieConsentService
from .models import (
    GetConsentSettingsInput,
    GetConsentSettingsOutput,
    InvalidSettingsError,
    ListStoresInput,
    ListStoresOutput,
    PersistenceError,
    ResetConsentSettingsInput,
    ResetConsentSettingsOutput,
    StoreNotFoundError,
    UpdateConsentSettingsInput,
    UpdateConsentSettingsOutput,
    ValidationError,
)


def _persistence_error() -> ValidationError:
    return ValidationError(
        field="_persistence",
        code="persistence_failed",
        message="Settings could not be saved. Please try again.",
    )


# --- Component Entry Points ---


def run_get(
    inp: GetConsentSettingsInput,
    service: CookieConsentService,
) -> GetConsentSettingsOutput:
    """
    Get settings for one store plus the select options.

    Uses defaults if the store has no stored settings.
    """
    try:
        view = service.get(inp.store_id)
    except StoreNotFoundError as e:
        return GetConsentSettingsOutput(
            view=None,
            errors=[e.as_validation_error()],
            success=False,
        )
    return GetConsentSettingsOutput(view=view, options=service.options())


def run_update(
    inp: UpdateConsentSettingsInput,
    service: CookieConsentService,
) -> UpdateConsentSettingsOutput:
    """
    Replace settings for one store.

    Nothing is persisted unless the whole document validates.
    """
    try:
        view = service.update(inp.store_id, inp.settings, is_enabled=inp.is_enabled)
    except InvalidSettingsError as e:
        return UpdateConsentSettingsOutput(view=None, errors=list(e.errors), success=False)
    except PersistenceError:
        return UpdateConsentSettingsOutput(
            view=None, errors=[_persistence_error()], success=False
        )
    return UpdateConsentSettingsOutput(view=view)


def run_reset(
    inp: ResetConsentSettingsInput,
    service: CookieConsentService,
) -> ResetConsentSettingsOutput:
    """Restore one store's settings to the defaults."""
    try:
        view = service.reset(inp.store_id)
    except StoreNotFoundError as e:
        return ResetConsentSettingsOutput(
            view=None, errors=[e.as_validation_error()], success=False
        )
    except PersistenceError:
        return ResetConsentSettingsOutput(
            view=None, errors=[_persistence_error()], success=False
        )
    return ResetConsentSettingsOutput(view=view)


def run_list(
    inp: ListStoresInput,
    service: CookieConsentService,
) -> ListStoresOutput:
    """Overview of every store and whether it has its own settings."""
    stores = service.list_stores()
    return ListStoresOutput(stores=stores, total=len(stores))


def run(
    inp: (
        GetConsentSettingsInput
        | UpdateConsentSettingsInput
        | ResetConsentSettingsInput
        | ListStoresInput
    ),
    service: CookieConsentService,
) -> (
    GetConsentSettingsOutput
    | UpdateConsentSettingsOutput
    | ResetConsentSettingsOutput
    | ListStoresOutput
):
    """
    Main entry point for the cookie consent component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GetConsentSettingsInput):
        return run_get(inp, service)
    elif isinstance(inp, UpdateConsentSettingsInput):
        return run_update(inp, service)
    elif isinstance(inp, ResetConsentSettingsInput):
        return run_reset(inp, service)
    elif isinstance(inp, ListStoresInput):
        return run_list(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
