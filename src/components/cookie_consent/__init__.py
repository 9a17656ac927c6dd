"""
Cookie consent component - Store-scoped consent banner settings.
"""

from ._impl import (
    DEFAULT_RULES,
    CookieConsentService,
    coerce_bool,
    coerce_int,
    merge_with_defaults,
    validate_settings_payload,
)
from .component import (
    run,
    run_get,
    run_list,
    run_reset,
    run_update,
)
from .defaults import (
    DEFAULT_SETTINGS,
    LAYOUT_OPTIONS,
    MODULE_SLUG,
    POSITION_OPTIONS,
    THEME_OPTIONS,
    get_default_settings,
    get_option_lists,
)
from .models import (
    ConsentSettingsError,
    ConsentSettingsView,
    GetConsentSettingsInput,
    GetConsentSettingsOutput,
    InvalidSettingsError,
    ListStoresInput,
    ListStoresOutput,
    PersistenceError,
    ResetConsentSettingsInput,
    ResetConsentSettingsOutput,
    SelectOption,
    StoreConsentSummary,
    StoreNotFoundError,
    UpdateConsentSettingsInput,
    UpdateConsentSettingsOutput,
    ValidationError,
    ValidationRule,
)
from .ports import ConsentSettingsRepoPort, StoreDirectoryPort, TimePort

__all__ = [
    # Component entry points
    "run",
    "run_get",
    "run_update",
    "run_reset",
    "run_list",
    # Service
    "CookieConsentService",
    # Validation
    "DEFAULT_RULES",
    "validate_settings_payload",
    "merge_with_defaults",
    "coerce_bool",
    "coerce_int",
    # Defaults
    "DEFAULT_SETTINGS",
    "MODULE_SLUG",
    "POSITION_OPTIONS",
    "LAYOUT_OPTIONS",
    "THEME_OPTIONS",
    "get_default_settings",
    "get_option_lists",
    # Models
    "ConsentSettingsView",
    "StoreConsentSummary",
    "SelectOption",
    "GetConsentSettingsInput",
    "GetConsentSettingsOutput",
    "UpdateConsentSettingsInput",
    "UpdateConsentSettingsOutput",
    "ResetConsentSettingsInput",
    "ResetConsentSettingsOutput",
    "ListStoresInput",
    "ListStoresOutput",
    "ValidationError",
    "ValidationRule",
    # Errors
    "ConsentSettingsError",
    "InvalidSettingsError",
    "StoreNotFoundError",
    "PersistenceError",
    # Ports
    "ConsentSettingsRepoPort",
    "StoreDirectoryPort",
    "TimePort",
]
