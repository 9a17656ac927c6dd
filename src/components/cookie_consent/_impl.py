"""
CookieConsentService - Store-scoped cookie consent banner settings.

Functional Core - validation rules, coercion and defaults merging.
The service class orchestrates them against the repository ports.

Key behaviors:
- GET always returns a fully populated document (stored blob merged over defaults)
- PUT validates the whole document before persisting, then replaces it wholesale
- The necessary category can never be disabled or made editable
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.domain.entities import CookieConsentSettings, Store, StoreModuleSettings

from .defaults import (
    MODULE_SLUG,
    get_default_settings,
    get_default_settings_dict,
    get_option_lists,
)
from .models import (
    ConsentSettingsView,
    InvalidSettingsError,
    PersistenceError,
    SelectOption,
    StoreConsentSummary,
    StoreNotFoundError,
    ValidationError,
    ValidationRule,
)
from .ports import ConsentSettingsRepoPort, StoreDirectoryPort, TimePort

logger = logging.getLogger(__name__)

# --- Validation Rules ---

POSITIONS = ("bottom", "top", "center")
LAYOUTS = ("bar", "box", "popup")
THEMES = ("light", "dark", "auto")
CATEGORY_KEYS = ("necessary", "functional", "analytics", "marketing")
SCRIPT_KEYS = ("analytics", "marketing", "functional")
LOCKED_CATEGORY = "necessary"

TEXT_MAX_LENGTHS = {
    "banner_title": 255,
    "banner_description": 1000,
    "accept_all": 50,
    "reject_all": 50,
    "customize": 50,
    "save_preferences": 50,
    "close": 50,
}

COLOR_FIELDS = ("primary_color", "secondary_color", "background_color", "text_color")
FLAG_FIELDS = ("enabled", "show_reject_all", "show_customize", "block_scripts_until_consent")
URL_FIELDS = ("privacy_policy_url", "cookie_policy_url")


def _category_rules(key: str) -> list[ValidationRule]:
    locked = True if key == LOCKED_CATEGORY else None
    prefix = f"categories.{key}"
    return [
        ValidationRule(path=prefix, kind="object", required=True),
        ValidationRule(path=f"{prefix}.enabled", kind="boolean", equals=locked),
        ValidationRule(path=f"{prefix}.readonly", kind="boolean", equals=locked),
        ValidationRule(path=f"{prefix}.title", kind="string", required=True, max_length=100),
        ValidationRule(
            path=f"{prefix}.description", kind="string", required=True, max_length=500
        ),
    ]


DEFAULT_RULES: list[ValidationRule] = [
    *[ValidationRule(path=name, kind="boolean") for name in FLAG_FIELDS],
    ValidationRule(path="position", kind="string", required=True, allowed_values=POSITIONS),
    ValidationRule(path="layout", kind="string", required=True, allowed_values=LAYOUTS),
    ValidationRule(path="theme", kind="string", required=True, allowed_values=THEMES),
    *[
        ValidationRule(path=name, kind="string", required=True, max_length=20)
        for name in COLOR_FIELDS
    ],
    ValidationRule(
        path="cookie_expiry_days", kind="integer", required=True, min_value=1, max_value=730
    ),
    *[
        ValidationRule(path=name, kind="string", nullable=True, max_length=255)
        for name in URL_FIELDS
    ],
    ValidationRule(path="texts", kind="object", required=True),
    *[
        ValidationRule(path=f"texts.{key}", kind="string", required=True, max_length=limit)
        for key, limit in TEXT_MAX_LENGTHS.items()
    ],
    ValidationRule(path="categories", kind="object", required=True),
    *[rule for key in CATEGORY_KEYS for rule in _category_rules(key)],
    ValidationRule(path="scripts", kind="object"),
    *[
        ValidationRule(
            path=f"scripts.{key}", kind="string", nullable=True, max_length=10000, blank_value=""
        )
        for key in SCRIPT_KEYS
    ],
    ValidationRule(path="sort_order", kind="integer", min_value=0),
]


# --- Coercion Helpers ---

_TRUE_STRINGS = {"1", "true", "on"}
_FALSE_STRINGS = {"0", "false", "off"}


def coerce_bool(value: Any) -> bool | None:
    """Coerce a form/JSON value to bool, or None if it is not boolean-like."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def coerce_int(value: Any) -> int | None:
    """Coerce a form/JSON value to int, or None if it is not integer-like."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ("-", "+") else text
        if digits.isdecimal():
            try:
                return int(text)
            except ValueError:
                # Longer than the interpreter's int conversion limit
                return None
    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lookup(payload: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    """Find a dotted path. Returns (present, value)."""
    current: Any = payload
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]
    return True, current


def _assign(target: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def merge_with_defaults(
    stored: Mapping[str, Any], defaults: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """
    Deep-merge a stored blob over the default document.

    Nested objects are merged key by key; any other stored value replaces
    the default. Keys missing from the stored blob keep their default.
    """
    base = dict(defaults) if defaults is not None else get_default_settings_dict()
    for key, value in stored.items():
        default_value = base.get(key)
        if isinstance(default_value, Mapping) and isinstance(value, Mapping):
            base[key] = merge_with_defaults(value, default_value)
        else:
            base[key] = value
    return base


# --- Validation Functions ---


def _check_rule(rule: ValidationRule, value: Any) -> tuple[Any, ValidationError | None]:
    """Validate and coerce a present, non-blank value against one rule."""
    field = rule.path

    if rule.kind == "object":
        if not isinstance(value, Mapping):
            return None, ValidationError(
                field=field, code="invalid_type", message=f"Field '{field}' must be an object"
            )
        return value, None

    if rule.kind == "boolean":
        coerced = coerce_bool(value)
        if coerced is None:
            return None, ValidationError(
                field=field, code="invalid_type", message=f"Field '{field}' must be true or false"
            )
        if rule.equals is not None and coerced != rule.equals:
            return None, ValidationError(
                field=field,
                code="locked",
                message=f"Field '{field}' cannot be changed and must be {str(rule.equals).lower()}",
            )
        return coerced, None

    if rule.kind == "integer":
        coerced_int = coerce_int(value)
        if coerced_int is None:
            return None, ValidationError(
                field=field, code="invalid_type", message=f"Field '{field}' must be an integer"
            )
        if rule.min_value is not None and coerced_int < rule.min_value:
            return None, ValidationError(
                field=field,
                code="min_value",
                message=f"Field '{field}' must be at least {rule.min_value}",
            )
        if rule.max_value is not None and coerced_int > rule.max_value:
            return None, ValidationError(
                field=field,
                code="max_value",
                message=f"Field '{field}' must not be greater than {rule.max_value}",
            )
        return coerced_int, None

    # string
    if not isinstance(value, str):
        return None, ValidationError(
            field=field, code="invalid_type", message=f"Field '{field}' must be a string"
        )
    value = value.strip()
    if rule.max_length is not None and len(value) > rule.max_length:
        return None, ValidationError(
            field=field,
            code="max_length",
            message=f"Field '{field}' must not exceed {rule.max_length} characters",
        )
    if rule.allowed_values is not None and value not in rule.allowed_values:
        return None, ValidationError(
            field=field,
            code="invalid_value",
            message=f"Field '{field}' must be one of: {', '.join(rule.allowed_values)}",
        )
    return value, None


def _parse_pydantic_errors(exc: PydanticValidationError) -> list[ValidationError]:
    """Parse Pydantic ValidationError to extract field-specific errors."""
    errors: list[ValidationError] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc) if loc else "_schema"
        error_type = error.get("type", "unknown")
        code = "invalid_value"
        if "string" in error_type:
            code = "invalid_type"
        elif "missing" in error_type:
            code = "required"

        msg = error.get("msg", "Invalid value")
        errors.append(ValidationError(field=field, code=code, message=f"Field '{field}': {msg}"))
    return errors


def validate_settings_payload(
    payload: Any,
    rules: list[ValidationRule] | None = None,
) -> tuple[CookieConsentSettings | None, list[ValidationError]]:
    """
    Validate a raw settings document and build the typed settings.

    Every rule is evaluated so the caller gets all field errors at once.
    Rules below an object that is missing or malformed are skipped; the
    object's own error already covers them. Absent optional fields take
    their default value. Keys not covered by a rule are dropped.

    Returns:
        Tuple of (settings, errors). Settings is None if validation fails.
    """
    if not isinstance(payload, Mapping):
        return None, [
            ValidationError(
                field="settings", code="invalid_type", message="Settings must be an object"
            )
        ]

    rules = rules or DEFAULT_RULES
    errors: list[ValidationError] = []
    cleaned: dict[str, Any] = {}
    skipped_prefixes: list[str] = []

    for rule in rules:
        if any(rule.path.startswith(prefix) for prefix in skipped_prefixes):
            continue

        present, value = _lookup(payload, rule.path)

        if not present or _is_blank(value):
            if rule.required:
                errors.append(
                    ValidationError(
                        field=rule.path,
                        code="required",
                        message=f"Field '{rule.path}' is required",
                    )
                )
            elif present and rule.nullable:
                _assign(cleaned, rule.path, rule.blank_value)
            if rule.kind == "object":
                skipped_prefixes.append(f"{rule.path}.")
            continue

        coerced, error = _check_rule(rule, value)
        if error is not None:
            errors.append(error)
            if rule.kind == "object":
                skipped_prefixes.append(f"{rule.path}.")
            continue

        if rule.kind != "object":
            _assign(cleaned, rule.path, coerced)

    if errors:
        return None, errors

    try:
        settings = CookieConsentSettings.model_validate(merge_with_defaults(cleaned))
    except PydanticValidationError as e:
        return None, _parse_pydantic_errors(e)

    return settings, []


# --- Cookie Consent Service ---


class CookieConsentService:
    """
    Cookie consent settings service.

    Provides:
    - Get settings for a store with fallback defaults
    - Replace settings for a store after validation
    - Reset a store to the defaults
    - Overview of all stores
    """

    def __init__(
        self,
        repo: ConsentSettingsRepoPort,
        stores: StoreDirectoryPort,
        time_port: TimePort | None = None,
        module_slug: str = MODULE_SLUG,
        rules: list[ValidationRule] | None = None,
    ) -> None:
        self._repo = repo
        self._stores = stores
        self._time = time_port
        self._module_slug = module_slug
        self._rules = rules or DEFAULT_RULES

    @property
    def module_slug(self) -> str:
        return self._module_slug

    def _now(self) -> datetime:
        if self._time is not None:
            return self._time.now_utc()
        return datetime.now(UTC)

    def _require_store(self, store_id: int) -> Store:
        store = self._stores.get(store_id)
        if store is None:
            raise StoreNotFoundError(store_id)
        return store

    def _resolve_settings(self, record: StoreModuleSettings) -> CookieConsentSettings:
        try:
            return CookieConsentSettings.model_validate(merge_with_defaults(record.settings))
        except PydanticValidationError as e:
            logger.warning(
                "Stored cookie consent settings for store %s are invalid, using defaults: %s",
                record.store_id,
                e,
            )
            return get_default_settings()

    def _to_view(self, record: StoreModuleSettings, store: Store) -> ConsentSettingsView:
        return ConsentSettingsView(
            store_id=record.store_id,
            settings=self._resolve_settings(record),
            is_enabled=record.is_enabled,
            is_default=False,
            updated_at=record.updated_at,
            store_name=store.name,
        )

    def options(self) -> dict[str, list[SelectOption]]:
        """Position, layout and theme select options."""
        return get_option_lists()

    def get(self, store_id: int) -> ConsentSettingsView:
        """
        Get settings for a store.

        Always returns a full document - uses defaults if nothing is stored.

        Raises:
            StoreNotFoundError: the store does not exist.
        """
        store = self._require_store(store_id)
        record = self._repo.get(store_id, self._module_slug)
        if record is None:
            defaults = get_default_settings()
            return ConsentSettingsView(
                store_id=store_id,
                settings=defaults,
                is_enabled=defaults.enabled,
                is_default=True,
                store_name=store.name,
            )
        return self._to_view(record, store)

    def update(
        self,
        store_id: Any,
        payload: Any,
        is_enabled: Any = None,
    ) -> ConsentSettingsView:
        """
        Replace the settings of a store.

        `is_enabled` is the module toggle for the store. When omitted it
        follows the document's own `enabled` flag.

        Raises:
            InvalidSettingsError: store reference or document failed validation.
            PersistenceError: the repository failed to write.
        """
        errors: list[ValidationError] = []

        resolved_store_id: int | None = None
        store: Store | None = None
        if _is_blank(store_id):
            errors.append(
                ValidationError(
                    field="store_id", code="required", message="Field 'store_id' is required"
                )
            )
        else:
            resolved_store_id = coerce_int(store_id)
            if resolved_store_id is None:
                errors.append(
                    ValidationError(
                        field="store_id",
                        code="invalid_type",
                        message="Field 'store_id' must be an integer",
                    )
                )
            else:
                store = self._stores.get(resolved_store_id)
                if store is None:
                    errors.append(StoreNotFoundError(resolved_store_id).as_validation_error())

        toggle: bool | None = None
        if not _is_blank(is_enabled):
            toggle = coerce_bool(is_enabled)
            if toggle is None:
                errors.append(
                    ValidationError(
                        field="is_enabled",
                        code="invalid_type",
                        message="Field 'is_enabled' must be true or false",
                    )
                )

        settings, payload_errors = validate_settings_payload(payload, self._rules)
        errors.extend(payload_errors)

        if errors or settings is None or resolved_store_id is None or store is None:
            logger.info(
                "Rejected cookie consent settings for store %s: %s",
                store_id,
                ", ".join(e.field for e in errors),
            )
            raise InvalidSettingsError(errors)

        record = StoreModuleSettings(
            store_id=resolved_store_id,
            module_slug=self._module_slug,
            is_enabled=settings.enabled if toggle is None else toggle,
            settings=settings.model_dump(mode="json"),
            updated_at=self._now(),
        )
        saved = self._save(record)
        logger.info(
            "Cookie consent settings saved for store %s (enabled=%s)",
            saved.store_id,
            saved.is_enabled,
        )
        return ConsentSettingsView(
            store_id=saved.store_id,
            settings=settings,
            is_enabled=saved.is_enabled,
            is_default=False,
            updated_at=saved.updated_at,
            store_name=store.name,
        )

    def reset(self, store_id: int) -> ConsentSettingsView:
        """
        Replace the stored document of a store with the defaults.

        The module toggle of the store is kept as it was.
        """
        store = self._require_store(store_id)
        current = self._repo.get(store_id, self._module_slug)
        defaults = get_default_settings()
        record = StoreModuleSettings(
            store_id=store_id,
            module_slug=self._module_slug,
            is_enabled=current.is_enabled if current is not None else defaults.enabled,
            settings=defaults.model_dump(mode="json"),
            updated_at=self._now(),
        )
        saved = self._save(record)
        logger.info("Cookie consent settings reset to defaults for store %s", store_id)
        return self._to_view(saved, store)

    def list_stores(self) -> list[StoreConsentSummary]:
        """One summary row per store, in directory order."""
        records = {r.store_id: r for r in self._repo.list_for_module(self._module_slug)}
        summaries: list[StoreConsentSummary] = []
        for store in self._stores.list_all():
            record = records.get(store.id)
            summaries.append(
                StoreConsentSummary(
                    store_id=store.id,
                    store_name=store.name,
                    is_enabled=record.is_enabled if record is not None else False,
                    has_custom_settings=record is not None,
                )
            )
        return summaries

    def _save(self, record: StoreModuleSettings) -> StoreModuleSettings:
        try:
            return self._repo.save(record)
        except PersistenceError:
            logger.exception("Failed to save cookie consent settings for store %s", record.store_id)
            raise
