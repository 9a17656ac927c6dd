"""
Cookie consent component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from src.domain.entities import CookieConsentSettings

RuleKind = Literal["string", "boolean", "integer", "object"]


@dataclass(frozen=True)
class SelectOption:
    """One entry of an admin form select."""

    value: str
    label: str


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class ValidationRule:
    """
    Constraint on one dotted field path of the settings payload.

    `blank_value` is stored when a nullable field is submitted empty.
    `equals` pins a field to a single accepted value.
    """

    path: str
    kind: RuleKind
    required: bool = False
    nullable: bool = False
    max_length: int | None = None
    min_value: int | None = None
    max_value: int | None = None
    allowed_values: tuple[str, ...] | None = None
    equals: Any = None
    blank_value: Any = None


@dataclass(frozen=True)
class ConsentSettingsView:
    """Settings of one store as seen by the admin UI."""

    store_id: int
    settings: CookieConsentSettings
    is_enabled: bool
    is_default: bool
    updated_at: datetime | None = None
    store_name: str | None = None


@dataclass(frozen=True)
class StoreConsentSummary:
    """Overview row for one store."""

    store_id: int
    store_name: str
    is_enabled: bool
    has_custom_settings: bool


# --- Inputs ---


@dataclass(frozen=True)
class GetConsentSettingsInput:
    """Input for reading one store's settings."""

    store_id: int


@dataclass(frozen=True)
class UpdateConsentSettingsInput:
    """
    Input for replacing one store's settings.

    Values are raw request data; the service validates and coerces them.
    """

    store_id: Any
    settings: Any
    is_enabled: Any = None


@dataclass(frozen=True)
class ResetConsentSettingsInput:
    """Input for restoring one store's settings to defaults."""

    store_id: int


@dataclass(frozen=True)
class ListStoresInput:
    """Input for the multi-store overview."""

    pass


# --- Outputs ---


@dataclass(frozen=True)
class GetConsentSettingsOutput:
    """Output from reading settings."""

    view: ConsentSettingsView | None
    options: dict[str, list[SelectOption]] = field(default_factory=dict)
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class UpdateConsentSettingsOutput:
    """Output from updating settings."""

    view: ConsentSettingsView | None
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ResetConsentSettingsOutput:
    """Output from resetting settings."""

    view: ConsentSettingsView | None
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ListStoresOutput:
    """Output from the multi-store overview."""

    stores: list[StoreConsentSummary]
    total: int


# --- Error Types ---


class ConsentSettingsError(Exception):
    """Base cookie consent settings error."""

    pass


class InvalidSettingsError(ConsentSettingsError):
    """One or more fields failed validation."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        fields = ", ".join(e.field for e in errors)
        super().__init__(f"Invalid cookie consent settings: {fields}")


class StoreNotFoundError(ConsentSettingsError):
    """Referenced store does not exist."""

    def __init__(self, store_id: Any) -> None:
        self.store_id = store_id
        super().__init__(f"Store not found: {store_id}")

    def as_validation_error(self) -> ValidationError:
        return ValidationError(
            field="store_id",
            code="not_found",
            message=f"Store '{self.store_id}' does not exist",
        )


class PersistenceError(ConsentSettingsError):
    """Settings store failed to write."""

    def __init__(self, store_id: int, reason: str) -> None:
        self.store_id = store_id
        self.reason = reason
        super().__init__(f"Failed to persist settings for store {store_id}: {reason}")
