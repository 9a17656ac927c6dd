"""
Admin Cookie Consent API.

Provides GET/PUT endpoints for the per-store cookie consent banner settings,
plus a reset action and a multi-store overview.

- GET returns stored settings merged over the defaults, with select options
- PUT validates the whole document, returns 400 with field errors on failure
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.deps import AdminSession, get_cookie_consent_service, get_current_admin
from src.components.cookie_consent import (
    ConsentSettingsView,
    CookieConsentService,
    GetConsentSettingsInput,
    ListStoresInput,
    ResetConsentSettingsInput,
    SelectOption,
    UpdateConsentSettingsInput,
    ValidationError,
    run_get,
    run_list,
    run_reset,
    run_update,
)
from src.domain.entities import CookieConsentSettings

router = APIRouter()


# --- Request/Response Models ---


class SelectOptionResponse(BaseModel):
    value: str
    label: str


class ConsentSettingsResponse(BaseModel):
    """Settings of one store."""

    store_id: int
    store_name: str | None
    is_enabled: bool
    is_default: bool
    updated_at: str | None
    settings: CookieConsentSettings
    options: dict[str, list[SelectOptionResponse]]


class ConsentSettingsUpdateRequest(BaseModel):
    """
    Settings update request.

    Fields are left untyped so the component validator can report every
    problem field by field, the same way for JSON and form-style values.
    """

    store_id: Any = None
    is_enabled: Any = None
    settings: Any = None


class ConsentSettingsResetRequest(BaseModel):
    store_id: int


class StoreSummaryResponse(BaseModel):
    store_id: int
    store_name: str
    is_enabled: bool
    has_custom_settings: bool


class StoreListResponse(BaseModel):
    stores: list[StoreSummaryResponse]
    total: int


class ValidationErrorResponse(BaseModel):
    """Validation error response."""

    field: str
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response with validation errors."""

    detail: str
    errors: list[ValidationErrorResponse]


# --- Helper Functions ---


def options_to_response(
    options: dict[str, list[SelectOption]],
) -> dict[str, list[SelectOptionResponse]]:
    return {
        name: [SelectOptionResponse(value=o.value, label=o.label) for o in values]
        for name, values in options.items()
    }


def view_to_response(
    view: ConsentSettingsView,
    options: dict[str, list[SelectOption]],
) -> ConsentSettingsResponse:
    """Convert a settings view to the response model."""
    return ConsentSettingsResponse(
        store_id=view.store_id,
        store_name=view.store_name,
        is_enabled=view.is_enabled,
        is_default=view.is_default,
        updated_at=view.updated_at.isoformat() if view.updated_at else None,
        settings=view.settings,
        options=options_to_response(options),
    )


def validation_errors_response(errors: list[ValidationError]) -> JSONResponse:
    body = ErrorResponse(
        detail="Validation failed",
        errors=[
            ValidationErrorResponse(field=e.field, code=e.code, message=e.message)
            for e in errors
        ],
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


def _is_persistence_failure(errors: list[ValidationError]) -> bool:
    return any(e.code == "persistence_failed" for e in errors)


# --- Endpoints ---


@router.get(
    "/settings",
    response_model=ConsentSettingsResponse,
    summary="Get cookie consent settings for a store",
    description="Returns stored settings merged over the defaults, plus select options.",
)
def get_consent_settings(
    store_id: int = Query(..., description="Store identifier"),
    admin: AdminSession = Depends(get_current_admin),
    service: CookieConsentService = Depends(get_cookie_consent_service),
) -> ConsentSettingsResponse:
    result = run_get(GetConsentSettingsInput(store_id=store_id), service)
    if not result.success or result.view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
    return view_to_response(result.view, result.options)


@router.put(
    "/settings",
    response_model=ConsentSettingsResponse,
    summary="Replace cookie consent settings for a store",
    responses={
        400: {
            "model": ErrorResponse,
            "description": "Validation errors with actionable messages",
        },
    },
)
def update_consent_settings(
    request: ConsentSettingsUpdateRequest,
    admin: AdminSession = Depends(get_current_admin),
    service: CookieConsentService = Depends(get_cookie_consent_service),
) -> Any:
    """
    Replace the settings document of a store.

    The whole document is validated first; nothing is saved if any field
    fails.
    """
    result = run_update(
        UpdateConsentSettingsInput(
            store_id=request.store_id,
            settings=request.settings,
            is_enabled=request.is_enabled,
        ),
        service,
    )

    if not result.success or result.view is None:
        if _is_persistence_failure(result.errors):
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save settings",
            )
        return validation_errors_response(result.errors)

    return view_to_response(result.view, service.options())


@router.post(
    "/settings/reset",
    response_model=ConsentSettingsResponse,
    summary="Restore default cookie consent settings for a store",
)
def reset_consent_settings(
    request: ConsentSettingsResetRequest,
    admin: AdminSession = Depends(get_current_admin),
    service: CookieConsentService = Depends(get_cookie_consent_service),
) -> ConsentSettingsResponse:
    result = run_reset(ResetConsentSettingsInput(store_id=request.store_id), service)
    if not result.success or result.view is None:
        if _is_persistence_failure(result.errors):
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save settings",
            )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
    return view_to_response(result.view, service.options())


@router.get(
    "/stores",
    response_model=StoreListResponse,
    summary="List stores with their cookie consent status",
)
def list_consent_stores(
    admin: AdminSession = Depends(get_current_admin),
    service: CookieConsentService = Depends(get_cookie_consent_service),
) -> StoreListResponse:
    result = run_list(ListStoresInput(), service)
    return StoreListResponse(
        stores=[
            StoreSummaryResponse(
                store_id=s.store_id,
                store_name=s.store_name,
                is_enabled=s.is_enabled,
                has_custom_settings=s.has_custom_settings,
            )
            for s in result.stores
        ],
        total=result.total,
    )
