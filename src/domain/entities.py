from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Enums / Literals ---
BannerPosition = Literal["bottom", "top", "center"]
BannerLayout = Literal["bar", "box", "popup"]
BannerTheme = Literal["light", "dark", "auto"]
CategoryKey = Literal["necessary", "functional", "analytics", "marketing"]
ScriptCategoryKey = Literal["analytics", "marketing", "functional"]

# --- Stores ---

class Store(BaseModel):
    id: int
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

# --- Cookie Consent Settings ---

class ConsentTexts(BaseModel):
    banner_title: str = Field(max_length=255)
    banner_description: str = Field(max_length=1000)
    accept_all: str = Field(max_length=50)
    reject_all: str = Field(max_length=50)
    customize: str = Field(max_length=50)
    save_preferences: str = Field(max_length=50)
    close: str = Field(max_length=50)

class ConsentCategory(BaseModel):
    enabled: bool = False
    readonly: bool = False
    title: str = Field(max_length=100)
    description: str = Field(max_length=500)

class ConsentCategories(BaseModel):
    necessary: ConsentCategory
    functional: ConsentCategory
    analytics: ConsentCategory
    marketing: ConsentCategory

class ConsentScripts(BaseModel):
    analytics: str = Field(default="", max_length=10000)
    marketing: str = Field(default="", max_length=10000)
    functional: str = Field(default="", max_length=10000)

class CookieConsentSettings(BaseModel):
    """The persisted settings document for one store."""

    enabled: bool = False
    position: BannerPosition = "bottom"
    layout: BannerLayout = "bar"
    theme: BannerTheme = "light"

    primary_color: str = Field(max_length=20)
    secondary_color: str = Field(max_length=20)
    background_color: str = Field(max_length=20)
    text_color: str = Field(max_length=20)

    cookie_expiry_days: int = Field(ge=1, le=730)
    show_reject_all: bool = True
    show_customize: bool = True
    block_scripts_until_consent: bool = True

    privacy_policy_url: str | None = Field(default=None, max_length=255)
    cookie_policy_url: str | None = Field(default=None, max_length=255)

    texts: ConsentTexts
    categories: ConsentCategories
    scripts: ConsentScripts = Field(default_factory=ConsentScripts)

    sort_order: int = Field(default=0, ge=0)

class StoreModuleSettings(BaseModel):
    """
    Settings record for one (store, module) pair.

    `settings` is the persisted JSON blob. It may predate fields added to
    CookieConsentSettings, so readers merge it over the defaults.
    """

    store_id: int
    module_slug: str
    is_enabled: bool = False
    settings: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
