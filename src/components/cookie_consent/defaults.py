"""
Cookie consent component - Default settings document and option lists.

This is the only definition of the default settings document. The service,
the admin API and the CLI all read it from here.
"""

from __future__ import annotations

import copy
from typing import Any

from src.domain.entities import CookieConsentSettings

from .models import SelectOption

MODULE_SLUG = "cookie-consent-marketing"

DEFAULT_SETTINGS: dict[str, Any] = {
    "enabled": False,
    "position": "bottom",
    "layout": "bar",
    "theme": "light",
    # Colors
    "primary_color": "#4F46E5",
    "secondary_color": "#6B7280",
    "background_color": "#FFFFFF",
    "text_color": "#1F2937",
    # Behavior
    "cookie_expiry_days": 365,
    "show_reject_all": True,
    "show_customize": True,
    "block_scripts_until_consent": True,
    # Links
    "privacy_policy_url": "/privacy-policy",
    "cookie_policy_url": "/cookie-policy",
    "texts": {
        "banner_title": "We use cookies",
        "banner_description": (
            "We use cookies to enhance your browsing experience, serve personalized "
            "ads or content, and analyze our traffic. By clicking \"Accept All\", "
            "you consent to our use of cookies."
        ),
        "accept_all": "Accept All",
        "reject_all": "Reject All",
        "customize": "Customize",
        "save_preferences": "Save Preferences",
        "close": "Close",
    },
    "categories": {
        "necessary": {
            "enabled": True,
            "readonly": True,
            "title": "Necessary",
            "description": (
                "These cookies are essential for the website to function properly. "
                "They cannot be disabled."
            ),
        },
        "functional": {
            "enabled": False,
            "readonly": False,
            "title": "Functional",
            "description": "These cookies enable personalized features and functionality.",
        },
        "analytics": {
            "enabled": False,
            "readonly": False,
            "title": "Analytics",
            "description": (
                "These cookies help us understand how visitors interact with the website."
            ),
        },
        "marketing": {
            "enabled": False,
            "readonly": False,
            "title": "Marketing",
            "description": "These cookies are used to deliver personalized advertisements.",
        },
    },
    # Scripts loaded once the matching category is consented to
    "scripts": {
        "analytics": "",
        "marketing": "",
        "functional": "",
    },
    "sort_order": 0,
}


POSITION_OPTIONS: tuple[SelectOption, ...] = (
    SelectOption(value="bottom", label="Bottom"),
    SelectOption(value="top", label="Top"),
    SelectOption(value="center", label="Center (Modal)"),
)

LAYOUT_OPTIONS: tuple[SelectOption, ...] = (
    SelectOption(value="bar", label="Bar"),
    SelectOption(value="box", label="Box"),
    SelectOption(value="popup", label="Popup"),
)

THEME_OPTIONS: tuple[SelectOption, ...] = (
    SelectOption(value="light", label="Light"),
    SelectOption(value="dark", label="Dark"),
    SelectOption(value="auto", label="Auto (System)"),
)


def get_default_settings_dict() -> dict[str, Any]:
    """Return a deep copy of the default document as plain data."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def get_default_settings() -> CookieConsentSettings:
    """
    Get fallback default settings.

    Used when a store has no stored settings yet.
    """
    return CookieConsentSettings.model_validate(get_default_settings_dict())


def get_option_lists() -> dict[str, list[SelectOption]]:
    """Option lists for the admin form selects."""
    return {
        "position": list(POSITION_OPTIONS),
        "layout": list(LAYOUT_OPTIONS),
        "theme": list(THEME_OPTIONS),
    }
