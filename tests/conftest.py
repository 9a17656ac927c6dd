import copy
from pathlib import Path
from typing import Any

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator

PROJECT_ROOT = Path(__file__).parent.parent

SCENARIO_SETTINGS: dict[str, Any] = {
    "enabled": True,
    "position": "top",
    "layout": "box",
    "theme": "dark",
    "primary_color": "#111827",
    "secondary_color": "#9CA3AF",
    "background_color": "#000000",
    "text_color": "#F9FAFB",
    "cookie_expiry_days": 180,
    "show_reject_all": True,
    "show_customize": False,
    "block_scripts_until_consent": True,
    "privacy_policy_url": "/legal/privacy",
    "cookie_policy_url": "/legal/cookies",
    "texts": {
        "banner_title": "Cookies on this shop",
        "banner_description": "We use cookies to run the shop and to measure visits.",
        "accept_all": "Accept",
        "reject_all": "Decline",
        "customize": "Settings",
        "save_preferences": "Save",
        "close": "Dismiss",
    },
    "categories": {
        "necessary": {
            "enabled": True,
            "readonly": True,
            "title": "Essential",
            "description": "Required for checkout and login.",
        },
        "functional": {
            "enabled": True,
            "readonly": False,
            "title": "Preferences",
            "description": "Remember language and currency.",
        },
        "analytics": {
            "enabled": True,
            "readonly": False,
            "title": "Statistics",
            "description": "Anonymous visit statistics.",
        },
        "marketing": {
            "enabled": False,
            "readonly": False,
            "title": "Advertising",
            "description": "Personalised ads on other sites.",
        },
    },
    "scripts": {"analytics": "ga.js", "marketing": "", "functional": ""},
    "sort_order": 2,
}


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def settings_payload() -> dict[str, Any]:
    """A complete, valid settings document (fresh copy per test)."""
    return copy.deepcopy(SCENARIO_SETTINGS)


@pytest.fixture
def migrated_db(tmp_path) -> str:
    """Path to a temporary SQLite database with all migrations applied."""
    db_path = str(tmp_path / "consent.db")
    SQLiteMigrator(db_path, str(PROJECT_ROOT / "migrations")).run_migrations()
    return db_path
