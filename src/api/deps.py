import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteConsentSettingsRepo, SQLiteStoreDirectory
from src.api.auth_utils import decode_access_token
from src.components.cookie_consent import CookieConsentService
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CONSENT_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "consent.db")
        self.rules_path = Path(
            os.environ.get("CONSENT_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.log_level = os.environ.get("CONSENT_LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(rules_path: str) -> Rules:
    return load_rules(Path(rules_path))


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(str(settings.rules_path))


# --- Repos ---
def get_consent_settings_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteConsentSettingsRepo:
    return SQLiteConsentSettingsRepo(settings.db_path)


def get_store_directory(settings: Settings = Depends(get_settings)) -> SQLiteStoreDirectory:
    return SQLiteStoreDirectory(settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Component Services ---
def get_cookie_consent_service(
    repo: SQLiteConsentSettingsRepo = Depends(get_consent_settings_repo),
    stores: SQLiteStoreDirectory = Depends(get_store_directory),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> CookieConsentService:
    """Get cookie consent component service."""
    return CookieConsentService(
        repo=repo,
        stores=stores,
        time_port=clock,
        module_slug=rules.module.slug,
    )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class AdminSession:
    """Identity of the authenticated caller, taken from the access token."""

    user_id: str
    roles: list[str] = field(default_factory=list)


async def get_current_admin(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    rules: Rules = Depends(get_rules),
) -> AdminSession:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ")[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 2. Decode
    payload = decode_access_token(token, algorithm=rules.auth.token_algorithm)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    # 3. Role check
    raw_roles = payload.get("roles") or []
    roles = [str(role).lower() for role in raw_roles] if isinstance(raw_roles, list) else []
    if not set(roles) & {role.lower() for role in rules.auth.admin_roles}:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )

    return AdminSession(user_id=user_id, roles=roles)
