import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_settings
from src.app_shell.config import validate_ops_rules
from src.rules.loader import load_rules

logger = logging.getLogger(__name__)

ADMIN_COOKIE_CONSENT_PREFIX = "/api/admin/modules/marketing/cookie-consent"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        logging.basicConfig(
            level=(settings.log_level or rules.ops.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        validate_ops_rules(rules, settings.base_dir, settings.data_dir)
        applied = SQLiteMigrator(
            settings.db_path, str(settings.base_dir / rules.ops.migrations_dir)
        ).run_migrations()
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        raise

    logger.info(
        "Rules loaded from %s, database %s (%d migrations applied)",
        settings.rules_path,
        settings.db_path,
        len(applied),
    )

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Cookie Consent Settings API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import admin_cookie_consent  # noqa: E402

app.include_router(
    admin_cookie_consent.router,
    prefix=ADMIN_COOKIE_CONSENT_PREFIX,
    tags=["Admin Cookie Consent"],
)


# CORS (Allow Admin Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
