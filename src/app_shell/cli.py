import argparse
import json
import logging
import os
import sys
from datetime import timedelta
from pathlib import Path

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteConsentSettingsRepo, SQLiteStoreDirectory
from src.api.auth_utils import create_access_token
from src.components.cookie_consent import (
    ConsentSettingsView,
    CookieConsentService,
    GetConsentSettingsInput,
    ListStoresInput,
    ResetConsentSettingsInput,
    run_get,
    run_list,
    run_reset,
)
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DATA_DIR = Path(os.environ.get("CONSENT_DATA_DIR", "./data"))
DB_PATH = str(DATA_DIR / "consent.db")
RULES_PATH = os.environ.get("CONSENT_RULES_PATH", "rules.yaml")


def get_rules() -> Rules:
    if not Path(RULES_PATH).exists():
        logger.error("Rules file %s not found.", RULES_PATH)
        sys.exit(1)
    return load_rules(Path(RULES_PATH))


def get_service(rules: Rules) -> CookieConsentService:
    return CookieConsentService(
        repo=SQLiteConsentSettingsRepo(DB_PATH),
        stores=SQLiteStoreDirectory(DB_PATH),
        time_port=SystemClock(),
        module_slug=rules.module.slug,
    )


def _print_view(view: ConsentSettingsView) -> None:
    print(
        json.dumps(
            {
                "store_id": view.store_id,
                "store_name": view.store_name,
                "is_enabled": view.is_enabled,
                "is_default": view.is_default,
                "updated_at": view.updated_at.isoformat() if view.updated_at else None,
                "settings": view.settings.model_dump(mode="json"),
            },
            indent=2,
        )
    )


def handle_migrate(rules: Rules, args: argparse.Namespace) -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(DB_PATH, rules.ops.migrations_dir)
    if args.dry_run:
        pending = migrator.pending_migrations()
        for filename in pending:
            print(f"pending  {filename}")
        print(f"{len(pending)} pending migrations.")
        return
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migrations.")


def handle_add_store(rules: Rules, args: argparse.Namespace) -> None:
    store = SQLiteStoreDirectory(DB_PATH).add(args.name)
    print(f"Store {store.id} created: {store.name}")


def handle_stores(rules: Rules, args: argparse.Namespace) -> None:
    result = run_list(ListStoresInput(), get_service(rules))
    for s in result.stores:
        state = "enabled" if s.is_enabled else "disabled"
        custom = "custom" if s.has_custom_settings else "defaults"
        print(f"{s.store_id:>5}  {s.store_name:<30} {state:<9} {custom}")
    print(f"{result.total} stores.")


def handle_show(rules: Rules, args: argparse.Namespace) -> None:
    result = run_get(GetConsentSettingsInput(store_id=args.store_id), get_service(rules))
    if not result.success or result.view is None:
        logger.error("Store %s not found.", args.store_id)
        sys.exit(1)
    _print_view(result.view)


def handle_reset(rules: Rules, args: argparse.Namespace) -> None:
    result = run_reset(ResetConsentSettingsInput(store_id=args.store_id), get_service(rules))
    if not result.success or result.view is None:
        for error in result.errors:
            logger.error("%s: %s", error.field, error.message)
        sys.exit(1)
    print(f"Store {args.store_id} reset to default cookie consent settings.")


def handle_issue_token(rules: Rules, args: argparse.Namespace) -> None:
    token = create_access_token(
        {"sub": args.user_id, "roles": args.role},
        expires_delta=timedelta(minutes=rules.auth.token_ttl_minutes),
        algorithm=rules.auth.token_algorithm,
    )
    print(token)


def main() -> None:
    parser = argparse.ArgumentParser(description="Cookie consent settings CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying them"
    )

    add_store_parser = subparsers.add_parser("add-store", help="Register a store")
    add_store_parser.add_argument("name", help="Store display name")

    subparsers.add_parser("stores", help="List stores and their consent banner status")

    show_parser = subparsers.add_parser("show", help="Print the settings of a store as JSON")
    show_parser.add_argument("store_id", type=int)

    reset_parser = subparsers.add_parser("reset", help="Restore default settings for a store")
    reset_parser.add_argument("store_id", type=int)

    token_parser = subparsers.add_parser("issue-token", help="Issue an admin access token")
    token_parser.add_argument("user_id", help="Subject of the token")
    token_parser.add_argument(
        "--role", action="append", default=None, help="Role claim (repeatable, default: admin)"
    )

    args = parser.parse_args()
    if args.command == "issue-token" and not args.role:
        args.role = ["admin"]

    rules = get_rules()

    handlers = {
        "migrate": handle_migrate,
        "add-store": handle_add_store,
        "stores": handle_stores,
        "show": handle_show,
        "reset": handle_reset,
        "issue-token": handle_issue_token,
    }
    handlers[args.command](rules, args)


if __name__ == "__main__":
    main()
