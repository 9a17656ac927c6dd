import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Operational requirements are not met."""

    pass


def validate_ops_rules(rules: Rules, base_dir: Path, data_dir: Path | None = None) -> None:
    """
    Validate operational requirements before startup.
    """
    ops = rules.ops

    # 1. Data dir must exist (created if missing) and be writable
    if ops.data_dir_required and data_dir is not None:
        data_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(data_dir, os.W_OK):
            raise ConfigurationError(f"Data directory is not writable: {data_dir}")

    # 2. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    # 3. Migrations must be shipped with the app
    migrations_dir = base_dir / ops.migrations_dir
    if not migrations_dir.is_dir():
        raise ConfigurationError(f"Migrations directory not found: {migrations_dir}")

    logger.info("Configuration validated.")
