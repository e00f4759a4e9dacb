import logging
import os
from pathlib import Path

from contentlab.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    pass


class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CONTENTLAB_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "contentlab.db")
        self.rules_path = Path(os.environ.get("CONTENTLAB_RULES", self.base_dir / "rules.yaml"))
        self.migrations_dir = Path(
            os.environ.get("CONTENTLAB_MIGRATIONS", self.base_dir / "migrations")
        )


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Raises ConfigError listing every missing environment variable.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated")
