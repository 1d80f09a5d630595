from __future__ import annotations

import os

import structlog
from alembic import command
from alembic.config import Config

ALEMBIC_CONFIG = os.getenv("ALEMBIC_CONFIG", "alembic.ini")

logger = structlog.get_logger(__name__)


def run_upgrade_head(config_path: str = ALEMBIC_CONFIG) -> None:
    """Brings the schema at ``DATABASE_URL`` up to the latest revision."""
    config = Config(config_path)
    config.attributes["configure_logger"] = False
    logger.info("schema_upgrade_started", config=config_path)
    command.upgrade(config, "head")
    logger.info("schema_upgrade_finished", config=config_path)


if __name__ == "__main__":
    from pestops.infra.logging import setup_logging

    setup_logging()
    run_upgrade_head()
