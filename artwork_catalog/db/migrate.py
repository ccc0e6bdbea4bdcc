"""
Schema migrations for the artwork overlay.

Revisions live in ``artwork_catalog/db/migrations/versions`` and are applied
in order with Alembic. Each revision inspects the schema before changing it,
so databases created before migrations were tracked upgrade cleanly.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(database_url: str = "") -> Config:
    """Build an Alembic config pointing at the packaged migrations."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    if database_url:
        # ConfigParser interpolation treats % specially (URL-encoded passwords)
        config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    config.attributes["configure_logger"] = False
    return config


def upgrade_database(engine: Engine, revision: str = "head") -> None:
    """Apply pending migrations on ``engine`` up to ``revision``."""
    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, revision)
    logger.info(f"Database schema upgraded to {revision}")
