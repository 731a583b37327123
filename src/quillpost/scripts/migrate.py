# src/quillpost/scripts/migrate.py
"""Apply Alembic migrations against the configured database."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from quillpost.core.logging import configure_logging
from quillpost.core.settings import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def build_config(database_url: str | None = None) -> Config:
    """Return an Alembic config pointed at the project's migrations folder."""
    cfg = Config(str(MIGRATIONS_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url_sync)
    return cfg


def run_upgrade(revision: str = "head") -> None:
    logger.info("Upgrading database to %s", revision)
    command.upgrade(build_config(), revision)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Apply Quillpost database migrations")
    parser.add_argument("revision", nargs="?", default="head")
    args = parser.parse_args(argv)
    configure_logging()
    run_upgrade(args.revision)


if __name__ == "__main__":
    main()
