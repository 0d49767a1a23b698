"""
Apply (or roll back) Alembic migrations for the contacts database

    python run_migrations.py            # upgrade to head
    python run_migrations.py downgrade  # one step back
"""
import argparse
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from contactbook.core.config import get_settings
from contactbook.core.logging_config import LoggingConfig

BACKEND_DIR = Path(__file__).resolve().parent

logger = LoggingConfig.get_logger("contactbook.migrations")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run ContactBook database migrations")
    parser.add_argument("action", nargs="?", default="upgrade", choices=["upgrade", "downgrade", "current"])
    parser.add_argument("--revision", default=None, help="Target revision (default: head / -1)")
    args = parser.parse_args(argv)

    os.chdir(BACKEND_DIR)
    alembic_cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    settings = get_settings()
    logger.info(
        f"Running '{args.action}' migrations",
        extra={"database_url": make_url(settings.sqlalchemy_url).render_as_string(hide_password=True)},
    )

    if args.action == "upgrade":
        command.upgrade(alembic_cfg, args.revision or "head")
    elif args.action == "downgrade":
        command.downgrade(alembic_cfg, args.revision or "-1")
    else:
        command.current(alembic_cfg, verbose=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
