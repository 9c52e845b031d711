#!/usr/bin/env python3
"""
Apply the leave schema migrations.

    python run_migrations.py            # upgrade to head
    python run_migrations.py 001        # upgrade to a specific revision
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

import logging
from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy.engine import make_url

from smartleave.core.database import database_url
from smartleave.core.logging_config import setup_logging

logger = logging.getLogger("smartleave.migrations")

SERVER_DIR = Path(__file__).parent


def alembic_config() -> Config:
    cfg = Config(str(SERVER_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(SERVER_DIR / "alembic"))
    return cfg


def run_migrations(target: str = "head") -> int:
    cfg = alembic_config()
    head = ScriptDirectory.from_config(cfg).get_current_head()
    url = make_url(database_url)
    logger.info(
        f"Upgrading {url.get_backend_name()} database {url.database!r} to {target} (head is {head})",
        extra={"target": target, "head": head},
    )

    try:
        command.upgrade(cfg, target)
    except Exception:
        logger.error(f"Upgrade to {target} failed; schema left at the last applied revision", exc_info=True)
        return 1

    logger.info(f"Leave schema upgraded to {target}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(run_migrations(sys.argv[1] if len(sys.argv) > 1 else "head"))
