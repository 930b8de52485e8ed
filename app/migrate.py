"""Apply Alembic migrations before starting the API.

    python -m app.migrate && uvicorn --factory app.main:create_app ...

Exits non-zero when the upgrade fails so the process supervisor retries.
"""

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("app.migrate")

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def main() -> None:
    logger.info("Running alembic upgrade head ...")
    try:
        command.upgrade(Config(str(ALEMBIC_INI)), "head")
    except Exception:
        logger.exception("Alembic migration failed")
        sys.exit(1)
    logger.info("Migrations complete")


if __name__ == "__main__":
    main()
