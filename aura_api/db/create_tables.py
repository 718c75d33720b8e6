"""Create the service tables on DATABASE_URL: ``python -m aura_api.db.create_tables``."""
from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from . import models
from .session import get_engine

logger = logging.getLogger(__name__)


def create_all(engine: Optional[Engine] = None) -> list[str]:
    """Create whichever of the profile, code, token, message and lesson tables are missing."""
    engine = engine or get_engine()
    models.Base.metadata.create_all(bind=engine)
    return sorted(models.Base.metadata.tables)


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    try:
        tables = create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    logger.info("Tables ready: %s", ", ".join(tables))
