"""Create the trade tables on the configured database."""

import logging

from app.database import Base, engine
from app import models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db() -> None:
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
