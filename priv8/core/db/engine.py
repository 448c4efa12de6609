from pathlib import Path
from sqlalchemy import create_engine

from priv8.core.config import get_settings
from priv8.core.logger import get_logger

logger = get_logger(__name__)

database_url = get_settings().db_url

# Ensure the .data directory exists for the default SQLite database
if database_url.startswith("sqlite:///.data/"):
    Path(".data").mkdir(exist_ok=True)

# For SQLite, pool settings are mostly ignored but matter for production DBs
engine = create_engine(
    database_url,
    echo=False,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,
    pool_recycle=3600,
)


def init_db() -> None:
    """Create all database tables"""
    from priv8.core.db.tables.base import Base
    from priv8.core.db.tables.secret import Secret  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database tables created")
