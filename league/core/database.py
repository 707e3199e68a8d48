"""
Database engine and session factory.
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from league.core.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across the threadpool FastAPI runs sync endpoints in
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables. Models must be imported before this runs."""
    import league.models  # noqa: F401  registers every model on Base

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info("Database schema ready", extra={"url": str(target.url)})
