import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from tipjar.core.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {"connect_timeout": 30}


# Create the SQLAlchemy engine
engine = create_engine(settings.DATABASE_URL,
                       connect_args=_connect_args(settings.DATABASE_URL),
                       pool_pre_ping=True,
                       pool_recycle=3600,
)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency that can be used in routes to get the session
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        # exception handlers in errors.py turn this into the JSON error shape
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create missing tables from the ORM metadata."""
    # models must be imported so they register on Base.metadata
    from tipjar.models import comment, content, like  # noqa: F401
    from tipjar.db.base import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
