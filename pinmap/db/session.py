# pinmap/db/session.py
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from pinmap.core.config import settings
from pinmap.db.base import Base  # <- use the single Base

logger = logging.getLogger(__name__)

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_models(bind=None):
    # Import ALL model modules so metadata is populated before create_all
    from pinmap.models import pin  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def ping(bind=None) -> None:
    """Round-trip to the store; raises when it is unreachable."""
    with (bind or engine).connect() as conn:
        conn.execute(text("SELECT 1"))
