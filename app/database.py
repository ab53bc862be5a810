"""
Database engine, session factory and declarative base
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)


def _build_database_url() -> str:
    """
    Normalize the configured database URL.

    Legacy postgres:// URLs (as handed out by hosted providers) are rewritten
    to the driver-qualified form SQLAlchemy 2.x expects.
    """
    url = settings.DATABASE_URL.strip()

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    return url


DATABASE_URL = _build_database_url()

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Needed for SQLite when used with FastAPI in a single process
    connect_args = {"check_same_thread": False}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=not DATABASE_URL.startswith("sqlite"),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create any missing tables (production schemas are managed externally)"""
    # Import models so they register on Base.metadata
    import app.models  # noqa: F401

    backend = engine.url.get_backend_name()
    logger.info(f"Using database backend={backend} url={engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)
