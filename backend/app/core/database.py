from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    """Extra engine options needed by SQLite"""
    if not url.startswith("sqlite"):
        return {}
    # Sync route handlers and the scheduler run in worker threads, so the
    # connection must be usable from threads other than the one that opened it
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory databases live only as long as their connection
        kwargs["poolclass"] = StaticPool
    return kwargs


# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit (prevents accidental commits)
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()

# Largest value an INTEGER primary key can hold; bigger ids cannot exist
MAX_INTEGER_ID = 2**63 - 1


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes (via finally block).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
