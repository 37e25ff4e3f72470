import os
import uuid
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from errors import InternalError, InvalidIdentifier

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None


def init_engine(database_url: str, **overrides):
    """Create the engine (connection pool) and the session factory.

    Called once from the application lifespan; tests call it with their own URL.
    """
    global engine, SessionLocal

    # Only use connect_args if we are using SQLite
    engine_args = {}
    if database_url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
    else:
        # Production settings for PostgreSQL
        engine_args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
        })
    engine_args.update(overrides)

    engine = create_engine(database_url, **engine_args, echo=False)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine


def dispose_engine():
    """Close every pooled connection. Called on application shutdown."""
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
        logger.info("Database engine disposed.")
    engine = None
    SessionLocal = None


def get_db():
    """FastAPI dependency: yields a database session and closes it after use."""
    if SessionLocal is None:
        raise InternalError("Database not available")
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(database_url: str | None = None):
    """Create the data/ directory for SQLite files, then create all tables."""
    if database_url and database_url.startswith("sqlite:///./"):
        os.makedirs(os.path.dirname(database_url.replace("sqlite:///", "")) or ".", exist_ok=True)

    # Import all models so they register with Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully.")


def new_id() -> str:
    return uuid.uuid4().hex


def parse_id(value: str, label: str = "ID") -> str:
    """Validate an identifier taken from a request before it reaches a query."""
    if not value or value in ("undefined", "null"):
        raise InvalidIdentifier(f"Invalid {label} provided")
    try:
        return uuid.UUID(hex=value).hex
    except (ValueError, TypeError):
        raise InvalidIdentifier(f"Invalid {label}: {value}")
