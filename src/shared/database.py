"""Database setup and configuration."""

import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, ProgrammingError
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for the configured database."""
    if database_url.startswith("sqlite"):
        # Sessions are used from the request threadpool, not the creating thread
        return create_engine(database_url, connect_args={"check_same_thread": False})

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }
    return create_engine(database_url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    # Register models on Base.metadata before create_all
    from src.shared.submissions import database  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logging.info("Database tables initialized successfully")
    except (IntegrityError, ProgrammingError) as e:
        # Concurrent workers can race on CREATE TABLE; the table exists either way
        error_str = str(e)
        if "duplicate key" in error_str.lower() or "already exists" in error_str.lower():
            logging.info("Database tables already exist, skipping creation")
        else:
            raise


def get_db(request: Request):
    """Dependency to get database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
