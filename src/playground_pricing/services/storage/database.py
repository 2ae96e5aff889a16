"""Engine creation and schema setup."""

from __future__ import annotations

import structlog
from sqlalchemy import Engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel, create_engine

from playground_pricing.models import ChatMessage, ChatSession, GroqModel

logger = structlog.get_logger()

TABLES = (GroqModel, ChatSession, ChatMessage)


def create_db_engine(database_url: str) -> Engine:
    """Create an engine and make sure all tables exist.

    Args:
        database_url: SQLAlchemy URL, e.g. ``duckdb:///playground.duckdb`` or
            ``sqlite://`` for an in-memory database.

    Returns:
        Engine with the schema created.
    """
    if database_url.startswith("sqlite"):
        in_memory = database_url in ("sqlite://", "sqlite:///:memory:")
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            # In-memory SQLite lives in one connection shared across worker threads
            poolclass=StaticPool if in_memory else NullPool,
        )
    else:
        # File databases are opened per connection
        engine = create_engine(database_url, poolclass=NullPool)

    SQLModel.metadata.create_all(engine, tables=[table.__table__ for table in TABLES])
    logger.info("database_ready", url=engine.url.render_as_string(hide_password=True))
    return engine
