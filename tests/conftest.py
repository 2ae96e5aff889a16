"""Shared fixtures."""

from collections.abc import Iterator

import pytest
from sqlalchemy import Engine

from playground_pricing.services.storage import create_db_engine


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine with the schema created."""
    db_engine = create_db_engine("sqlite://")
    yield db_engine
    db_engine.dispose()
