from .database import create_db_engine
from .model_repository import ModelRepository
from .session_repository import SessionNotFoundError, SessionRepository

__all__ = ["ModelRepository", "SessionNotFoundError", "SessionRepository", "create_db_engine"]
