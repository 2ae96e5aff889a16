import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class ChatSession(SQLModel, table=True):
    """A playground chat session with rolled-up cost and token totals."""

    __tablename__ = "chat_sessions"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    title: str
    model: str = Field(index=True)
    total_cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0
    message_count: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChatMessage(SQLModel, table=True):
    """A single message with its token usage and cost."""

    __tablename__ = "chat_messages"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(foreign_key="chat_sessions.id", index=True)
    role: str  # "user", "assistant", "system"
    content: str
    reasoning: str | None = None
    cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
