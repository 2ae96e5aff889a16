"""Database persistence for chat sessions and their messages."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlmodel import Session, col, select

from playground_pricing.models import ChatMessage, ChatSession

from .repository import AsyncRepository


class SessionNotFoundError(LookupError):
    """Raised when a session does not exist or belongs to another user."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionRepository(AsyncRepository):
    """Persist sessions and roll message usage up into session totals."""

    async def create_session(self, user_id: str, title: str, model: str) -> ChatSession:
        """Create an empty session."""
        return await self._save(lambda _: ChatSession(user_id=user_id, title=title, model=model))

    async def get_session(self, session_id: str) -> ChatSession | None:
        """Get a session by ID."""

        def _get(session: Session) -> ChatSession | None:
            return session.get(ChatSession, session_id)

        return await self._run_session(_get)

    async def add_message(
        self,
        session_id: str,
        role: str,
        content: str,
        *,
        cost: float = 0.0,
        input_tokens: int = 0,
        output_tokens: int = 0,
        cached_tokens: int = 0,
        reasoning: str | None = None,
        user_id: str | None = None,
    ) -> ChatMessage:
        """Store a message and increment the session's totals.

        Args:
            session_id: Owning session.
            role: "user", "assistant" or "system".
            content: Message text.
            cost: Message cost in USD.
            input_tokens: Prompt tokens.
            output_tokens: Completion tokens.
            cached_tokens: Cached prompt tokens.
            reasoning: Optional reasoning trace.
            user_id: When given, the session must belong to this user.

        Returns:
            The stored message.

        Raises:
            SessionNotFoundError: If the session is missing or owned by someone else.
        """

        def _build(session: Session) -> ChatMessage:
            chat_session = session.get(ChatSession, session_id)
            if chat_session is None or (user_id is not None and chat_session.user_id != user_id):
                raise SessionNotFoundError(session_id)

            message = ChatMessage(
                session_id=session_id,
                role=role,
                content=content,
                reasoning=reasoning or None,
                cost=cost or 0.0,
                input_tokens=input_tokens or 0,
                output_tokens=output_tokens or 0,
                cached_tokens=cached_tokens or 0,
            )
            chat_session.message_count += 1
            chat_session.total_cost += message.cost
            chat_session.input_tokens += message.input_tokens
            chat_session.output_tokens += message.output_tokens
            chat_session.cached_tokens += message.cached_tokens
            chat_session.updated_at = datetime.now(UTC)

            session.add(chat_session)
            return message

        return await self._save(_build)

    async def list_sessions(
        self, user_id: str | None = None, since: datetime | None = None
    ) -> list[ChatSession]:
        """Get sessions, newest first."""

        def _get(session: Session) -> list[ChatSession]:
            statement = select(ChatSession)
            if user_id is not None:
                statement = statement.where(ChatSession.user_id == user_id)
            if since is not None:
                statement = statement.where(col(ChatSession.created_at) >= since)
            statement = statement.order_by(col(ChatSession.created_at).desc())
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def list_messages(
        self, session_id: str | None = None, since: datetime | None = None
    ) -> list[ChatMessage]:
        """Get messages in chronological order."""

        def _get(session: Session) -> list[ChatMessage]:
            statement = select(ChatMessage)
            if session_id is not None:
                statement = statement.where(ChatMessage.session_id == session_id)
            if since is not None:
                statement = statement.where(col(ChatMessage.created_at) >= since)
            statement = statement.order_by(col(ChatMessage.created_at))
            return list(session.exec(statement).all())

        return await self._run_session(_get)
