"""Base class for repositories running SQLModel work off the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlmodel import Session, SQLModel

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")
RowT = TypeVar("RowT", bound=SQLModel)


class AsyncRepository:
    """Runs each call in its own Session on a worker thread.

    Rows returned from a call stay readable after its Session closes.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        def _run() -> T:
            with Session(self._engine, expire_on_commit=False) as session:
                return fn(session)

        return await asyncio.to_thread(_run)

    async def _save(self, build: Callable[[Session], RowT]) -> RowT:
        """Add the row ``build`` returns, commit, and return it refreshed."""

        def _write(session: Session) -> RowT:
            row = build(session)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

        return await self._run_session(_write)
