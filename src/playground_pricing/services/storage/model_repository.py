"""Database persistence for the provider model catalog."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlmodel import Session, col, select

from playground_pricing.models import GroqModel

from .repository import AsyncRepository


class ModelRepository(AsyncRepository):
    """Persist and query provider models."""

    async def upsert_model(self, model_data: Any) -> GroqModel:
        """Insert a model or update the existing row with the same ID."""
        data = model_data.model_dump() if hasattr(model_data, "model_dump") else dict(model_data)

        def _build(session: Session) -> GroqModel:
            existing = session.get(GroqModel, data["id"])
            if existing is None:
                return GroqModel.model_validate(data)
            for key, value in data.items():
                setattr(existing, key, value)
            existing.updated_at = datetime.now(UTC)
            return existing

        return await self._save(_build)

    async def get_model(self, model_id: str) -> GroqModel | None:
        """Get a single model by ID."""

        def _get(session: Session) -> GroqModel | None:
            return session.get(GroqModel, model_id)

        return await self._run_session(_get)

    async def list_active_models(self) -> list[GroqModel]:
        """Get active models grouped by type, then sorted by display name."""

        def _get(session: Session) -> list[GroqModel]:
            statement = (
                select(GroqModel)
                .where(col(GroqModel.is_active).is_(True))
                .order_by(col(GroqModel.model_type), col(GroqModel.display_name))
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def count_models(self) -> int:
        """Count all stored models, active or not."""

        def _count(session: Session) -> int:
            return len(session.exec(select(GroqModel.id)).all())

        return await self._run_session(_count)
