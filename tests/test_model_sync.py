"""Tests for syncing the provider listing into the models table."""

from datetime import UTC, datetime

import pytest

from playground_pricing.services.llm import FakeModelsClient, ModelListing
from playground_pricing.services.model_sync import (
    DEFAULT_CONTEXT_WINDOW,
    ModelSyncError,
    ModelSyncService,
    build_model_record,
)
from playground_pricing.services.storage import ModelRepository


class TestBuildModelRecord:
    """Tests for deriving stored rows from listings."""

    def test_priced_reasoning_model(self):
        """Pricing, metadata and display name are combined."""
        record = build_model_record(
            ModelListing(
                id="openai/gpt-oss-120b",
                context_window=131072,
                owned_by="OpenAI",
                created=1754408224,
                active=True,
            )
        )
        assert record["display_name"] == "Gpt Oss 120b"
        assert record["owner"] == "OpenAI"
        assert record["model_type"] == "reasoning"
        assert record["supports_reasoning"] is True
        assert record["input_pricing"] == 0.15
        assert record["output_pricing"] == 0.75
        assert record["max_output_tokens"] == 8000
        assert record["is_active"] is True
        assert record["release_date"] == datetime.fromtimestamp(1754408224, UTC)

    def test_unknown_model_defaults(self):
        """Unknown models are free, active and use the default window."""
        record = build_model_record(ModelListing(id="acme-chat"))
        assert record["context_window"] == DEFAULT_CONTEXT_WINDOW
        assert record["input_pricing"] == 0.0
        assert record["output_pricing"] == 0.0
        assert record["owner"] == "Unknown"
        assert record["is_active"] is True
        assert record["release_date"] is None

    def test_inactive_flag(self):
        """Only an explicit false marks a model inactive."""
        record = build_model_record(ModelListing(id="acme-chat", active=False))
        assert record["is_active"] is False

    def test_string_context_window_from_listing(self):
        """A numeric string window is stored and enables JSON mode."""
        listing = ModelListing.from_api({"id": "acme-chat", "context_window": "131072"})
        record = build_model_record(listing)
        assert record["context_window"] == 131072
        assert record["supports_json_mode"] is True


class TestModelSyncService:
    """Tests for ModelSyncService.refresh."""

    async def test_refresh_stores_listing(self, engine):
        """Every listed model is stored."""
        client = FakeModelsClient()
        repository = ModelRepository(engine)

        stored = await ModelSyncService(client, repository).refresh()

        assert len(stored) == len(await client.list_models())
        assert await repository.count_models() == len(stored)
        compound = await repository.get_model("groq/compound")
        assert compound is not None
        assert compound.model_type == "compound"
        assert compound.supports_web_search is True

    async def test_refresh_twice_upserts(self, engine):
        """A second refresh updates rows instead of duplicating them."""
        repository = ModelRepository(engine)
        first = FakeModelsClient([ModelListing(id="acme-chat", context_window=4096)])
        second = FakeModelsClient([ModelListing(id="acme-chat", context_window=32768)])

        await ModelSyncService(first, repository).refresh()
        before = await repository.get_model("acme-chat")
        await ModelSyncService(second, repository).refresh()
        after = await repository.get_model("acme-chat")

        assert await repository.count_models() == 1
        assert after.context_window == 32768
        assert after.max_input_tokens == 29491
        assert after.created_at == before.created_at

    async def test_inactive_models_not_listed(self, engine):
        """Inactive models are stored but excluded from the active list."""
        repository = ModelRepository(engine)
        client = FakeModelsClient(
            [
                ModelListing(id="llama-3.1-8b-instant", context_window=131072, active=True),
                ModelListing(id="retired-model", active=False),
            ]
        )

        await ModelSyncService(client, repository).refresh()

        active = await repository.list_active_models()
        assert [model.id for model in active] == ["llama-3.1-8b-instant"]
        assert await repository.count_models() == 2

    async def test_empty_listing_raises(self, engine):
        """An empty provider listing is an error."""
        service = ModelSyncService(FakeModelsClient([]), ModelRepository(engine))
        with pytest.raises(ModelSyncError, match="No models returned"):
            await service.refresh()
