"""Sync the provider's model listing into the models table."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog

from playground_pricing.core.errors import ModelSyncError
from playground_pricing.models import GroqModel
from playground_pricing.services.llm import (
    ModelListing,
    ModelsClient,
    get_model_display_name,
    get_model_metadata,
    get_model_pricing,
)
from playground_pricing.services.storage import ModelRepository

logger = structlog.get_logger()

DEFAULT_CONTEXT_WINDOW = 8192


def build_model_record(listing: ModelListing) -> dict[str, Any]:
    """Derive the stored row for one listing entry.

    Args:
        listing: Provider /models entry.

    Returns:
        Column values for GroqModel, keyed by column name.
    """
    context_window = listing.context_window or DEFAULT_CONTEXT_WINDOW
    metadata = get_model_metadata(listing.id, context_window, listing.owned_by, listing.raw)
    pricing = get_model_pricing(listing.id)
    limits = metadata.context_limits
    capabilities = metadata.capabilities

    return {
        "id": listing.id,
        "display_name": get_model_display_name(listing.id),
        "owner": metadata.owner,
        "model_type": metadata.model_type,
        "context_window": context_window,
        "max_input_tokens": limits.max_input_tokens,
        "max_output_tokens": limits.max_output_tokens,
        "max_image_size": limits.max_image_size,
        "max_image_count": limits.max_image_count,
        "max_audio_duration": limits.max_audio_duration,
        "input_pricing": pricing.input,
        "output_pricing": pricing.output,
        "supports_tools": capabilities.supports_tools,
        "supports_web_search": capabilities.supports_web_search,
        "supports_code_execution": capabilities.supports_code_execution,
        "supports_browser_automation": capabilities.supports_browser_automation,
        "supports_visit_website": capabilities.supports_visit_website,
        "supports_wolfram_alpha": capabilities.supports_wolfram_alpha,
        "supports_vision": capabilities.supports_vision,
        "supports_reasoning": capabilities.supports_reasoning,
        "supports_audio": capabilities.supports_audio,
        "supports_streaming": capabilities.supports_streaming,
        "supports_json_mode": capabilities.supports_json_mode,
        "supports_prompt_caching": capabilities.supports_prompt_caching,
        "is_active": listing.active is not False,
        "release_date": (
            datetime.fromtimestamp(listing.created, UTC) if listing.created else None
        ),
    }


class ModelSyncService:
    """Refreshes the stored model catalog from the provider.

    Usage:
        service = ModelSyncService(client, ModelRepository(engine))
        models = await service.refresh()
    """

    def __init__(self, client: ModelsClient, repository: ModelRepository) -> None:
        self.client = client
        self.repository = repository

    async def refresh(self) -> list[GroqModel]:
        """Fetch the listing and upsert every model.

        Returns:
            Stored rows in listing order.

        Raises:
            ModelSyncError: If the provider returned no models.
        """
        logger.info("models_refresh_start")
        listings = await self.client.list_models()
        if not listings:
            msg = "No models returned from provider API"
            raise ModelSyncError(msg)

        logger.info("models_refresh_received", count=len(listings))

        stored = []
        for listing in listings:
            record = build_model_record(listing)
            model = await self.repository.upsert_model(record)
            stored.append(model)
            logger.debug(
                "model_upserted",
                model_id=model.id,
                model_type=model.model_type,
                owner=model.owner,
            )

        logger.info("models_refresh_complete", models_synced=len(stored))
        return stored
