"""Provider model-listing client with async support and retries."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from playground_pricing.core.config import DEFAULT_API_BASE_URL

from .pricing import list_priced_models

logger = structlog.get_logger()

FAKE_COMPOUND_CONTEXT_WINDOW = 128_000
FAKE_DEFAULT_CONTEXT_WINDOW = 8192


@dataclass(frozen=True)
class ModelListing:
    """One entry of the provider's /models listing."""

    id: str
    context_window: int | None = None
    owned_by: str | None = None
    created: int | None = None  # epoch seconds
    active: bool | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ModelListing:
        """Build a listing from a raw API object, tolerating odd field types."""
        return cls(
            id=str(data["id"]),
            context_window=_as_int(data.get("context_window")),
            owned_by=data.get("owned_by") or None,
            created=_as_int(data.get("created")),
            active=data.get("active") if isinstance(data.get("active"), bool) else None,
            raw=dict(data),
        )


class ModelsClient(ABC):
    """Abstract base class for async model-listing clients."""

    @abstractmethod
    async def list_models(self) -> list[ModelListing]:
        """Fetch the provider's model listing.

        Returns:
            One ModelListing per provider model.
        """

    async def close(self) -> None:  # noqa: B027
        """Close any resources. Override if needed."""

    async def __aenter__(self) -> ModelsClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


class FakeModelsClient(ModelsClient):
    """Static listing built from the pricing table, for dry runs and tests."""

    def __init__(self, models: list[ModelListing] | None = None) -> None:
        self._models = models
        self.call_count = 0

    async def list_models(self) -> list[ModelListing]:
        self.call_count += 1
        if self._models is not None:
            return list(self._models)

        listings = []
        for model_id in list_priced_models():
            context_window = (
                FAKE_COMPOUND_CONTEXT_WINDOW
                if "compound" in model_id
                else FAKE_DEFAULT_CONTEXT_WINDOW
            )
            raw = {"id": model_id, "context_window": context_window, "active": True}
            listings.append(ModelListing.from_api(raw))
        return listings


class GroqModelsClient(ModelsClient):
    """Async client for the provider's OpenAI-compatible /models endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Provider API key.
            base_url: API base URL without trailing slash.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.models_url = f"{base_url.rstrip('/')}/models"
        self.client = httpx.AsyncClient(timeout=timeout)

    async def list_models(self) -> list[ModelListing]:
        """Fetch and parse the model listing.

        Entries without an ``id`` are skipped.

        Raises:
            httpx.HTTPStatusError: On API error after retries.
            httpx.RequestError: On transport failure after retries.
            ValueError: If the response body has no ``data`` list.
        """
        data = await self._fetch_models()
        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            msg = "Malformed models response: missing data list"
            raise ValueError(msg)

        listings = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("id"):
                logger.warning("models_entry_skipped", entry=str(entry)[:80])
                continue
            listings.append(ModelListing.from_api(entry))

        logger.debug("models_listed", count=len(listings))
        return listings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _fetch_models(self) -> Any:
        """GET the listing with retries."""
        logger.info("models_fetch", url=self.models_url)

        response = await self.client.get(
            self.models_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()


def create_models_client(
    api_key: str | None = None,
    base_url: str = DEFAULT_API_BASE_URL,
    timeout: float = 30.0,
    dry_run: bool = False,
) -> ModelsClient:
    """Create the appropriate models client.

    Args:
        api_key: Provider API key (required unless dry_run).
        base_url: API base URL.
        timeout: Request timeout in seconds.
        dry_run: Use the static fake listing instead of the API.

    Returns:
        ModelsClient instance.
    """
    if dry_run:
        logger.info("using_fake_models_client")
        return FakeModelsClient()

    if not api_key:
        msg = "API key required for real API calls"
        raise ValueError(msg)

    return GroqModelsClient(api_key, base_url=base_url, timeout=timeout)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
