"""Provider model catalog with derived capability metadata."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class GroqModel(SQLModel, table=True):
    """One provider model, upserted by ID on every refresh."""

    __tablename__ = "models"

    id: str = Field(primary_key=True)
    display_name: str
    owner: str
    model_type: str = Field(index=True)  # "compound", "vision", "reasoning", ...
    context_window: int
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    max_image_size: int | None = None
    max_image_count: int | None = None
    max_audio_duration: int | None = None
    input_pricing: float = 0.0  # USD per 1M tokens
    output_pricing: float = 0.0
    supports_tools: bool = False
    supports_web_search: bool = False
    supports_code_execution: bool = False
    supports_browser_automation: bool = False
    supports_visit_website: bool = False
    supports_wolfram_alpha: bool = False
    supports_vision: bool = False
    supports_reasoning: bool = False
    supports_audio: bool = False
    supports_streaming: bool = True
    supports_json_mode: bool = False
    supports_prompt_caching: bool = False
    is_active: bool = Field(default=True, index=True)
    release_date: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
