"""Model capability detection.

Derives a model's type, owner, capabilities and context limits from its
identifier and the provider's /models entry. Detection is a fixed rule table:
every identifier produces a result, unknown ones fall back to a plain chat
model with conservative defaults.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Literal

ModelType = Literal["compound", "vision", "reasoning", "audio-stt", "audio-tts", "guard", "chat"]

# Evaluated in order, first match wins. An id can match several patterns.
MODEL_TYPE_RULES: tuple[tuple[re.Pattern[str], ModelType], ...] = (
    (re.compile(r"^groq/compound", re.IGNORECASE), "compound"),
    (re.compile(r"whisper", re.IGNORECASE), "audio-stt"),
    (re.compile(r"playai-tts", re.IGNORECASE), "audio-tts"),
    (re.compile(r"llama-guard|prompt-guard", re.IGNORECASE), "guard"),
    (re.compile(r"deepseek-r1|gpt-oss|qwen.*qwq", re.IGNORECASE), "reasoning"),
    (
        re.compile(r"vision|llava|llama-4-(scout|maverick)|llama-3\.2-(11b|90b)", re.IGNORECASE),
        "vision",
    ),
)

TOOLS_PATTERN = re.compile(
    r"llama-4-(scout|maverick)|llama-3\.(3|1)|qwen|gpt-oss|gemma2", re.IGNORECASE
)
LLAMA4_PATTERN = re.compile(r"llama-4-(scout|maverick)")

OWNER_PREFIX_RULES: tuple[tuple[str, str], ...] = (
    ("meta-llama/", "Meta"),
    ("groq/", "Groq"),
    ("openai/", "OpenAI"),
    ("qwen/", "Alibaba Cloud"),
    ("moonshotai/", "Moonshot AI"),
    ("playai", "PlayAI"),
    ("mistral", "Mistral AI"),
    ("gemma", "Google"),
)
OWNER_KEYWORD_RULES: tuple[tuple[str, str], ...] = (
    ("llama", "Meta"),
    ("qwen", "Alibaba Cloud"),
    ("deepseek", "DeepSeek"),
    ("whisper", "OpenAI"),
)
UNKNOWN_OWNER = "Unknown"

DISPLAY_PREFIX_PATTERN = re.compile(
    r"^(groq|meta-llama|openai|qwen|moonshotai|playai)/", re.IGNORECASE
)

JSON_MODE_MIN_CONTEXT = 8192
LARGE_CONTEXT_WINDOW = 100_000
LARGE_CONTEXT_OUTPUT_CAP = 8000
INPUT_SHARE = 0.9
OUTPUT_SHARE = 0.25

# Per-type overrides applied on top of the context-window derived limits
TYPE_LIMITS: dict[ModelType, dict[str, int]] = {
    "compound": {"max_output_tokens": 8000},
    "vision": {"max_image_size": 20, "max_image_count": 5},  # MB, images
    "audio-stt": {"max_audio_duration": 3600},  # seconds
}

MODEL_TYPE_DESCRIPTIONS: dict[ModelType, str] = {
    "compound": "AI System with built-in tools (web search, code execution, browser automation)",
    "vision": "Multimodal model with image understanding",
    "reasoning": "Shows step-by-step thinking process",
    "audio-stt": "Speech-to-text transcription",
    "audio-tts": "Text-to-speech generation",
    "guard": "Safety and content moderation",
    "chat": "General-purpose conversation",
}


@dataclass(frozen=True)
class ModelCapabilities:
    """Feature flags for a model."""

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


@dataclass(frozen=True)
class ContextLimits:
    """Size limits for a single request."""

    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    max_image_size: int | None = None  # MB
    max_image_count: int | None = None
    max_audio_duration: int | None = None  # seconds


@dataclass(frozen=True)
class ModelMetadata:
    """Structured description of what a model supports."""

    owner: str
    model_type: ModelType
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)
    context_limits: ContextLimits = field(default_factory=ContextLimits)


def detect_model_type(model_id: str) -> ModelType:
    """Classify a model identifier."""
    for pattern, model_type in MODEL_TYPE_RULES:
        if pattern.search(model_id):
            return model_type
    return "chat"


def detect_model_owner(model_id: str, owned_by: str | None = None) -> str:
    """Detect the owning organization from owned_by or the model ID."""
    if owned_by:
        return owned_by

    for prefix, owner in OWNER_PREFIX_RULES:
        if model_id.startswith(prefix):
            return owner
    for keyword, owner in OWNER_KEYWORD_RULES:
        if keyword in model_id:
            return owner
    return UNKNOWN_OWNER


def detect_model_capabilities(
    model_id: str, api_data: Mapping[str, Any] | None = None
) -> ModelCapabilities:
    """Detect feature flags for a model.

    Args:
        model_id: Provider model ID.
        api_data: Raw /models entry, consulted for the context window.

    Returns:
        ModelCapabilities starting from conservative defaults.
    """
    model_type = detect_model_type(model_id)

    if model_type == "compound":
        return ModelCapabilities(
            supports_tools=True,
            supports_web_search=True,
            supports_code_execution=True,
            supports_browser_automation=True,
            supports_visit_website=True,
            supports_wolfram_alpha=True,
            supports_json_mode=True,
        )

    if model_type == "vision":
        return ModelCapabilities(
            supports_vision=True,
            supports_json_mode=True,
            supports_tools=bool(LLAMA4_PATTERN.search(model_id)),
        )

    if model_type == "reasoning":
        return ModelCapabilities(
            supports_reasoning=True,
            supports_tools=True,
            supports_json_mode=True,
        )

    if model_type in ("audio-stt", "audio-tts"):
        # STT streams transcripts, TTS returns whole clips
        return ModelCapabilities(
            supports_audio=True,
            supports_streaming=model_type == "audio-stt",
        )

    if model_type == "guard":
        return ModelCapabilities(supports_json_mode=True)

    capabilities = ModelCapabilities()
    if TOOLS_PATTERN.search(model_id):
        capabilities = replace(capabilities, supports_tools=True, supports_json_mode=True)
    if _context_window(api_data) >= JSON_MODE_MIN_CONTEXT:
        capabilities = replace(capabilities, supports_json_mode=True)
    return capabilities


def detect_context_limits(model_id: str, context_window: int) -> ContextLimits:
    """Derive request size limits for a model.

    Input is capped at 90% of the context window. Output is capped at 8000
    tokens for large windows and 25% of the window otherwise. Type-specific
    limits from TYPE_LIMITS take precedence.
    """
    window = max(int(context_window or 0), 0)
    if window >= LARGE_CONTEXT_WINDOW:
        max_output = LARGE_CONTEXT_OUTPUT_CAP
    else:
        max_output = math.floor(window * OUTPUT_SHARE)

    limits = ContextLimits(
        max_input_tokens=math.floor(window * INPUT_SHARE),
        max_output_tokens=max_output,
    )
    overrides = TYPE_LIMITS.get(detect_model_type(model_id))
    if overrides:
        limits = replace(limits, **overrides)
    return limits


def get_model_metadata(
    model_id: str,
    context_window: int,
    owned_by: str | None = None,
    api_data: Mapping[str, Any] | None = None,
) -> ModelMetadata:
    """Get comprehensive model metadata.

    Args:
        model_id: Provider model ID.
        context_window: Declared context window in tokens.
        owned_by: Provider-reported owner, if any.
        api_data: Raw /models entry.

    Returns:
        ModelMetadata for the model.
    """
    return ModelMetadata(
        owner=detect_model_owner(model_id, owned_by),
        model_type=detect_model_type(model_id),
        capabilities=detect_model_capabilities(model_id, api_data),
        context_limits=detect_context_limits(model_id, context_window),
    )


def get_model_display_name(model_id: str) -> str:
    """User-friendly display name, e.g. "Llama 3.3 70b Versatile"."""
    name = DISPLAY_PREFIX_PATTERN.sub("", model_id).replace("-", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), name)


def get_model_type_description(model_type: str) -> str:
    return MODEL_TYPE_DESCRIPTIONS.get(model_type, "General-purpose AI model")


def _context_window(api_data: Mapping[str, Any] | None) -> int:
    if not api_data:
        return 0
    value = api_data.get("context_window")
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if not isinstance(value, int | float) or not math.isfinite(value):
        return 0
    return int(value)
