from .capabilities import (
    ContextLimits,
    ModelCapabilities,
    ModelMetadata,
    ModelType,
    detect_context_limits,
    detect_model_capabilities,
    detect_model_owner,
    detect_model_type,
    get_model_display_name,
    get_model_metadata,
    get_model_type_description,
)
from .client import (
    FakeModelsClient,
    GroqModelsClient,
    ModelListing,
    ModelsClient,
    create_models_client,
)
from .cost_tracker import CostTracker, MessageCost, price_response
from .pricing import (
    MODEL_PRICING,
    CostBreakdown,
    ModelPricing,
    calculate_message_cost,
    format_cost,
    format_tokens,
    get_model_pricing,
)
from .tokens import estimate_messages_token_count, estimate_token_count

__all__ = [
    "MODEL_PRICING",
    "ContextLimits",
    "CostBreakdown",
    "CostTracker",
    "FakeModelsClient",
    "GroqModelsClient",
    "MessageCost",
    "ModelCapabilities",
    "ModelListing",
    "ModelMetadata",
    "ModelPricing",
    "ModelType",
    "ModelsClient",
    "calculate_message_cost",
    "create_models_client",
    "detect_context_limits",
    "detect_model_capabilities",
    "detect_model_owner",
    "detect_model_type",
    "estimate_messages_token_count",
    "estimate_token_count",
    "format_cost",
    "format_tokens",
    "get_model_display_name",
    "get_model_metadata",
    "get_model_pricing",
    "get_model_type_description",
    "price_response",
]
