from .groq_model import GroqModel
from .session import ChatMessage, ChatSession

__all__ = ["ChatMessage", "ChatSession", "GroqModel"]
