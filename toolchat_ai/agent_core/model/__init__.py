"""Chat model adapter and model factory."""

from .adapter import ChatModelAdapter, PydanticAIChatModel, to_ai_message, to_model_messages
from .factory import ChatModelFactory

__all__ = [
    "ChatModelAdapter",
    "ChatModelFactory",
    "PydanticAIChatModel",
    "to_ai_message",
    "to_model_messages",
]
