from __future__ import annotations

from ..config import Settings
from .base import ChatModel, Conversation, Message, Role
from .registry import MODELS, is_model_moniker

__all__ = [
    "MODELS",
    "ChatModel",
    "Conversation",
    "Message",
    "Role",
    "create_model",
    "is_model_moniker",
]


def create_model(settings: Settings, model: str | None = None) -> ChatModel:
    """Build the chat model selected by ``settings`` (or ``model``)."""
    # Lazy import to keep the openai SDK out of module import time.
    from .openai_impl import OpenAIChatModel

    return OpenAIChatModel(settings=settings, model=model)
