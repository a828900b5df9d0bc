"""Known model monikers and the OpenAI-compatible endpoints serving them."""

from __future__ import annotations

OPENAI = None
DEEPSEEK = "https://api.deepseek.com"
GEMINI = "https://generativelanguage.googleapis.com/v1beta/openai/"
ANTHROPIC = "https://api.anthropic.com/v1/"

MODELS: dict[str, str | None] = {
    "chatgpt-4o-latest": OPENAI,
    "gpt-4o": OPENAI,
    "gpt-4o-mini": OPENAI,
    "gpt-4.1": OPENAI,
    "gpt-4.1-mini": OPENAI,
    "o1": OPENAI,
    "o1-mini": OPENAI,
    "o3-mini": OPENAI,
    "claude-3-5-haiku-latest": ANTHROPIC,
    "claude-3-5-sonnet-latest": ANTHROPIC,
    "claude-3-opus-latest": ANTHROPIC,
    "deepseek-chat": DEEPSEEK,
    "deepseek-reasoner": DEEPSEEK,
    "gemini-1.5-flash": GEMINI,
    "gemini-1.5-flash-8b": GEMINI,
    "gemini-1.5-pro": GEMINI,
    "gemini-2.0-flash": GEMINI,
}


def is_model_moniker(name: str) -> bool:
    return name in MODELS


def base_url_for(name: str) -> str | None:
    """Endpoint for a known moniker; ``None`` means the OpenAI default."""
    return MODELS.get(name)
