from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

import openai

from ..cancellation import CancellationToken
from ..config import Settings, get_settings
from ..errors import ConfigurationError, ErrorCategory, ModelInvocationFailed
from ..metrics import model_requests_total
from .base import ChatModel, Message
from .registry import base_url_for


class OpenAIChatModel(ChatModel):
    """Chat model backed by the OpenAI chat completions API.

    Any OpenAI-compatible endpoint works; known monikers from
    :mod:`yoyak.models.registry` pick their endpoint automatically.
    """

    def __init__(
        self,
        *,
        client: Any | None = None,
        settings: Settings | None = None,
        model: str | None = None,
    ) -> None:
        self.log = logging.getLogger(__name__)
        self.settings = settings or get_settings()
        self.name = model or self.settings.model
        self._client = client or build_client(self.settings, self.name)

    def _request(self, messages: Sequence[Message]) -> dict[str, Any]:
        model = self.name
        if self.settings.provider == "azure" and self.settings.azure_deployment:
            model = self.settings.azure_deployment
        return {"model": model, "messages": [m.to_dict() for m in messages]}

    async def stream(
        self, messages: Sequence[Message], cancel: CancellationToken | None = None
    ) -> AsyncIterator[str]:
        if cancel is not None:
            cancel.raise_if_cancelled()
        model_requests_total.inc()
        try:
            response = await self._client.chat.completions.create(
                **self._request(messages), stream=True
            )
        except openai.OpenAIError as exc:
            self._log_failure(exc)
            raise ModelInvocationFailed(str(exc)) from exc

        try:
            async for chunk in response:
                for choice in chunk.choices or []:
                    content = getattr(choice.delta, "content", None)
                    if content:
                        yield content
        except openai.OpenAIError as exc:
            self._log_failure(exc)
            raise ModelInvocationFailed(str(exc)) from exc
        finally:
            close = getattr(response, "close", None)
            if close is not None:
                await close()

    async def invoke(self, messages: Sequence[Message]) -> str:
        model_requests_total.inc()
        try:
            response = await self._client.chat.completions.create(
                **self._request(messages)
            )
        except openai.OpenAIError as exc:
            self._log_failure(exc)
            raise ModelInvocationFailed(str(exc)) from exc
        for choice in response.choices or []:
            content = getattr(choice.message, "content", None)
            if isinstance(content, str):
                return content
        return ""

    def _log_failure(self, exc: BaseException) -> None:
        self.log.warning(
            "model_invocation_failed",
            extra={
                "event_type": "model_invocation_failed",
                "model": self.name,
                "error_category": ErrorCategory.MODEL.value,
                "error": str(exc),
            },
        )


def build_client(settings: Settings, model: str | None = None) -> Any:
    if settings.provider == "azure":
        if not settings.api_key:
            raise ConfigurationError("YOYAK_API_KEY is required for Azure OpenAI")
        if not settings.azure_endpoint:
            raise ConfigurationError("YOYAK_AZURE_ENDPOINT is required for Azure OpenAI")
        return openai.AsyncAzureOpenAI(
            api_key=settings.api_key,
            api_version=settings.azure_api_version,
            azure_endpoint=settings.azure_endpoint,
        )

    if not settings.api_key:
        raise ConfigurationError(
            "an API key is required; set YOYAK_API_KEY or run `yoyak config set`"
        )
    base_url = settings.base_url or base_url_for(model or settings.model)
    client_kwargs: dict[str, Any] = {"api_key": settings.api_key}
    if base_url:
        client_kwargs["base_url"] = base_url
    return openai.AsyncOpenAI(**client_kwargs)
