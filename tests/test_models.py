import asyncio
import types

import openai
import pytest

from yoyak.cancellation import CancellationToken
from yoyak.config import Settings
from yoyak.errors import Cancelled, ConfigurationError, ModelInvocationFailed
from yoyak.metrics import model_requests_total
from yoyak.models import create_model, is_model_moniker
from yoyak.models.base import Message
from yoyak.models.openai_impl import OpenAIChatModel, build_client


def _chunk(content):
    delta = types.SimpleNamespace(content=content)
    return types.SimpleNamespace(choices=[types.SimpleNamespace(delta=delta)])


class _FakeStream:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._chunks:
            raise StopAsyncIteration
        item = self._chunks.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


class _FakeCompletions:
    def __init__(self, chunks=(), error=None, reply="OK"):
        self.chunks = chunks
        self.error = error
        self.reply = reply
        self.calls: list[dict] = []
        self.streams: list[_FakeStream] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            stream = _FakeStream(self.chunks)
            self.streams.append(stream)
            return stream
        message = types.SimpleNamespace(content=self.reply)
        return types.SimpleNamespace(choices=[types.SimpleNamespace(message=message)])


def _model(completions, **settings):
    client = types.SimpleNamespace(chat=types.SimpleNamespace(completions=completions))
    return OpenAIChatModel(client=client, settings=Settings(api_key="sk", **settings))


MESSAGES = [Message("system", "Translate."), Message("user", "Hello")]


async def collect(stream):
    return [chunk async for chunk in stream]


def test_stream_yields_delta_content():
    completions = _FakeCompletions([_chunk("Bon"), _chunk(None), _chunk("jour")])
    model = _model(completions)
    model_requests_total.value = 0

    chunks = asyncio.run(collect(model.stream(MESSAGES)))

    assert chunks == ["Bon", "jour"]
    assert completions.calls == [
        {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "Translate."},
                {"role": "user", "content": "Hello"},
            ],
            "stream": True,
        }
    ]
    assert completions.streams[0].closed
    assert model_requests_total.value == 1


def test_request_error_becomes_model_invocation_failed():
    model = _model(_FakeCompletions(error=openai.OpenAIError("connection refused")))
    with pytest.raises(ModelInvocationFailed, match="connection refused"):
        asyncio.run(collect(model.stream(MESSAGES)))


def test_error_mid_stream_becomes_model_invocation_failed():
    completions = _FakeCompletions([_chunk("Bon"), openai.OpenAIError("reset")])
    model = _model(completions)
    received: list[str] = []

    async def main():
        async for chunk in model.stream(MESSAGES):
            received.append(chunk)

    with pytest.raises(ModelInvocationFailed):
        asyncio.run(main())
    assert received == ["Bon"]
    assert completions.streams[0].closed


def test_stream_checks_cancellation_before_request():
    completions = _FakeCompletions([_chunk("x")])
    model = _model(completions)
    token = CancellationToken()
    token.cancel()
    with pytest.raises(Cancelled):
        asyncio.run(collect(model.stream(MESSAGES, token)))
    assert completions.calls == []


def test_invoke_returns_message_content():
    completions = _FakeCompletions(reply="OK")
    model = _model(completions, model="deepseek-chat")
    assert asyncio.run(model.invoke(MESSAGES)) == "OK"
    assert completions.calls[0]["model"] == "deepseek-chat"
    assert "stream" not in completions.calls[0]


def test_azure_deployment_is_sent_as_model():
    completions = _FakeCompletions(reply="OK")
    model = _model(completions, provider="azure", azure_deployment="my-deployment")
    asyncio.run(model.invoke(MESSAGES))
    assert completions.calls[0]["model"] == "my-deployment"


def test_build_client_requires_api_key():
    with pytest.raises(ConfigurationError):
        build_client(Settings())
    with pytest.raises(ConfigurationError):
        build_client(Settings(provider="azure", api_key="sk"))


def test_build_client_uses_moniker_endpoint():
    client = build_client(Settings(api_key="sk", model="deepseek-chat"))
    assert isinstance(client, openai.AsyncOpenAI)
    assert str(client.base_url).rstrip("/") == "https://api.deepseek.com"

    client = build_client(Settings(api_key="sk", base_url="http://localhost:11434/v1"))
    assert str(client.base_url).rstrip("/") == "http://localhost:11434/v1"


def test_build_azure_client():
    settings = Settings(
        provider="azure",
        api_key="key",
        azure_endpoint="https://example.openai.azure.com",
    )
    assert isinstance(build_client(settings), openai.AsyncAzureOpenAI)


def test_create_model_uses_settings():
    model = create_model(Settings(api_key="sk", model="gpt-4o"))
    assert isinstance(model, OpenAIChatModel)
    assert model.name == "gpt-4o"
    assert is_model_moniker("gemini-1.5-pro")
    assert not is_model_moniker("gpt-2")
