from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing

from .cancellation import CancellationToken, cancellable
from .errors import Cancelled, ErrorCategory, ModelInvocationFailed
from .events import Event, Observer, log_event
from .languages import normalize_language
from .metrics import Timer, chunks_emitted_total
from .models.base import ChatModel, Message
from .prompts import summary_prompt


def summarize(
    model: ChatModel,
    text: str,
    cancel: CancellationToken | None = None,
    *,
    language: str | None = None,
    paragraphs: int = 1,
    observer: Observer | None = None,
) -> AsyncIterator[str]:
    """Stream a summary of ``text`` in ``paragraphs`` paragraphs.

    With ``language`` the summary is written in that language in the same
    request. Summaries are short by construction, so this is a single request
    with no completion marker; chunks are passed through as they arrive.

    The language and paragraph count are checked before the iterator is
    returned, so bad arguments fail without any request being made.
    """
    if language is not None:
        language = normalize_language(language)
    messages = [
        Message("system", summary_prompt(paragraphs, language)),
        Message("user", text),
    ]
    return _stream(
        model,
        messages,
        cancel or CancellationToken(),
        observer or log_event,
        language,
    )


async def _stream(
    model: ChatModel,
    messages: list[Message],
    cancel: CancellationToken,
    observer: Observer,
    language: str | None,
) -> AsyncIterator[str]:
    timer = Timer()
    timer.start()
    chunks = 0
    observer(
        Event(
            "summary_start",
            {"language": language, "model": getattr(model, "name", None)},
        )
    )
    try:
        cancel.raise_if_cancelled()
        async with aclosing(cancellable(model.stream(messages, cancel), cancel)) as pieces:
            async for piece in pieces:
                chunks += 1
                chunks_emitted_total.inc()
                yield piece
    except Cancelled:
        observer(Event("cancelled", {"language": language, "chunks": chunks}))
        raise
    except ModelInvocationFailed as exc:
        observer(
            Event(
                "failed",
                {
                    "language": language,
                    "chunks": chunks,
                    "error": str(exc),
                    "error_category": ErrorCategory.MODEL.value,
                },
            )
        )
        raise
    observer(
        Event(
            "summary_end",
            {"language": language, "chunks": chunks, "latency_ms": timer.stop()},
        )
    )
