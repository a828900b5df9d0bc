from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import AsyncIterable, Iterator
from typing import TextIO

from .cancellation import CancellationToken
from .config import Settings, get_settings
from .models import ChatModel, Message, create_model
from .summary import summarize
from .translate import translate

log = logging.getLogger(__name__)

CHECK_PROMPT = "Reply with the single word OK."


@contextlib.contextmanager
def interrupt_cancels(cancel: CancellationToken) -> Iterator[None]:
    """Set ``cancel`` when the process receives SIGINT."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.cancel)
    except (NotImplementedError, RuntimeError):
        # Not on the main thread, or Windows: leave KeyboardInterrupt alone.
        installed = False
    else:
        installed = True
    try:
        yield
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


async def write_stream(chunks: AsyncIterable[str], out: TextIO) -> None:
    """Write ``chunks`` to ``out`` as they arrive."""
    async for chunk in chunks:
        out.write(chunk)
        out.flush()
    out.write("\n")
    out.flush()


async def run_translate(
    text: str,
    language: str,
    *,
    settings: Settings | None = None,
    model: ChatModel | None = None,
    out: TextIO | None = None,
    cancel: CancellationToken | None = None,
) -> None:
    """Translate ``text`` into ``language`` and write it to ``out``."""

    settings = settings or get_settings()
    model = model or create_model(settings)
    cancel = cancel or CancellationToken()
    log.info(
        "translate starting",
        extra={"model": model.name, "language": language},
    )
    session = translate(
        model,
        text,
        language,
        cancel,
        max_continuations=settings.max_continuations,
    )
    with interrupt_cancels(cancel):
        await write_stream(session, out or sys.stdout)


async def run_summarize(
    text: str,
    language: str | None = None,
    *,
    paragraphs: int | None = None,
    settings: Settings | None = None,
    model: ChatModel | None = None,
    out: TextIO | None = None,
    cancel: CancellationToken | None = None,
) -> None:
    """Summarize ``text`` (optionally into ``language``) and write it to ``out``."""

    settings = settings or get_settings()
    model = model or create_model(settings)
    cancel = cancel or CancellationToken()
    log.info(
        "summarize starting",
        extra={"model": model.name, "language": language},
    )
    chunks = summarize(
        model,
        text,
        cancel,
        language=language,
        paragraphs=paragraphs or settings.summary_paragraphs,
    )
    with interrupt_cancels(cancel):
        await write_stream(chunks, out or sys.stdout)


async def check_model(settings: Settings | None = None, model: ChatModel | None = None) -> str:
    """Send a one-line prompt to the model and return its reply."""

    settings = settings or get_settings()
    model = model or create_model(settings)
    reply = await model.invoke(
        [Message("system", CHECK_PROMPT), Message("user", "Are you there?")]
    )
    return reply.strip()
