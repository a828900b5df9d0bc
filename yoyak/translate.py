"""Translation with completion markers and continuation turns.

A single chat completion may stop before the translation is finished, and
the API does not reliably say so. The system prompt therefore asks the model
to end its answer with a random marker. A turn that ends without the marker
is treated as truncated: the partial answer goes back into the conversation
along with :data:`~yoyak.prompts.CONTINUATION_PROMPT` and another request is
made, until the marker shows up.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing
from enum import Enum

from .cancellation import CancellationToken, cancellable
from .detection import HeuristicDetector, LanguageDetector
from .errors import Cancelled, ContinuationLimitExceeded, ErrorCategory, ModelInvocationFailed
from .events import Event, Observer, log_event
from .languages import normalize_language
from .marker import MarkerScanner, make_marker
from .metrics import (
    Timer,
    chunks_emitted_total,
    continuation_turns_total,
    translations_skipped_total,
)
from .models.base import ChatModel, Conversation, Message
from .prompts import CONTINUATION_PROMPT, translation_prompt

# Emitted between turns so the last word of one turn and the first word of
# the next do not fuse.
SEPARATOR = " "


class SessionState(str, Enum):
    AWAITING_RESPONSE = "awaiting_response"
    STREAMING = "streaming"
    CONTINUING = "continuing"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


class TranslationSession:
    """Translate ``text`` into ``target_language`` as a stream of chunks.

    Iterate the session with ``async for``; the concatenated chunks form the
    translated document, and the document is complete only once iteration
    finishes without an exception. A session can be iterated only once.

    ``max_continuations`` bounds the number of continuation turns; ``None``
    lets the model keep going for as long as it truncates. The language code
    is validated here, before any request is made.
    """

    def __init__(
        self,
        model: ChatModel,
        text: str,
        target_language: str,
        cancel: CancellationToken | None = None,
        *,
        detector: LanguageDetector | None = None,
        max_continuations: int | None = None,
        marker: str | None = None,
        observer: Observer | None = None,
    ) -> None:
        if max_continuations is not None and max_continuations < 0:
            raise ValueError("max_continuations must be non-negative")
        self.model = model
        self.text = text
        self.target_language = normalize_language(target_language)
        self.cancel = cancel or CancellationToken()
        self.detector = detector or HeuristicDetector()
        self.max_continuations = max_continuations
        self.marker = marker or make_marker()
        self.observer = observer or log_event
        self.conversation: Conversation = []
        self.state = SessionState.AWAITING_RESPONSE
        self.turns = 0
        self._consumed = False

    @property
    def complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise RuntimeError("a translation session can only be iterated once")
        self._consumed = True
        return self._run()

    def _emit(self, event_type: str, **payload: object) -> None:
        payload.setdefault("language", self.target_language)
        self.observer(Event(event_type, payload))

    def _detect(self) -> str | None:
        # A detector that breaks only costs the shortcut; translate anyway.
        try:
            return self.detector.detect(self.text)
        except Exception as exc:
            self._emit("detection_failed", error=str(exc))
            return None

    async def _run(self) -> AsyncIterator[str]:
        try:
            self.cancel.raise_if_cancelled()
            if self._detect() == self.target_language:
                translations_skipped_total.inc()
                self._emit("translation_skipped")
                self.state = SessionState.COMPLETE
                yield self.text
                return

            self.conversation = [
                Message("system", translation_prompt(self.target_language, self.marker)),
                Message("user", self.text),
            ]
            continuations = 0
            while True:
                self.cancel.raise_if_cancelled()
                self.turns += 1
                scanner = MarkerScanner(self.marker)
                received: list[str] = []
                chunks = 0
                timer = Timer()
                timer.start()
                self.state = SessionState.STREAMING
                self._emit("turn_start", turn=self.turns, model=getattr(self.model, "name", None))

                stream = self.model.stream(list(self.conversation), self.cancel)
                async with aclosing(cancellable(stream, self.cancel)) as pieces:
                    async for piece in pieces:
                        received.append(piece)
                        safe = scanner.feed(piece)
                        if safe:
                            chunks += 1
                            chunks_emitted_total.inc()
                            yield safe
                        if scanner.found:
                            break

                if scanner.found:
                    self.state = SessionState.COMPLETE
                    self._emit(
                        "turn_complete",
                        turn=self.turns,
                        chunks=chunks,
                        latency_ms=timer.stop(),
                    )
                    return

                tail = scanner.flush()
                if tail:
                    chunks_emitted_total.inc()
                    yield tail
                self.state = SessionState.CONTINUING
                self._emit(
                    "turn_incomplete",
                    turn=self.turns,
                    chunks=chunks,
                    latency_ms=timer.stop(),
                )
                if self.max_continuations is not None and continuations >= self.max_continuations:
                    self.state = SessionState.FAILED
                    self._emit("continuation_limit", turn=self.turns)
                    raise ContinuationLimitExceeded(self.max_continuations)
                continuations += 1
                continuation_turns_total.inc()
                yield SEPARATOR
                self.conversation.append(Message("assistant", "".join(received)))
                self.conversation.append(Message("user", CONTINUATION_PROMPT))
                self.state = SessionState.AWAITING_RESPONSE
        except Cancelled:
            self.state = SessionState.CANCELLED
            self._emit("cancelled", turn=self.turns)
            raise
        except ModelInvocationFailed as exc:
            self.state = SessionState.FAILED
            self._emit(
                "failed",
                turn=self.turns,
                error=str(exc),
                error_category=ErrorCategory.MODEL.value,
            )
            raise


def translate(
    model: ChatModel,
    text: str,
    target_language: str,
    cancel: CancellationToken | None = None,
    **options,
) -> TranslationSession:
    """Start translating ``text``; see :class:`TranslationSession`."""
    return TranslationSession(model, text, target_language, cancel, **options)
