from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Event:
    """Diagnostic event emitted by the streaming engines."""

    type: str
    payload: dict[str, Any] = field(default_factory=dict)


Observer = Callable[[Event], None]

_WARNING_EVENTS = frozenset({"continuation_limit", "detection_failed", "failed"})


def log_event(event: Event) -> None:
    """Default observer: forward ``event`` to the ``yoyak.events`` logger.

    The payload is attached as ``extra`` fields so that the JSON formatter in
    :mod:`yoyak.logging` picks them up.
    """

    level = logging.WARNING if event.type in _WARNING_EVENTS else logging.DEBUG
    logging.getLogger("yoyak.events").log(
        level,
        event.type,
        extra={"event_type": event.type, **event.payload},
    )
