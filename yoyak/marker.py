"""Completion markers and boundary-safe scanning of streamed text."""

from __future__ import annotations

import secrets


def make_marker() -> str:
    """Return a fresh completion marker such as ``</3fa9c2>``."""
    return f"</{secrets.token_hex(3)}>"


def _partial_suffix(text: str, marker: str) -> int:
    """Length of the longest suffix of ``text`` that starts ``marker``."""
    for size in range(min(len(text), len(marker) - 1), 0, -1):
        if text.endswith(marker[:size]):
            return size
    return 0


class MarkerScanner:
    """Watch streamed chunks for ``marker`` without leaking any part of it.

    :meth:`feed` returns the text that is safe to hand to the consumer. A
    trailing fragment that could still grow into the marker is held back
    until the next chunk settles it. Once the marker has been seen, the text
    before it is released and everything after it is dropped.
    """

    def __init__(self, marker: str) -> None:
        if not marker:
            raise ValueError("marker must not be empty")
        self.marker = marker
        self.found = False
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> str:
        if self.found:
            return ""
        text = self._pending + chunk
        index = text.find(self.marker)
        if index >= 0:
            self.found = True
            self._pending = ""
            return text[:index]
        keep = _partial_suffix(text, self.marker)
        self._pending = text[len(text) - keep :]
        return text[: len(text) - keep]

    def flush(self) -> str:
        """Release held-back text once the stream has ended."""
        pending, self._pending = self._pending, ""
        return pending
