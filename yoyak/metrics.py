from __future__ import annotations

import time


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def inc(self, n: int = 1) -> None:
        self.value += n


class Timer:
    def __init__(self) -> None:
        self.last_ms: float | None = None
        self._start: float | None = None

    def start(self) -> None:
        self._start = time.perf_counter()

    def elapsed_ms(self) -> float | None:
        if self._start is None:
            return None
        return (time.perf_counter() - self._start) * 1000

    def stop(self) -> float | None:
        if self._start is None:
            return None
        self.last_ms = self.elapsed_ms()
        self._start = None
        return self.last_ms


model_requests_total = Counter()
continuation_turns_total = Counter()
chunks_emitted_total = Counter()
translations_skipped_total = Counter()
