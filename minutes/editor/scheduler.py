from __future__ import annotations

"""
Single trailing-delay scheduler for cursor re-analysis.

Design intent:
- Replace per-handler timers with one policy: run no sooner than `delay_ms`
  after the latest triggering event.
- Pending work is a set of task names; overlapping requests merge.
- Cooperative and clock-driven: the owner calls `flush_due` from its event loop.
"""

import time
from typing import Callable, Iterable, Literal, Optional

ReanalysisTask = Literal["analyze", "restyle"]
EditorEventKind = Literal["input", "keyup", "compositionend", "click"]

EVENT_TASKS: dict[str, frozenset[ReanalysisTask]] = {
    "input": frozenset({"analyze", "restyle"}),
    "keyup": frozenset({"analyze"}),
    "compositionend": frozenset({"analyze", "restyle"}),
    "click": frozenset({"analyze"}),
}


class ReanalysisScheduler:
    def __init__(self, *, delay_ms: int = 50, clock: Optional[Callable[[], float]] = None) -> None:
        self._delay_sec = max(0, int(delay_ms)) / 1000.0
        self._clock = clock or time.monotonic
        self._deadline: Optional[float] = None
        self._tasks: set[str] = set()

    @property
    def pending(self) -> bool:
        return bool(self._tasks)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def now(self) -> float:
        return float(self._clock())

    def schedule(self, tasks: Iterable[str]) -> None:
        self._tasks.update(tasks)
        self._deadline = self.now() + self._delay_sec

    def schedule_event(self, kind: EditorEventKind) -> None:
        self.schedule(EVENT_TASKS[kind])

    def flush_due(self, now: Optional[float] = None) -> frozenset[str]:
        if not self._tasks or self._deadline is None:
            return frozenset()
        current = self.now() if now is None else float(now)
        if current < self._deadline:
            return frozenset()
        due = frozenset(self._tasks)
        self.cancel()
        return due

    def cancel(self) -> None:
        self._tasks = set()
        self._deadline = None
