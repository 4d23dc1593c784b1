from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from slide_studio.presentation.state import PresentationStore


logger = logging.getLogger("slide_studio.presentation")

Clock = Callable[[], float]


@dataclass
class PendingTransition:
    source: int
    target: int
    effect: str
    started_at: float
    duration_sec: float

    def is_due(self, now: float) -> bool:
        return now - self.started_at >= self.duration_sec


class TransitionEngine:
    """Delays slide changes on a store by the configured transition speed.

    While a change is pending, ``is_transitioning`` is true and the store
    still shows the previous slide. The change lands on the first ``poll``
    at or after ``started_at + duration``. A new request replaces the pending
    one and restarts the clock.
    """

    def __init__(self, store: PresentationStore, clock: Clock = time.monotonic):
        self.store = store
        self.clock = clock
        self._pending: PendingTransition | None = None

    @property
    def pending(self) -> PendingTransition | None:
        return self._pending

    @property
    def is_transitioning(self) -> bool:
        self.poll()
        return self._pending is not None

    @property
    def effect(self) -> str:
        return self.store.settings.transition.transition_type

    def remaining_seconds(self) -> float:
        if self._pending is None:
            return 0.0
        elapsed = self.clock() - self._pending.started_at
        return max(0.0, self._pending.duration_sec - elapsed)

    def request_change(self, target: int) -> bool:
        self.poll()
        bounded = max(0, min(int(target), self.store.slide_count - 1))
        if bounded == self.store.current_index:
            if self._pending is not None:
                logger.debug("transition_cancelled target=%d", self._pending.target)
            self._pending = None
            return False

        transition = self.store.settings.transition
        self._pending = PendingTransition(
            source=self.store.current_index,
            target=bounded,
            effect=transition.transition_type,
            started_at=self.clock(),
            duration_sec=transition.transition_speed / 1000.0,
        )
        logger.debug(
            "transition_started effect=%s source=%d target=%d duration_ms=%d",
            transition.transition_type,
            self._pending.source,
            bounded,
            transition.transition_speed,
        )
        return True

    def next(self) -> bool:
        base = self._pending.target if self._pending is not None else self.store.current_index
        if base >= self.store.slide_count - 1:
            return False
        return self.request_change(base + 1)

    def prev(self) -> bool:
        base = self._pending.target if self._pending is not None else self.store.current_index
        if base <= 0:
            return False
        return self.request_change(base - 1)

    def poll(self) -> bool:
        pending = self._pending
        if pending is None or not pending.is_due(self.clock()):
            return False
        self._pending = None
        self.store.go_to(pending.target)
        return True

    async def settle(self) -> int:
        while self._pending is not None:
            await asyncio.sleep(self.remaining_seconds())
            self.poll()
        return self.store.current_index
