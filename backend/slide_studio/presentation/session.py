from __future__ import annotations

import time
from typing import Any, Callable

from slide_studio.presentation.highlights import HighlightTracker
from slide_studio.presentation.state import PresentationStore
from slide_studio.presentation.timer import SlideTimer
from slide_studio.presentation.transitions import TransitionEngine


class PresenterSession:
    """Wires the store to the transition engine, slide timer and highlights.

    Landing on a new slide resets the timer to that slide's budget and drops
    the previous slide's highlights.
    """

    def __init__(self, store: PresentationStore, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.transitions = TransitionEngine(store, clock=clock)
        self.highlights = HighlightTracker(clock=clock)
        self.timer = SlideTimer(
            store.settings.timer,
            store.slide_count,
            slide_index=store.current_index,
            clock=clock,
        )
        self._unsubscribe = store.subscribe(self._on_index_change)

    def _on_index_change(self, previous: int, current: int) -> None:
        self.timer.reset(current)
        self.highlights.clear()

    def update_settings(self, patch: dict[str, Any]) -> None:
        updated = self.store.update_settings(patch)
        if "timer" in patch:
            self.timer.reconfigure(updated.timer, self.store.slide_count)

    def highlight(self, position: tuple[float, float] = (50.0, 50.0)):
        return self.highlights.add(self.store.settings.highlight, position)

    def tick(self) -> None:
        self.transitions.poll()
        self.highlights.expire()

    def close(self) -> None:
        self._unsubscribe()
