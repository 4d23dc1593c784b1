from __future__ import annotations

import math
import time
from typing import Callable

from slide_studio.presentation.settings import TimerSettings


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def slide_budget_seconds(settings: TimerSettings, slide_index: int, slide_count: int) -> int:
    minutes = settings.slide_specific_times.get(slide_index) or settings.total_time / max(1, slide_count)
    return math.floor(minutes * 60)


class SlideTimer:
    """Countdown for the slide on screen.

    The budget is the per-slide override in minutes, or an even share of the
    total time. Remaining time is derived from a monotonic clock rather than
    counted per tick, so a late poll never drifts.
    """

    def __init__(
        self,
        settings: TimerSettings,
        slide_count: int,
        slide_index: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.slide_count = max(1, slide_count)
        self.slide_index = slide_index
        self.clock = clock
        self._deadline: float | None = None
        self._remaining = float(self.budget)

    @property
    def budget(self) -> int:
        return slide_budget_seconds(self.settings, self.slide_index, self.slide_count)

    @property
    def is_running(self) -> bool:
        self._settle()
        return self._deadline is not None

    def _settle(self) -> None:
        if self._deadline is None:
            return
        left = self._deadline - self.clock()
        if left <= 0:
            self._deadline = None
            self._remaining = 0.0

    def remaining(self) -> int:
        self._settle()
        if self._deadline is None:
            return math.ceil(self._remaining)
        return math.ceil(self._deadline - self.clock())

    @property
    def show_warning(self) -> bool:
        if not self.settings.show_alerts:
            return False
        return self.remaining() <= math.floor(self.budget * 0.1)

    @property
    def is_finished(self) -> bool:
        return self.remaining() <= 0

    def start(self) -> None:
        self._settle()
        if self._deadline is not None or self._remaining <= 0:
            return
        self._deadline = self.clock() + self._remaining

    def pause(self) -> None:
        self._settle()
        if self._deadline is None:
            return
        self._remaining = max(0.0, self._deadline - self.clock())
        self._deadline = None

    def reset(self, slide_index: int | None = None) -> None:
        if slide_index is not None:
            self.slide_index = slide_index
        self._deadline = None
        self._remaining = float(self.budget)

    def set_slide_time(self, minutes: float) -> TimerSettings:
        times = dict(self.settings.slide_specific_times)
        times[self.slide_index] = minutes
        self.settings = self.settings.model_copy(update={"slide_specific_times": times})
        self.reset()
        return self.settings

    def reconfigure(self, settings: TimerSettings, slide_count: int | None = None) -> None:
        # the running countdown is dropped before the new budget applies
        self._deadline = None
        self.settings = settings
        if slide_count is not None:
            self.slide_count = max(1, slide_count)
        self._remaining = float(self.budget)
