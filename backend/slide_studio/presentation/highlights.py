from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable
from uuid import uuid4

from slide_studio.presentation.settings import HighlightSettings, HighlightToolType


logger = logging.getLogger("slide_studio.presentation")


@dataclass
class HighlightInstance:
    id: str
    type: HighlightToolType
    settings: HighlightSettings
    position: tuple[float, float]
    created_at: float
    visible: bool = True
    expires_at: float | None = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "settings": self.settings.model_dump(by_alias=True),
            "position": {"x": self.position[0], "y": self.position[1]},
            "visible": self.visible,
            "expiresAt": self.expires_at,
        }


@dataclass
class HighlightTracker:
    clock: Callable[[], float] = time.monotonic
    items: list[HighlightInstance] = field(default_factory=list)

    def add(
        self,
        settings: HighlightSettings,
        position: tuple[float, float] = (50.0, 50.0),
        tool_type: HighlightToolType | None = None,
    ) -> HighlightInstance:
        now = self.clock()
        expires_at = now + settings.temporary_duration if settings.mode == "temporary" else None
        item = HighlightInstance(
            id=f"highlight-{uuid4().hex[:10]}",
            type=tool_type or settings.active_tool_type,
            settings=settings.model_copy(deep=True),
            position=position,
            created_at=now,
            expires_at=expires_at,
        )
        self.items.append(item)
        return item

    def expire(self, now: float | None = None) -> list[str]:
        current = self.clock() if now is None else now
        hidden: list[str] = []
        for item in self.items:
            if not item.visible or item.expires_at is None:
                continue
            if current >= item.expires_at:
                item.visible = False
                hidden.append(item.id)
        if hidden:
            logger.debug("highlights_expired count=%d", len(hidden))
        return hidden

    def visible(self) -> list[HighlightInstance]:
        return [item for item in self.items if item.visible]

    def clear(self) -> None:
        self.items.clear()

    async def watch(self, stop: asyncio.Event, interval: float = 1.0) -> None:
        while not stop.is_set():
            self.expire()
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
