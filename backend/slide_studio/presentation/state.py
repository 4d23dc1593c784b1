from __future__ import annotations

import logging
from typing import Any, Callable

from slide_studio.presentation.settings import (
    PresentationSettings,
    apply_patch,
    apply_transition_preset,
    out_of_range_slide_keys,
    prune_slide_keys,
    validate_slide_keys,
)
from slide_studio.services.slide_parser import Slide, parse_slides
from slide_studio.storage import KeyValueStore


logger = logging.getLogger("slide_studio.presentation")

IndexObserver = Callable[[int, int], None]


class PresentationStore:
    """Slides, the current slide index and presenter settings for one deck.

    Index changes are bounded (no wraparound) and reported to observers as
    ``(previous, current)``. When a persistence port is supplied every
    mutation is written through under ``key``.
    """

    def __init__(
        self,
        content: str = "",
        settings: PresentationSettings | None = None,
        *,
        store: KeyValueStore | None = None,
        key: str | None = None,
        current_index: int = 0,
    ):
        self._content = content
        self._slides = parse_slides(content)
        self._settings = settings or PresentationSettings()
        self._store = store
        self._key = key
        self._observers: list[IndexObserver] = []
        self._index = self._clamp(current_index)
        validate_slide_keys(self._settings, len(self._slides))

    @classmethod
    def load(cls, store: KeyValueStore, key: str) -> "PresentationStore | None":
        snapshot = store.get(key)
        if not isinstance(snapshot, dict):
            return None
        settings = PresentationSettings.model_validate(snapshot.get("settings") or {})
        content = str(snapshot.get("content") or "")
        slide_count = len(parse_slides(content))
        if out_of_range_slide_keys(settings, slide_count):
            logger.warning("presentation_load_pruned key=%s slide_count=%d", key, slide_count)
            settings = prune_slide_keys(settings, slide_count)
        return cls(
            content,
            settings,
            store=store,
            key=key,
            current_index=int(snapshot.get("current_index") or 0),
        )

    @property
    def content(self) -> str:
        return self._content

    @property
    def slides(self) -> list[Slide]:
        return list(self._slides)

    @property
    def slide_count(self) -> int:
        return len(self._slides)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_slide(self) -> Slide:
        return self._slides[self._index]

    @property
    def settings(self) -> PresentationSettings:
        return self._settings

    def subscribe(self, observer: IndexObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _clamp(self, index: int) -> int:
        return max(0, min(int(index), len(self._slides) - 1))

    def _set_index(self, index: int) -> bool:
        target = self._clamp(index)
        if target == self._index:
            return False
        previous = self._index
        self._index = target
        self.save()
        for observer in list(self._observers):
            observer(previous, target)
        return True

    def next(self) -> bool:
        return self._set_index(self._index + 1)

    def prev(self) -> bool:
        return self._set_index(self._index - 1)

    def go_to(self, index: int) -> bool:
        return self._set_index(index)

    def set_content(self, content: str) -> None:
        self._content = content
        self._slides = parse_slides(content)
        if out_of_range_slide_keys(self._settings, len(self._slides)):
            logger.info("presentation_settings_pruned slide_count=%d", len(self._slides))
            self._settings = prune_slide_keys(self._settings, len(self._slides))
        self._set_index(self._index)
        self.save()

    def update_settings(self, patch: dict[str, Any]) -> PresentationSettings:
        updated = apply_patch(self._settings, patch)
        transition_patch = patch.get("transition")
        if isinstance(transition_patch, dict) and transition_patch.get("preset"):
            # a named preset overrides the individual transition fields
            transition = apply_transition_preset(updated.transition, transition_patch["preset"])
            updated = updated.model_copy(update={"transition": transition})
        validate_slide_keys(updated, len(self._slides))
        self._settings = updated
        self.save()
        return updated

    def snapshot(self) -> dict[str, Any]:
        return {
            "content": self._content,
            "current_index": self._index,
            "settings": self._settings.model_dump(mode="json", by_alias=True),
        }

    def save(self) -> None:
        if self._store is None or self._key is None:
            return
        self._store.set(self._key, self.snapshot())
