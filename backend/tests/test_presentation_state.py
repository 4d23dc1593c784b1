import pytest

from slide_studio.presentation.settings import PresentationSettings
from slide_studio.presentation.state import PresentationStore
from slide_studio.storage import MemoryStore


DECK = "# One\na\n# Two\nb\n# Three\nc\n# Four\nd"


def test_next_never_passes_last_slide():
    store = PresentationStore(DECK)
    for _ in range(store.slide_count):
        store.next()
    assert store.current_index == store.slide_count - 1
    assert store.next() is False


def test_prev_at_first_slide_is_noop():
    store = PresentationStore(DECK)
    assert store.prev() is False
    assert store.current_index == 0


def test_go_to_clamps():
    store = PresentationStore(DECK)
    store.go_to(99)
    assert store.current_index == 3
    store.go_to(-5)
    assert store.current_index == 0


def test_observers_see_only_real_changes():
    store = PresentationStore(DECK)
    seen = []
    unsubscribe = store.subscribe(lambda prev, cur: seen.append((prev, cur)))

    store.next()
    store.prev()
    store.prev()
    unsubscribe()
    store.next()

    assert seen == [(0, 1), (1, 0)]


def test_settings_update_is_partial_and_validated():
    store = PresentationStore(DECK)
    store.update_settings({"quiz": {"questionTypes": {"short": False}}})
    assert store.settings.quiz.question_types.multiple is True
    assert store.settings.quiz.question_types.short is False

    with pytest.raises(ValueError):
        store.update_settings({"notes": {"7": {"content": "too far"}}})
    assert store.settings.notes == {}


def test_constructor_rejects_out_of_range_keys():
    settings = PresentationSettings.model_validate({"notes": {"9": {"content": "x"}}})
    with pytest.raises(ValueError):
        PresentationStore(DECK, settings)


def test_writes_through_and_reloads():
    kv = MemoryStore()
    store = PresentationStore(DECK, store=kv, key="deck-1")
    store.next()
    store.update_settings({"themeId": "nature", "notes": {"1": {"content": "remember"}}})

    loaded = PresentationStore.load(kv, "deck-1")
    assert loaded is not None
    assert loaded.current_index == 1
    assert loaded.settings.theme_id == "nature"
    assert loaded.settings.notes[1].content == "remember"
    assert loaded.slides == store.slides


def test_load_missing_key():
    assert PresentationStore.load(MemoryStore(), "nope") is None


def test_shorter_content_clamps_index_and_prunes_keys():
    store = PresentationStore(DECK)
    store.update_settings({"timer": {"slideSpecificTimes": {"3": 2}}})
    store.go_to(3)

    store.set_content("# Only\nslide")

    assert store.slide_count == 1
    assert store.current_index == 0
    assert store.settings.timer.slide_specific_times == {}


def test_preset_in_patch_expands_transition():
    store = PresentationStore(DECK)
    store.update_settings({"transition": {"preset": "formal"}})
    transition = store.settings.transition
    assert transition.preset == "formal"
    assert transition.transition_type == "fade"
    assert transition.transition_speed == 800
    assert transition.enable_element_animations is False
    assert store.current_slide.title == "One"
