import pytest
from pydantic import ValidationError

from slide_studio.presentation.settings import (
    PresentationSettings,
    QuizSettings,
    TimerSettings,
    TransitionSettings,
    apply_patch,
    apply_transition_preset,
    prune_slide_keys,
    validate_slide_keys,
)


def test_nested_toggle_leaves_siblings_untouched():
    current = QuizSettings()
    updated = apply_patch(current, {"questionTypes": {"multiple": False}})

    assert updated.question_types.model_dump() == {"multiple": False, "truefalse": True, "short": True}
    assert updated.question_count == current.question_count
    assert updated.auto_generate == current.auto_generate
    assert current.question_types.multiple is True


def test_patch_accepts_field_names_and_aliases():
    current = PresentationSettings()
    updated = apply_patch(current, {"theme_id": "dark", "transition": {"transitionSpeed": 900}})

    assert updated.theme_id == "dark"
    assert updated.transition.transition_speed == 900
    assert updated.transition.transition_type == "fade"
    assert updated.highlight == current.highlight


def test_keyed_maps_merge_entry_by_entry():
    current = TimerSettings(slide_specific_times={0: 2, 1: 3})
    updated = apply_patch(current, {"slideSpecificTimes": {"1": 5, "2": 1}})
    assert updated.slide_specific_times == {0: 2, 1: 5, 2: 1}

    removed = apply_patch(updated, {"slideSpecificTimes": {"0": None}})
    assert removed.slide_specific_times == {1: 5, 2: 1}


def test_unknown_setting_is_rejected():
    with pytest.raises(ValueError):
        apply_patch(TransitionSettings(), {"sparkles": True})


def test_invalid_value_is_rejected():
    with pytest.raises(ValidationError):
        apply_patch(TransitionSettings(), {"transitionType": "spin"})


def test_preset_expands_to_fixed_values():
    updated = apply_transition_preset(TransitionSettings(), "attention")
    assert updated.preset == "attention"
    assert updated.transition_type == "zoom"
    assert updated.transition_speed == 600
    assert updated.animation_delay == 150


def test_unknown_preset():
    with pytest.raises(ValueError):
        apply_transition_preset(TransitionSettings(), "wild")


def test_slide_keys_outside_range_are_reported():
    settings = apply_patch(
        PresentationSettings(),
        {"timer": {"slideSpecificTimes": {"4": 2}}, "notes": {"0": {"content": "hi"}}},
    )
    validate_slide_keys(settings, 5)
    with pytest.raises(ValueError, match="slideSpecificTimes"):
        validate_slide_keys(settings, 3)

    pruned = prune_slide_keys(settings, 3)
    assert pruned.timer.slide_specific_times == {}
    assert pruned.notes[0].content == "hi"


def test_serializes_with_camel_case_keys():
    dumped = PresentationSettings().model_dump(by_alias=True)
    assert "themeId" in dumped
    assert "transitionSpeed" in dumped["transition"]
    assert "questionTypes" in dumped["quiz"]


def test_note_content_patch_keeps_markers():
    current = apply_patch(
        PresentationSettings(),
        {"notes": {"0": {"content": "old", "markers": [{"id": "m1", "text": "Look"}]}}},
    )
    updated = apply_patch(current, {"notes": {"0": {"content": "new"}}})

    assert updated.notes[0].content == "new"
    assert [m.id for m in updated.notes[0].markers] == ["m1"]
    assert updated.notes[0].markers[0].text == "Look"


def test_note_entry_rejects_unknown_field():
    with pytest.raises(ValueError):
        apply_patch(PresentationSettings(), {"notes": {"0": {"sticker": "x"}}})
