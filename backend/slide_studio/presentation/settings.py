"""Presenter settings records and the partial-merge rules used to update them.

Every settings type is a pydantic model that serializes with camelCase keys,
which is the shape the browser client stores and sends. Updates are never
applied in place: :func:`apply_patch` takes the current record plus a partial
mapping and returns a new validated record in which only the patched leaves
changed.
"""

from __future__ import annotations

from typing import Any, Literal, TypeVar, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TransitionType = Literal["fade", "slide", "zoom", "flip", "rotate"]
AnimationPreset = Literal["default", "dynamic", "formal", "subtle", "attention"]
HighlightToolType = Literal["marker", "zoom", "curtain"]
HighlightMode = Literal["temporary", "permanent"]
QuestionType = Literal["multiple", "truefalse", "short"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransitionSettings(CamelModel):
    transition_type: TransitionType = "fade"
    transition_speed: int = Field(default=500, ge=300, le=2000)
    enable_element_animations: bool = True
    animate_items: bool = True
    animate_text: bool = False
    animate_images: bool = True
    animation_delay: int = Field(default=200, ge=0, le=1000)
    preset: AnimationPreset = "default"


class HighlightSettings(CamelModel):
    active_tool_type: HighlightToolType = "marker"
    mode: HighlightMode = "temporary"
    color: str = "#ef4444"
    size: int = Field(default=20, ge=1, le=200)
    temporary_duration: float = Field(default=5, gt=0)


class TimerSettings(CamelModel):
    total_time: float = Field(default=30, gt=0)
    slide_specific_times: dict[int, float] = Field(default_factory=dict)
    is_timer_visible: bool = False
    show_alerts: bool = True


class QuestionTypes(CamelModel):
    multiple: bool = True
    truefalse: bool = True
    short: bool = True


class QuizSettings(CamelModel):
    auto_generate: bool = True
    question_types: QuestionTypes = Field(default_factory=QuestionTypes)
    question_count: int = Field(default=3, ge=1, le=30)


class NoteMarker(CamelModel):
    id: str
    x: float = 50
    y: float = 50
    color: str = "#ef4444"
    text: str = "Key point"


class TeacherNote(CamelModel):
    content: str = ""
    markers: list[NoteMarker] = Field(default_factory=list)


class PresentationSettings(CamelModel):
    theme_id: str = "clean"
    transition: TransitionSettings = Field(default_factory=TransitionSettings)
    highlight: HighlightSettings = Field(default_factory=HighlightSettings)
    timer: TimerSettings = Field(default_factory=TimerSettings)
    quiz: QuizSettings = Field(default_factory=QuizSettings)
    notes: dict[int, TeacherNote] = Field(default_factory=dict)


TRANSITION_PRESETS: dict[str, dict[str, Any]] = {
    "default": {
        "transition_type": "fade",
        "transition_speed": 500,
        "enable_element_animations": True,
        "animate_items": True,
        "animate_text": False,
        "animate_images": True,
        "animation_delay": 200,
    },
    "dynamic": {
        "transition_type": "slide",
        "transition_speed": 400,
        "enable_element_animations": True,
        "animate_items": True,
        "animate_text": True,
        "animate_images": True,
        "animation_delay": 100,
    },
    "formal": {
        "transition_type": "fade",
        "transition_speed": 800,
        "enable_element_animations": False,
        "animate_items": False,
        "animate_text": False,
        "animate_images": False,
        "animation_delay": 0,
    },
    "subtle": {
        "transition_type": "fade",
        "transition_speed": 1000,
        "enable_element_animations": True,
        "animate_items": False,
        "animate_text": False,
        "animate_images": True,
        "animation_delay": 300,
    },
    "attention": {
        "transition_type": "zoom",
        "transition_speed": 600,
        "enable_element_animations": True,
        "animate_items": True,
        "animate_text": True,
        "animate_images": True,
        "animation_delay": 150,
    },
}


M = TypeVar("M", bound=BaseModel)


def _field_lookup(model_cls: type[BaseModel]) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        lookup[name] = name
        lookup[to_camel(name)] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _map_value_model(annotation: Any) -> type[BaseModel] | None:
    if get_origin(annotation) is not dict:
        return None
    args = get_args(annotation)
    return _nested_model(args[1]) if len(args) == 2 else None


def _merge_into(model_cls: type[BaseModel], data: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    lookup = _field_lookup(model_cls)
    merged = dict(data)
    for key, value in patch.items():
        name = lookup.get(str(key))
        if name is None:
            raise ValueError(f"Unknown setting for {model_cls.__name__}: {key}")

        nested = _nested_model(model_cls.model_fields[name].annotation)
        current = merged.get(name)
        if nested is not None and isinstance(value, dict):
            merged[name] = _merge_into(nested, current or {}, value)
        elif isinstance(current, dict) and isinstance(value, dict):
            # keyed maps (per-slide times, notes) merge entry by entry; None removes an entry
            entries = {str(k): v for k, v in current.items()}
            entry_model = _map_value_model(model_cls.model_fields[name].annotation)
            for entry_key, entry_value in value.items():
                if entry_value is None:
                    entries.pop(str(entry_key), None)
                elif entry_model is not None and isinstance(entry_value, dict):
                    entries[str(entry_key)] = _merge_into(entry_model, entries.get(str(entry_key)) or {}, entry_value)
                else:
                    entries[str(entry_key)] = entry_value
            merged[name] = entries
        else:
            merged[name] = value
    return merged


def apply_patch(current: M, patch: dict[str, Any] | BaseModel) -> M:
    if isinstance(patch, BaseModel):
        patch = patch.model_dump(exclude_unset=True)
    data = current.model_dump(mode="json")
    return type(current).model_validate(_merge_into(type(current), data, patch))


def apply_transition_preset(current: TransitionSettings, preset: str) -> TransitionSettings:
    if preset not in TRANSITION_PRESETS:
        raise ValueError(f"Unknown transition preset: {preset}")
    return apply_patch(current, {"preset": preset, **TRANSITION_PRESETS[preset]})


def out_of_range_slide_keys(settings: PresentationSettings, slide_count: int) -> dict[str, list[int]]:
    invalid: dict[str, list[int]] = {}
    timer_keys = sorted(k for k in settings.timer.slide_specific_times if not 0 <= k < slide_count)
    note_keys = sorted(k for k in settings.notes if not 0 <= k < slide_count)
    if timer_keys:
        invalid["timer.slideSpecificTimes"] = timer_keys
    if note_keys:
        invalid["notes"] = note_keys
    return invalid


def validate_slide_keys(settings: PresentationSettings, slide_count: int) -> None:
    invalid = out_of_range_slide_keys(settings, slide_count)
    if invalid:
        details = ", ".join(f"{field}={keys}" for field, keys in invalid.items())
        raise ValueError(f"Slide index keys must be within [0, {slide_count}): {details}")


def prune_slide_keys(settings: PresentationSettings, slide_count: int) -> PresentationSettings:
    return settings.model_copy(
        update={
            "timer": settings.timer.model_copy(
                update={
                    "slide_specific_times": {
                        k: v for k, v in settings.timer.slide_specific_times.items() if 0 <= k < slide_count
                    }
                }
            ),
            "notes": {k: v for k, v in settings.notes.items() if 0 <= k < slide_count},
        }
    )
