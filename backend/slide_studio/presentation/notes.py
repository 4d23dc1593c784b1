from __future__ import annotations

from uuid import uuid4

from slide_studio.presentation.settings import NoteMarker, TeacherNote


NOTE_COLORS = ("#ef4444", "#f97316", "#22c55e", "#0ea5e9", "#8b5cf6")


def _check_index(slide_index: int, slide_count: int) -> None:
    if not 0 <= slide_index < slide_count:
        raise ValueError(f"Slide index {slide_index} is outside [0, {slide_count})")


def note_for(notes: dict[int, TeacherNote], slide_index: int) -> TeacherNote:
    return notes.get(slide_index) or TeacherNote()


def save_note(
    notes: dict[int, TeacherNote],
    slide_index: int,
    content: str,
    slide_count: int,
) -> dict[int, TeacherNote]:
    _check_index(slide_index, slide_count)
    current = note_for(notes, slide_index)
    return {**notes, slide_index: current.model_copy(update={"content": content})}


def add_marker(
    notes: dict[int, TeacherNote],
    slide_index: int,
    slide_count: int,
    *,
    x: float = 50,
    y: float = 50,
    color: str = NOTE_COLORS[0],
    text: str = "Key point",
) -> tuple[dict[int, TeacherNote], NoteMarker]:
    _check_index(slide_index, slide_count)
    marker = NoteMarker(id=f"marker-{uuid4().hex[:10]}", x=x, y=y, color=color, text=text)
    current = note_for(notes, slide_index)
    updated = current.model_copy(update={"markers": [*current.markers, marker]})
    return {**notes, slide_index: updated}, marker


def remove_marker(
    notes: dict[int, TeacherNote],
    slide_index: int,
    marker_id: str,
    slide_count: int,
) -> dict[int, TeacherNote]:
    _check_index(slide_index, slide_count)
    current = note_for(notes, slide_index)
    markers = [row for row in current.markers if row.id != marker_id]
    return {**notes, slide_index: current.model_copy(update={"markers": markers})}
