import pytest

from slide_studio.presentation.notes import add_marker, note_for, remove_marker, save_note
from slide_studio.presentation.session import PresenterSession
from slide_studio.presentation.state import PresentationStore


def test_save_note_keeps_other_slides():
    notes = save_note({}, 0, "intro", slide_count=3)
    notes = save_note(notes, 2, "wrap up", slide_count=3)
    notes = save_note(notes, 0, "intro v2", slide_count=3)

    assert note_for(notes, 0).content == "intro v2"
    assert note_for(notes, 2).content == "wrap up"
    assert note_for(notes, 1).content == ""


def test_markers_add_and_remove():
    notes, first = add_marker({}, 1, 2, x=10, y=90, text="look here")
    notes, second = add_marker(notes, 1, 2)
    assert [m.id for m in notes[1].markers] == [first.id, second.id]

    notes = remove_marker(notes, 1, first.id, 2)
    assert [m.id for m in notes[1].markers] == [second.id]


def test_note_index_is_validated():
    with pytest.raises(ValueError):
        save_note({}, 3, "nope", slide_count=3)
    with pytest.raises(ValueError):
        add_marker({}, -1, 3)


def test_session_resets_timer_and_highlights_on_slide_change(clock):
    store = PresentationStore("# A\na\n# B\nb")
    store.update_settings({"timer": {"totalTime": 4, "slideSpecificTimes": {"1": 3}}})
    session = PresenterSession(store, clock=clock)

    session.timer.start()
    session.highlight((5, 5))
    clock.advance(30)
    assert session.timer.remaining() == 90

    session.transitions.next()
    clock.advance(1)
    session.tick()

    assert store.current_index == 1
    assert session.timer.remaining() == 180
    assert not session.timer.is_running
    assert session.highlights.items == []
    session.close()


def test_session_timer_follows_settings_change(clock):
    store = PresentationStore("# A\na\n# B\nb")
    session = PresenterSession(store, clock=clock)
    session.timer.start()

    session.update_settings({"timer": {"totalTime": 10}})

    assert not session.timer.is_running
    assert session.timer.remaining() == 300


def test_session_tick_expires_highlights(clock):
    session = PresenterSession(PresentationStore("# A\na"), clock=clock)
    item = session.highlight()
    clock.advance(5)
    session.tick()
    assert not item.visible
