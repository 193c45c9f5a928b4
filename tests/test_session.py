from __future__ import annotations

import threading

from qve.models import VerseSelection
from qve.session import PreviewSession


def _join(name: str, timeout: float = 5) -> None:
    for thread in threading.enumerate():
        if thread.name == name:
            thread.join(timeout)


def test_initial_state_is_loading(provider) -> None:
    session = PreviewSession(provider)
    assert session.state.loading is True
    assert session.layout().state == "loading"


def test_select_loads_verses(provider) -> None:
    session = PreviewSession(provider)
    generation = session.select(VerseSelection(1, 1, 3))
    assert generation == 1
    assert session.wait(5)

    state = session.state
    assert state.loading is False
    assert state.error is None
    assert [verse.index for verse in state.verses] == [1, 2, 3]
    layout = session.layout()
    assert layout.state == "verses"
    assert layout.badge == "Al-Faatiha (1:1-3)"


def test_long_selection_is_truncated(provider) -> None:
    session = PreviewSession(provider)
    session.select(VerseSelection(2, 1, 45))
    assert session.wait(5)
    state = session.state
    assert state.resolved is not None and state.resolved.truncated
    assert len(state.verses) == 30
    assert session.layout().badge == "Al-Baqara (2:1-30)"


def test_stale_load_does_not_overwrite_newer_selection(provider) -> None:
    release = threading.Event()
    provider.blockers[(1, 1)] = release
    session = PreviewSession(provider)

    session.select(VerseSelection(1, 1, 1))
    session.select(VerseSelection(2, 255, 255))
    assert session.wait(5)
    assert [verse.index for verse in session.state.verses] == [255]

    release.set()
    _join("qve-preview-1")

    state = session.state
    assert state.generation == 2
    assert state.selection == VerseSelection(2, 255, 255)
    assert [verse.index for verse in state.verses] == [255]
    assert session.layout().badge == "Al-Baqara (2:255)"


def test_out_of_range_selection_publishes_error(provider) -> None:
    session = PreviewSession(provider)
    session.select(VerseSelection(1, 1, 999))
    assert session.wait(5)
    layout = session.layout()
    assert layout.state == "error"
    assert layout.message == "Ayah 999 does not exist in Al-Faatiha"
    assert provider.calls == []


def test_failed_fetch_publishes_generic_error(provider) -> None:
    provider.failures.add(("translation", 1, 2))
    session = PreviewSession(provider)
    session.select(VerseSelection(1, 1, 3))
    assert session.wait(5)
    assert session.state.error == "Failed to load verses"
    assert session.layout().state == "error"


def test_style_updates_go_through_reducer(provider) -> None:
    session = PreviewSession(provider)
    session.select(VerseSelection(1, 1, 1))
    assert session.wait(5)

    session.update_style(use_custom_text=True, custom_text="نص")
    assert session.style.show_reference is False
    layout = session.layout()
    assert layout.state == "custom"
    assert layout.badge is None

    session.update_style(use_custom_text=False, show_reference=True)
    assert session.layout().badge == "Al-Faatiha (1:1)"
