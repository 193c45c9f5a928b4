from __future__ import annotations

import pytest

from qve.models import VerseSelection
from qve.ranges import VerseRangeError, resolve_selection

from conftest import BAQARA, FATIHA


def test_long_range_is_clamped_to_thirty_verses() -> None:
    resolved = resolve_selection(VerseSelection(2, 1, 45), BAQARA)
    assert (resolved.start, resolved.end) == (1, 30)
    assert resolved.count == 30
    assert resolved.requested_end == 45
    assert resolved.truncated is True
    assert resolved.selection == VerseSelection(2, 1, 30)


def test_exactly_thirty_verses_is_not_truncated() -> None:
    resolved = resolve_selection(VerseSelection(2, 10, 39), BAQARA)
    assert resolved.end == 39
    assert resolved.truncated is False


def test_single_verse() -> None:
    resolved = resolve_selection(VerseSelection(1, 7, 7), FATIHA)
    assert resolved.count == 1
    assert not resolved.truncated


def test_reversed_range_fails() -> None:
    with pytest.raises(VerseRangeError) as excinfo:
        resolve_selection(VerseSelection(2, 5, 3), BAQARA)
    assert "Al-Baqara" in str(excinfo.value)
    assert excinfo.value.verse == 5


def test_end_beyond_chapter_fails_with_offending_verse() -> None:
    with pytest.raises(VerseRangeError) as excinfo:
        resolve_selection(VerseSelection(1, 1, 999), FATIHA)
    assert str(excinfo.value) == "Ayah 999 does not exist in Al-Faatiha"
    assert excinfo.value.chapter == 1
    assert excinfo.value.verse == 999


def test_zero_start_fails() -> None:
    with pytest.raises(VerseRangeError):
        resolve_selection(VerseSelection(1, 0, 3), FATIHA)


def test_metadata_for_another_chapter_is_rejected() -> None:
    with pytest.raises(VerseRangeError):
        resolve_selection(VerseSelection(2, 1, 3), FATIHA)


def test_payload_reports_truncation() -> None:
    payload = resolve_selection(VerseSelection(2, 100, 200), BAQARA).as_payload()
    assert payload == {
        "chapter": 2,
        "from": 100,
        "to": 129,
        "requested_to": 200,
        "truncated": True,
    }
