from __future__ import annotations

import threading
import time

import pytest

from qve.acquisition import FetchFailedError, fetch_range, fetch_verse, load_chapter
from qve.provider import ChapterCatalog, ProviderError, ProviderUnavailableError


def test_fetch_range_returns_verses_in_index_order(provider) -> None:
    verses = fetch_range(provider, 2, 5, 9)
    assert [verse.index for verse in verses] == [5, 6, 7, 8, 9]
    assert verses[0].original_text == "original 2:5"
    assert verses[0].translation_text == "translation 2:5"


def test_out_of_order_completion_is_reassembled_by_index(provider) -> None:
    release_first = threading.Event()
    provider.blockers[(1, 1)] = release_first

    def _release_after_third() -> None:
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            done = {item[2] for item in provider.completed}
            if {2, 3} <= done:
                release_first.set()
                return
            time.sleep(0.01)
        release_first.set()

    watcher = threading.Thread(target=_release_after_third)
    watcher.start()
    verses = fetch_range(provider, 1, 1, 3)
    watcher.join()

    completion = [item[2] for item in provider.completed]
    assert completion.index(3) < completion.index(1)
    assert [verse.index for verse in verses] == [1, 2, 3]


def test_all_sub_fetches_are_issued_up_front(provider) -> None:
    fetch_range(provider, 2, 1, 30)
    assert len(provider.calls) == 60
    assert {kind for kind, _, _ in provider.calls} == {"original", "translation"}


def test_single_failed_translation_fails_whole_range(provider) -> None:
    provider.failures.add(("translation", 1, 4))
    with pytest.raises(FetchFailedError) as excinfo:
        fetch_range(provider, 1, 1, 7)
    assert isinstance(excinfo.value.__cause__, ProviderError)


def test_transport_error_fails_range() -> None:
    class Offline:
        def fetch_original(self, chapter, verse):
            raise ProviderUnavailableError("offline")

        def fetch_translation(self, chapter, verse):
            return "t"

    with pytest.raises(FetchFailedError):
        fetch_range(Offline(), 1, 1, 2)


def test_failure_is_reported_without_waiting_for_siblings(provider) -> None:
    stalled = threading.Event()
    provider.blockers[(1, 2)] = stalled
    provider.failures.add(("original", 1, 5))
    try:
        with pytest.raises(FetchFailedError):
            fetch_range(provider, 1, 1, 5)
        assert not stalled.is_set()
        assert ("original", 1, 2) not in provider.completed
    finally:
        stalled.set()


@pytest.mark.parametrize("bounds", [(0, 3), (5, 4), (1, 31)])
def test_invalid_bounds_are_rejected(provider, bounds) -> None:
    with pytest.raises(ValueError):
        fetch_range(provider, 2, *bounds)
    assert provider.calls == []


def test_fetch_verse_pairs_text_and_translation(provider) -> None:
    verse = fetch_verse(provider, 2, 255)
    assert verse.index == 255
    assert verse.original_text == "original 2:255"
    assert verse.translation_text == "translation 2:255"


def test_fetch_verse_failure(provider) -> None:
    provider.failures.add(("original", 2, 255))
    with pytest.raises(FetchFailedError):
        fetch_verse(provider, 2, 255)


def test_load_chapter_uses_cached_catalog(provider) -> None:
    catalog = ChapterCatalog(provider)
    assert load_chapter(catalog, 1).latin_name == "Al-Faatiha"
    assert load_chapter(catalog, 2).verse_count == 286
    assert provider.chapter_calls == 1


def test_load_chapter_unknown_number(provider) -> None:
    with pytest.raises(FetchFailedError):
        load_chapter(ChapterCatalog(provider), 114)


def test_load_chapter_wraps_provider_errors() -> None:
    class Broken:
        def list_chapters(self):
            raise ProviderUnavailableError("down")

    with pytest.raises(FetchFailedError):
        load_chapter(ChapterCatalog(Broken()), 1)
