from __future__ import annotations

import threading

import pytest

from qve.models import ChapterMetadata
from qve.provider import ProviderError

FATIHA = ChapterMetadata(
    number=1,
    native_name="سُورَةُ ٱلْفَاتِحَةِ",
    latin_name="Al-Faatiha",
    verse_count=7,
    latin_translation="The Opening",
    revelation_type="Meccan",
)
BAQARA = ChapterMetadata(
    number=2,
    native_name="سُورَةُ البَقَرَةِ",
    latin_name="Al-Baqara",
    verse_count=286,
    latin_translation="The Cow",
    revelation_type="Medinan",
)


class FakeProvider:
    """In-memory provider. ``blockers`` maps (chapter, verse) to an event the fetch waits on."""

    def __init__(self, chapters=(FATIHA, BAQARA)) -> None:
        self.chapters = list(chapters)
        self.failures: set[tuple[str, int, int]] = set()
        self.blockers: dict[tuple[int, int], threading.Event] = {}
        self.chapter_calls = 0
        self.calls: list[tuple[str, int, int]] = []
        self.completed: list[tuple[str, int, int]] = []
        self.closed = False
        self._lock = threading.Lock()

    def list_chapters(self) -> list[ChapterMetadata]:
        with self._lock:
            self.chapter_calls += 1
        return list(self.chapters)

    def _fetch(self, kind: str, chapter: int, verse: int) -> str:
        with self._lock:
            self.calls.append((kind, chapter, verse))
        blocker = self.blockers.get((chapter, verse))
        if blocker is not None:
            blocker.wait(5)
        if (kind, chapter, verse) in self.failures:
            raise ProviderError(f"{kind} {chapter}:{verse} failed")
        with self._lock:
            self.completed.append((kind, chapter, verse))
        return f"{kind} {chapter}:{verse}"

    def fetch_original(self, chapter: int, verse: int) -> str:
        return self._fetch("original", chapter, verse)

    def fetch_translation(self, chapter: int, verse: int) -> str:
        return self._fetch("translation", chapter, verse)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
