from __future__ import annotations

from dataclasses import dataclass

from .defaults import MAX_VERSES_LIMIT
from .models import ChapterMetadata, VerseSelection


class VerseRangeError(ValueError):
    """Raised when a selection falls outside its chapter's verse bounds."""

    def __init__(self, message: str, *, chapter: int, verse: int) -> None:
        super().__init__(message)
        self.chapter = chapter
        self.verse = verse


@dataclass(frozen=True, slots=True)
class ResolvedRange:
    chapter: int
    start: int
    end: int
    requested_end: int

    @property
    def truncated(self) -> bool:
        """Advisory flag: the request exceeded the verse ceiling and was shortened."""
        return self.end < self.requested_end

    @property
    def count(self) -> int:
        return self.end - self.start + 1

    @property
    def selection(self) -> VerseSelection:
        return VerseSelection(chapter=self.chapter, from_verse=self.start, to_verse=self.end)

    def as_payload(self) -> dict[str, object]:
        return {
            "chapter": self.chapter,
            "from": self.start,
            "to": self.end,
            "requested_to": self.requested_end,
            "truncated": self.truncated,
        }


def clamp_end(start: int, end: int, limit: int = MAX_VERSES_LIMIT) -> int:
    return min(end, start + limit - 1)


def resolve_selection(
    selection: VerseSelection,
    chapter: ChapterMetadata,
    *,
    limit: int = MAX_VERSES_LIMIT,
) -> ResolvedRange:
    """
    Validate ``selection`` against ``chapter`` and clamp it to ``limit`` verses.

    Out-of-bounds selections raise :class:`VerseRangeError`. Ranges longer than
    ``limit`` are not an error: the end is pulled in and ``truncated`` is set.
    """
    if chapter.number != selection.chapter:
        raise VerseRangeError(
            f"Surah {selection.chapter} does not match metadata for {chapter.latin_name}",
            chapter=selection.chapter,
            verse=selection.from_verse,
        )
    start = selection.from_verse
    end = selection.to_verse
    if start < 1:
        raise VerseRangeError(
            f"Ayah {start} does not exist in {chapter.latin_name}",
            chapter=chapter.number,
            verse=start,
        )
    if end > chapter.verse_count:
        raise VerseRangeError(
            f"Ayah {end} does not exist in {chapter.latin_name}",
            chapter=chapter.number,
            verse=end,
        )
    if start > end:
        raise VerseRangeError(
            f"Ayah range {start}-{end} is reversed in {chapter.latin_name}",
            chapter=chapter.number,
            verse=start,
        )
    return ResolvedRange(
        chapter=chapter.number,
        start=start,
        end=clamp_end(start, end, limit),
        requested_end=end,
    )


__all__ = ["VerseRangeError", "ResolvedRange", "clamp_end", "resolve_selection"]
