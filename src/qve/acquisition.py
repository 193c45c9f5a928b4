from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from .defaults import MAX_VERSES_LIMIT
from .logging_utils import debug_log
from .models import ChapterMetadata, VerseRecord
from .provider import ChapterCatalog, ProviderError, ProviderUnavailableError, VerseProvider

_FETCH_ERRORS = (ProviderError, ProviderUnavailableError)


class FetchFailedError(RuntimeError):
    """Raised when any part of a verse range could not be fetched."""


def load_chapter(catalog: ChapterCatalog, number: int) -> ChapterMetadata:
    try:
        chapter = catalog.get(number)
    except _FETCH_ERRORS as exc:
        raise FetchFailedError("Failed to load chapter list") from exc
    if chapter is None:
        raise FetchFailedError(f"Surah {number} not found")
    return chapter


def _check_bounds(start: int, end: int) -> None:
    if start < 1:
        raise ValueError(f"Verse range must start at 1 or later, got {start}.")
    if end < start:
        raise ValueError(f"Verse range end {end} precedes start {start}.")
    if end - start + 1 > MAX_VERSES_LIMIT:
        raise ValueError(
            f"Verse range {start}-{end} exceeds the {MAX_VERSES_LIMIT}-verse limit."
        )


def _record_from_futures(
    index: int,
    original: Future[str],
    translation: Future[str],
) -> VerseRecord:
    return VerseRecord(
        index=index,
        original_text=original.result(),
        translation_text=translation.result(),
    )


def fetch_verse(provider: VerseProvider, chapter: int, index: int) -> VerseRecord:
    """Fetch the original text and translation of one verse concurrently."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        original = executor.submit(provider.fetch_original, chapter, index)
        translation = executor.submit(provider.fetch_translation, chapter, index)
        try:
            return _record_from_futures(index, original, translation)
        except _FETCH_ERRORS as exc:
            raise FetchFailedError(f"Failed to load verse {chapter}:{index}") from exc


def fetch_range(
    provider: VerseProvider,
    chapter: int,
    start: int,
    end: int,
) -> list[VerseRecord]:
    """
    Fetch verses ``start..end`` of ``chapter`` and return them in verse order.

    Every sub-fetch is issued up front. The first failure fails the whole range;
    requests still in flight are left to finish and their results are dropped.
    """
    _check_bounds(start, end)
    indices = list(range(start, end + 1))
    executor = ThreadPoolExecutor(max_workers=len(indices) * 2)
    pending: dict[int, tuple[Future[str], Future[str]]] = {}
    try:
        for index in indices:
            pending[index] = (
                executor.submit(provider.fetch_original, chapter, index),
                executor.submit(provider.fetch_translation, chapter, index),
            )
        futures = [future for pair in pending.values() for future in pair]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is None:
                continue
            debug_log(
                f"Range {chapter}:{start}-{end} failed; discarding {len(not_done)} in-flight fetches"
            )
            if isinstance(exc, _FETCH_ERRORS):
                raise FetchFailedError(f"Failed to load verses {chapter}:{start}-{end}") from exc
            raise exc
    finally:
        executor.shutdown(wait=False)

    # Completion order is arbitrary; reassemble by position.
    return [_record_from_futures(index, *pending[index]) for index in indices]


__all__ = ["FetchFailedError", "load_chapter", "fetch_verse", "fetch_range"]
