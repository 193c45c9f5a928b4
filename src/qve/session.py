from __future__ import annotations

import threading
from dataclasses import dataclass

from .acquisition import FetchFailedError, fetch_range, load_chapter
from .layout import CardLayout, build_card_layout
from .logging_utils import debug_log
from .models import DEFAULT_STYLE, CardStyle, ChapterMetadata, VerseRecord, VerseSelection, apply_style_changes
from .provider import ChapterCatalog, VerseProvider
from .ranges import ResolvedRange, VerseRangeError, resolve_selection


@dataclass(frozen=True, slots=True)
class PreviewState:
    generation: int
    selection: VerseSelection | None
    chapter: ChapterMetadata | None = None
    resolved: ResolvedRange | None = None
    verses: tuple[VerseRecord, ...] = ()
    loading: bool = False
    error: str | None = None


class PreviewSession:
    """
    Live preview state for one card: the current style, the current selection
    and the verses loaded for it.

    Every call to :meth:`select` starts a new generation. Loads that finish after
    a newer selection was made are dropped instead of overwriting newer state.
    """

    def __init__(
        self,
        provider: VerseProvider,
        *,
        catalog: ChapterCatalog | None = None,
        style: CardStyle = DEFAULT_STYLE,
        direction: str = "ltr",
    ) -> None:
        self._provider = provider
        self._catalog = catalog or ChapterCatalog(provider)
        self._lock = threading.Lock()
        self._style = style
        self.direction = direction
        self._state = PreviewState(generation=0, selection=None, loading=True)
        self._settled = threading.Event()
        self._settled.set()

    @property
    def style(self) -> CardStyle:
        with self._lock:
            return self._style

    @property
    def state(self) -> PreviewState:
        with self._lock:
            return self._state

    def update_style(self, **changes: object) -> CardStyle:
        with self._lock:
            self._style = apply_style_changes(self._style, **changes)
            return self._style

    def _publish(self, state: PreviewState) -> bool:
        with self._lock:
            if state.generation != self._state.generation:
                debug_log(
                    f"Discarding stale load for generation {state.generation} "
                    f"(current {self._state.generation})"
                )
                return False
            self._state = state
            self._settled.set()
            return True

    def select(self, selection: VerseSelection) -> int:
        """Start loading ``selection`` and return its generation number."""
        with self._lock:
            generation = self._state.generation + 1
            self._state = PreviewState(generation=generation, selection=selection, loading=True)
            self._settled.clear()

        worker = threading.Thread(
            target=self._load,
            args=(generation, selection),
            name=f"qve-preview-{generation}",
            daemon=True,
        )
        worker.start()
        return generation

    def _load(self, generation: int, selection: VerseSelection) -> None:
        chapter: ChapterMetadata | None = None
        resolved: ResolvedRange | None = None
        try:
            chapter = load_chapter(self._catalog, selection.chapter)
            resolved = resolve_selection(selection, chapter)
            verses = fetch_range(self._provider, resolved.chapter, resolved.start, resolved.end)
        except VerseRangeError as exc:
            self._publish(
                PreviewState(generation=generation, selection=selection, chapter=chapter, error=str(exc))
            )
            return
        except FetchFailedError as exc:
            debug_log(f"Preview load failed: {exc}")
            self._publish(
                PreviewState(
                    generation=generation,
                    selection=selection,
                    chapter=chapter,
                    resolved=resolved,
                    error="Failed to load verses",
                )
            )
            return
        except Exception:
            self._publish(
                PreviewState(generation=generation, selection=selection, chapter=chapter, error="Failed to load verses")
            )
            raise
        self._publish(
            PreviewState(
                generation=generation,
                selection=selection,
                chapter=chapter,
                resolved=resolved,
                verses=tuple(verses),
            )
        )

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current selection has loaded or failed."""
        return self._settled.wait(timeout)

    def layout(self) -> CardLayout:
        with self._lock:
            state = self._state
            style = self._style
        effective = state.resolved.selection if state.resolved else state.selection
        return build_card_layout(
            state.verses,
            state.chapter,
            effective,
            style,
            self.direction,
            loading=state.loading,
            error=state.error,
        )


__all__ = ["PreviewState", "PreviewSession"]
