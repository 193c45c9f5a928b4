from .acquisition import FetchFailedError, fetch_range, fetch_verse
from .card import render_card
from .layout import CardLayout, build_card_layout
from .markup import synthesize_static_html
from .models import (
    DEFAULT_STYLE,
    CardStyle,
    ChapterMetadata,
    VerseRecord,
    VerseSelection,
    apply_style_changes,
)
from .provider import AlQuranClient, ChapterCatalog, ProviderError, ProviderUnavailableError
from .ranges import ResolvedRange, VerseRangeError, resolve_selection
from .reference import MalformedReferenceError, decode_reference, encode_reference

__all__ = [
    "ChapterMetadata",
    "VerseRecord",
    "VerseSelection",
    "CardStyle",
    "DEFAULT_STYLE",
    "apply_style_changes",
    "ResolvedRange",
    "VerseRangeError",
    "resolve_selection",
    "AlQuranClient",
    "ChapterCatalog",
    "ProviderError",
    "ProviderUnavailableError",
    "FetchFailedError",
    "fetch_verse",
    "fetch_range",
    "MalformedReferenceError",
    "encode_reference",
    "decode_reference",
    "CardLayout",
    "build_card_layout",
    "synthesize_static_html",
    "render_card",
]
