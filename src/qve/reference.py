from __future__ import annotations

import html
import re
from typing import Iterable, Mapping
from urllib.parse import parse_qsl, quote, quote_plus, unquote, urlsplit

from .defaults import CHAPTER_COUNT
from .models import DEFAULT_STYLE, CardStyle, VerseSelection, parse_hex_color

EMBED_PATH_PREFIX = "/embed"
_DIGITS_RE = re.compile(r"^[0-9]+$")

# Query keys, in wire order.
_COLOR_KEYS = (("color", "accent_color"), ("bg", "background_color"), ("text", "text_color"))
_BOOL_KEYS = (
    ("translation", "show_translation"),
    ("reference", "show_reference"),
    ("verseNumbers", "show_verse_numbers"),
    ("accentLine", "show_accent_line"),
)


class MalformedReferenceError(ValueError):
    """Raised when an embed reference cannot be parsed into a selection."""


def _encode_uri_component(value: str) -> str:
    return quote(value, safe="!~*'()")


def _form_quote(value: str) -> str:
    # application/x-www-form-urlencoded as produced by URLSearchParams.
    return quote_plus(value, safe="*").replace("~", "%7E")


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def encode_query(style: CardStyle) -> dict[str, str]:
    """Flatten ``style`` into the embed reference's query mapping."""
    params: dict[str, str] = {}
    for key, field_name in _COLOR_KEYS:
        params[key] = getattr(style, field_name).lstrip("#")
    params["theme"] = style.theme
    for key, field_name in _BOOL_KEYS:
        params[key] = _bool_text(getattr(style, field_name))
    params["transparentBg"] = _bool_text(style.transparent_background)
    if style.use_custom_text and style.custom_text:
        params["custom"] = "true"
        params["customText"] = _encode_uri_component(style.custom_text)
    return params


def embed_path(selection: VerseSelection) -> str:
    return f"{EMBED_PATH_PREFIX}/{selection.chapter}/{selection.verse_span}"


def encode_reference(base_address: str, selection: VerseSelection, style: CardStyle) -> str:
    """
    Serialize a selection and style into an embed URL.

    Single verses use ``/embed/<chapter>/<verse>``, ranges ``/embed/<chapter>/<from>-<to>``.
    """
    query = "&".join(
        f"{_form_quote(key)}={_form_quote(value)}" for key, value in encode_query(style).items()
    )
    return f"{base_address.rstrip('/')}{embed_path(selection)}?{query}"


def _parse_int(segment: str) -> int | None:
    text = segment.strip()
    if not _DIGITS_RE.match(text):
        return None
    return int(text)


def _parse_selection(chapter_segment: str, verse_segment: str) -> VerseSelection:
    chapter = _parse_int(chapter_segment)
    if chapter is None or not 1 <= chapter <= CHAPTER_COUNT:
        raise MalformedReferenceError(f"Invalid surah number: {chapter_segment!r}")
    if "-" in verse_segment:
        first, _, last = verse_segment.partition("-")
        from_verse = _parse_int(first)
        to_verse = _parse_int(last)
    else:
        from_verse = to_verse = _parse_int(verse_segment)
    if from_verse is None or to_verse is None:
        raise MalformedReferenceError(f"Invalid ayah number: {verse_segment!r}")
    if from_verse < 1:
        raise MalformedReferenceError(f"Ayah numbers start at 1, got {from_verse}")
    if to_verse < from_verse:
        raise MalformedReferenceError(f"Ayah range {from_verse}-{to_verse} is reversed")
    return VerseSelection(chapter=chapter, from_verse=from_verse, to_verse=to_verse)


def decode_style(query: Mapping[str, str]) -> CardStyle:
    """Rebuild a style from query values; absent keys take the fresh defaults."""
    values: dict[str, object] = {}
    for key, field_name in _COLOR_KEYS:
        raw = query.get(key)
        color = parse_hex_color(raw) if raw else None
        values[field_name] = color or getattr(DEFAULT_STYLE, field_name)
    values["theme"] = "light" if query.get("theme") == "light" else "dark"
    for key, field_name in _BOOL_KEYS:
        raw = query.get(key)
        values[field_name] = getattr(DEFAULT_STYLE, field_name) if raw is None else raw != "false"
    raw_transparent = query.get("transparentBg")
    values["transparent_background"] = (
        DEFAULT_STYLE.transparent_background if raw_transparent is None else raw_transparent == "true"
    )
    values["use_custom_text"] = query.get("custom") == "true"
    custom_text = query.get("customText")
    values["custom_text"] = unquote(custom_text) if custom_text else ""
    if values["use_custom_text"]:
        # Custom text has no chapter/verse address to cite.
        values["show_reference"] = False
    return CardStyle(**values)  # type: ignore[arg-type]


def first_values(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse repeated query keys; the first occurrence wins."""
    query: dict[str, str] = {}
    for key, value in pairs:
        query.setdefault(key, value)
    return query


def decode_parts(
    chapter_segment: str,
    verse_segment: str,
    query: Mapping[str, str],
) -> tuple[VerseSelection, CardStyle]:
    return _parse_selection(chapter_segment, verse_segment), decode_style(query)


def decode_reference(reference: str) -> tuple[VerseSelection, CardStyle]:
    """Parse an embed URL (absolute or path-only) back into selection and style."""
    parts = urlsplit(reference.strip())
    segments = [unquote(segment) for segment in parts.path.split("/") if segment]
    if len(segments) < 2:
        raise MalformedReferenceError(f"Reference has no surah/ayah path: {reference!r}")
    query = first_values(parse_qsl(parts.query, keep_blank_values=True))
    return decode_parts(segments[-2], segments[-1], query)


def iframe_height(selection: VerseSelection) -> int:
    verse_count = selection.to_verse - selection.from_verse + 1
    return min(200 + verse_count * 150, 800)


def build_iframe_code(base_address: str, selection: VerseSelection, style: CardStyle) -> str:
    """Return the ``<iframe>`` snippet that embeds the reference renderer."""
    embed_url = encode_reference(base_address, selection, style)
    verse_label = f"{selection.chapter}:{selection.verse_span}"
    return f"""<iframe
  src="{html.escape(embed_url, quote=True)}"
  width="100%"
  height="{iframe_height(selection)}"
  frameborder="0"
  style="max-width: 700px; border: none; background: transparent;"
  title="Quranic Verse - Surah {verse_label}"
  loading="lazy"
></iframe>"""


__all__ = [
    "EMBED_PATH_PREFIX",
    "MalformedReferenceError",
    "encode_query",
    "embed_path",
    "encode_reference",
    "decode_style",
    "first_values",
    "decode_parts",
    "decode_reference",
    "iframe_height",
    "build_iframe_code",
]
