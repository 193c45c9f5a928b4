"""
Renderer-neutral description of a verse card.

Both the static markup synthesizer and the live card renderer consume the
:class:`CardLayout` built here, so the decisions about what appears on a card
(verse blocks, custom text, reference badge, loading and error states) live in
one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .models import CardStyle, ChapterMetadata, VerseRecord, VerseSelection

OPEN_ORNATE = "﴿"
CLOSE_ORNATE = "﴾"
BADGE_ICON = "\U0001f4d6"
DIRECTIONS = ("ltr", "rtl")

_ARABIC_INDIC = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


def to_arabic_indic(value: int) -> str:
    return str(value).translate(_ARABIC_INDIC)


def color_brightness(hex_color: str) -> float:
    digits = hex_color.lstrip("#")
    red = int(digits[0:2], 16)
    green = int(digits[2:4], 16)
    blue = int(digits[4:6], 16)
    return (red * 299 + green * 587 + blue * 114) / 1000


def is_color_dark(hex_color: str) -> bool:
    return color_brightness(hex_color) < 128


def format_reference(
    chapter: ChapterMetadata,
    from_verse: int,
    to_verse: int,
    direction: str = "ltr",
) -> str:
    """Badge label: ``Al-Faatiha (1:1-3)`` left-to-right, ``الفاتحة (١-٣)`` right-to-left."""
    if direction == "rtl":
        if from_verse == to_verse:
            return f"{chapter.native_name} ({to_arabic_indic(from_verse)})"
        return f"{chapter.native_name} ({to_arabic_indic(from_verse)}-{to_arabic_indic(to_verse)})"
    if from_verse == to_verse:
        return f"{chapter.latin_name} ({chapter.number}:{from_verse})"
    return f"{chapter.latin_name} ({chapter.number}:{from_verse}-{to_verse})"


@dataclass(frozen=True, slots=True)
class VerseBlock:
    index: int
    text: str
    number_label: str | None
    translation: str | None
    translation_label: str | None
    separated: bool


@dataclass(frozen=True, slots=True)
class CardLayout:
    state: str
    accent_color: str
    background_color: str
    text_color: str
    transparent: bool
    accent_line: bool
    dark: bool
    verses: tuple[VerseBlock, ...] = ()
    custom_text: str | None = None
    badge: str | None = None
    message: str | None = None
    show_translation: bool = False
    show_reference: bool = False

    @property
    def background(self) -> str:
        return "transparent" if self.transparent else self.background_color


def _verse_blocks(verses: Sequence[VerseRecord], style: CardStyle) -> tuple[VerseBlock, ...]:
    ordered = sorted(verses, key=lambda verse: verse.index)
    last = len(ordered) - 1
    blocks: list[VerseBlock] = []
    for position, verse in enumerate(ordered):
        has_translation = style.show_translation and bool(verse.translation_text)
        blocks.append(
            VerseBlock(
                index=verse.index,
                text=verse.original_text,
                number_label=to_arabic_indic(verse.index) if style.show_verse_numbers else None,
                translation=verse.translation_text if has_translation else None,
                translation_label=(
                    f"({verse.index})" if has_translation and style.show_verse_numbers else None
                ),
                separated=has_translation and position < last,
            )
        )
    return tuple(blocks)


def build_card_layout(
    verses: Sequence[VerseRecord],
    chapter: ChapterMetadata | None,
    selection: VerseSelection | None,
    style: CardStyle,
    direction: str = "ltr",
    *,
    loading: bool = False,
    error: str | None = None,
) -> CardLayout:
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of: {', '.join(DIRECTIONS)}")
    base = dict(
        accent_color=style.accent_color,
        background_color=style.background_color,
        text_color=style.text_color,
        transparent=style.transparent_background,
        accent_line=style.show_accent_line,
        dark=is_color_dark(style.background_color),
        show_translation=style.show_translation,
        show_reference=style.reference_visible,
    )
    if error is not None:
        return CardLayout(state="error", message=error, **base)
    if loading:
        return CardLayout(state="loading", **base)
    if style.custom_mode:
        return CardLayout(state="custom", custom_text=style.custom_text, **base)

    blocks = _verse_blocks(verses, style)
    badge = None
    if style.reference_visible:
        if chapter is None:
            raise ValueError("Chapter metadata is required to render a reference badge.")
        if blocks:
            from_verse, to_verse = blocks[0].index, blocks[-1].index
        elif selection is not None:
            from_verse, to_verse = selection.from_verse, selection.to_verse
        else:
            from_verse = to_verse = 1
        badge = format_reference(chapter, from_verse, to_verse, direction)
    return CardLayout(state="verses", verses=blocks, badge=badge, **base)


__all__ = [
    "OPEN_ORNATE",
    "CLOSE_ORNATE",
    "BADGE_ICON",
    "DIRECTIONS",
    "to_arabic_indic",
    "color_brightness",
    "is_color_dark",
    "format_reference",
    "VerseBlock",
    "CardLayout",
    "build_card_layout",
]
