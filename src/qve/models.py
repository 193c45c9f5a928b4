from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from typing import Mapping

from .defaults import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_TEXT_COLOR,
    DEFAULT_THEME,
)

THEMES = ("dark", "light")
_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


@dataclass(frozen=True, slots=True)
class ChapterMetadata:
    number: int
    native_name: str
    latin_name: str
    verse_count: int
    latin_translation: str | None = None
    revelation_type: str | None = None

    def as_payload(self) -> dict[str, object]:
        return {
            "number": self.number,
            "native_name": self.native_name,
            "latin_name": self.latin_name,
            "verse_count": self.verse_count,
            "latin_translation": self.latin_translation,
            "revelation_type": self.revelation_type,
        }

    @classmethod
    def from_payload(cls, payload: object) -> "ChapterMetadata":
        """Build metadata from one entry of the provider's chapter listing."""
        if not isinstance(payload, Mapping):
            raise ValueError("Chapter entry must be an object.")
        number = payload.get("number")
        verse_count = payload.get("numberOfAyahs")
        if not isinstance(number, int) or not isinstance(verse_count, int):
            raise ValueError("Chapter entry is missing number or numberOfAyahs.")
        if verse_count < 1:
            raise ValueError(f"Chapter {number} has no verses.")
        translation = payload.get("englishNameTranslation")
        revelation = payload.get("revelationType")
        return cls(
            number=number,
            native_name=str(payload.get("name") or ""),
            latin_name=str(payload.get("englishName") or ""),
            verse_count=verse_count,
            latin_translation=translation if isinstance(translation, str) else None,
            revelation_type=revelation if isinstance(revelation, str) else None,
        )


@dataclass(frozen=True, slots=True)
class VerseRecord:
    index: int
    original_text: str
    translation_text: str

    def as_payload(self) -> dict[str, object]:
        return {
            "index": self.index,
            "original_text": self.original_text,
            "translation_text": self.translation_text,
        }


@dataclass(frozen=True, slots=True)
class VerseSelection:
    chapter: int
    from_verse: int
    to_verse: int

    @property
    def is_single(self) -> bool:
        return self.from_verse == self.to_verse

    @property
    def verse_span(self) -> str:
        if self.is_single:
            return str(self.from_verse)
        return f"{self.from_verse}-{self.to_verse}"


@dataclass(frozen=True, slots=True)
class CardStyle:
    """Display options shared by every card renderer.

    Instances are never edited in place; use :func:`apply_style_changes` to derive
    a new configuration so dependent fields stay consistent.
    """

    accent_color: str = DEFAULT_ACCENT_COLOR
    background_color: str = DEFAULT_BACKGROUND_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    theme: str = DEFAULT_THEME
    show_translation: bool = True
    show_reference: bool = True
    show_verse_numbers: bool = False
    show_accent_line: bool = True
    transparent_background: bool = False
    use_custom_text: bool = False
    custom_text: str = ""

    @property
    def custom_mode(self) -> bool:
        """True when the card renders custom text instead of verses."""
        return self.use_custom_text and bool(self.custom_text)

    @property
    def reference_visible(self) -> bool:
        return self.show_reference and not self.use_custom_text

    def as_payload(self) -> dict[str, object]:
        return {field.name: getattr(self, field.name) for field in fields(self)}


DEFAULT_STYLE = CardStyle()

_COLOR_FIELDS = frozenset({"accent_color", "background_color", "text_color"})
_BOOL_FIELDS = frozenset(
    {
        "show_translation",
        "show_reference",
        "show_verse_numbers",
        "show_accent_line",
        "transparent_background",
        "use_custom_text",
    }
)
_STYLE_FIELDS = frozenset(field.name for field in fields(CardStyle))


def parse_hex_color(value: str) -> str | None:
    """Return ``#rrggbb`` for a six-digit hex color (with or without ``#``)."""
    if not isinstance(value, str):
        return None
    match = _HEX_COLOR_RE.match(value.strip())
    if not match:
        return None
    return f"#{match.group(1).lower()}"


def apply_style_changes(style: CardStyle, **changes: object) -> CardStyle:
    """Return a new style with ``changes`` applied and forced fields recomputed."""
    unknown = set(changes) - _STYLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown style field(s): {', '.join(sorted(unknown))}")
    normalized: dict[str, object] = {}
    for name, value in changes.items():
        if name in _COLOR_FIELDS:
            color = parse_hex_color(value)  # type: ignore[arg-type]
            if color is None:
                raise ValueError(f"{name} must be a 6-digit hex color, got {value!r}")
            normalized[name] = color
        elif name in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a boolean.")
            normalized[name] = value
        elif name == "theme":
            if value not in THEMES:
                raise ValueError(f"theme must be one of: {', '.join(THEMES)}")
            normalized[name] = value
        else:
            if not isinstance(value, str):
                raise ValueError("custom_text must be a string.")
            normalized[name] = value
    updated = replace(style, **normalized)
    if updated.use_custom_text and updated.show_reference:
        # Custom text has no chapter/verse address to cite.
        updated = replace(updated, show_reference=False)
    return updated


__all__ = [
    "THEMES",
    "ChapterMetadata",
    "VerseRecord",
    "VerseSelection",
    "CardStyle",
    "DEFAULT_STYLE",
    "parse_hex_color",
    "apply_style_changes",
]
