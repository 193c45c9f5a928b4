from __future__ import annotations

from dataclasses import replace

import pytest

from qve.models import DEFAULT_STYLE, CardStyle, ChapterMetadata, apply_style_changes, parse_hex_color


def test_default_style_matches_fresh_configuration() -> None:
    style = CardStyle()
    assert style == DEFAULT_STYLE
    assert style.accent_color == "#f97316"
    assert style.background_color == "#1c2331"
    assert style.text_color == "#ffffff"
    assert style.theme == "dark"
    assert style.show_translation and style.show_reference and style.show_accent_line
    assert not style.show_verse_numbers
    assert not style.transparent_background
    assert not style.use_custom_text and style.custom_text == ""


def test_enabling_custom_text_forces_reference_off() -> None:
    style = apply_style_changes(DEFAULT_STYLE, use_custom_text=True, custom_text="بسم الله")
    assert style.show_reference is False
    assert style.custom_mode


def test_reference_cannot_be_reenabled_while_custom_text_is_on() -> None:
    style = apply_style_changes(DEFAULT_STYLE, use_custom_text=True)
    style = apply_style_changes(style, show_reference=True)
    assert style.show_reference is False


def test_disabling_custom_text_leaves_reference_for_user_to_restore() -> None:
    style = apply_style_changes(DEFAULT_STYLE, use_custom_text=True)
    style = apply_style_changes(style, use_custom_text=False)
    assert style.show_reference is False
    assert apply_style_changes(style, show_reference=True).show_reference is True


def test_reducer_returns_new_record() -> None:
    updated = apply_style_changes(DEFAULT_STYLE, show_translation=False)
    assert updated is not DEFAULT_STYLE
    assert DEFAULT_STYLE.show_translation is True


def test_reducer_normalizes_colors() -> None:
    style = apply_style_changes(DEFAULT_STYLE, accent_color="10B981", background_color="#FFFFFF")
    assert style.accent_color == "#10b981"
    assert style.background_color == "#ffffff"


@pytest.mark.parametrize(
    "changes",
    [
        {"accent_color": "orange"},
        {"text_color": "#fff"},
        {"theme": "sepia"},
        {"show_translation": "false"},
        {"font": "Amiri"},
    ],
)
def test_reducer_rejects_invalid_changes(changes) -> None:
    with pytest.raises(ValueError):
        apply_style_changes(DEFAULT_STYLE, **changes)


def test_direct_construction_can_force_reference_with_custom_text() -> None:
    forced = replace(DEFAULT_STYLE, use_custom_text=True, custom_text="x", show_reference=True)
    assert forced.show_reference is True
    assert forced.reference_visible is False


def test_parse_hex_color() -> None:
    assert parse_hex_color("#ABCDEF") == "#abcdef"
    assert parse_hex_color("abcdef") == "#abcdef"
    assert parse_hex_color("abcde") is None
    assert parse_hex_color("ghijkl") is None


def test_chapter_metadata_from_provider_payload() -> None:
    chapter = ChapterMetadata.from_payload(
        {
            "number": 112,
            "name": "سُورَةُ الإِخۡلَاصِ",
            "englishName": "Al-Ikhlaas",
            "englishNameTranslation": "Sincerity",
            "numberOfAyahs": 4,
            "revelationType": "Meccan",
        }
    )
    assert chapter.number == 112
    assert chapter.latin_name == "Al-Ikhlaas"
    assert chapter.verse_count == 4
    assert chapter.revelation_type == "Meccan"


def test_chapter_metadata_requires_verse_count() -> None:
    with pytest.raises(ValueError):
        ChapterMetadata.from_payload({"number": 1, "name": "x", "englishName": "y"})
