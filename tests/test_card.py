from __future__ import annotations

import itertools

import pytest
from bs4 import BeautifulSoup

from qve.card import element_to_html, render_card, render_embed_page, render_message_page
from qve.layout import build_card_layout
from qve.markup import render_static_markup
from qve.models import DEFAULT_STYLE, VerseRecord, VerseSelection, apply_style_changes

from conftest import FATIHA

VERSES = [
    VerseRecord(index=index, original_text=f"آية {index}", translation_text=f"Translation {index}")
    for index in (1, 2, 3)
]
SELECTION = VerseSelection(1, 1, 3)


def _text(html: str) -> str:
    return BeautifulSoup(html, "html.parser").get_text(" ")


@pytest.mark.parametrize(
    "show_translation, show_reference, show_verse_numbers",
    list(itertools.product([True, False], repeat=3)),
)
def test_live_card_and_static_markup_show_the_same_content(
    show_translation, show_reference, show_verse_numbers
) -> None:
    style = apply_style_changes(
        DEFAULT_STYLE,
        show_translation=show_translation,
        show_reference=show_reference,
        show_verse_numbers=show_verse_numbers,
    )
    layout = build_card_layout(VERSES, FATIHA, SELECTION, style)
    live = _text(element_to_html(render_card(layout)))
    static = _text(render_static_markup(layout))

    for text in (live, static):
        for index in (1, 2, 3):
            assert f"آية {index}" in text
        assert ("Translation 2" in text) is show_translation
        assert ("Al-Faatiha (1:1-3)" in text) is show_reference
        assert ("٢" in text) is show_verse_numbers
        assert ("(2)" in text) is (show_verse_numbers and show_translation)


def test_separators_match_between_renderers() -> None:
    layout = build_card_layout(VERSES, FATIHA, SELECTION, DEFAULT_STYLE)
    card = render_card(layout)
    separated = [node for node in card.find_all("translation-text") if "separated" in node.classes]
    assert len(separated) == 2
    assert render_static_markup(layout).count("border-bottom:") == 2


def test_custom_text_card_has_no_verses_or_badge() -> None:
    style = apply_style_changes(DEFAULT_STYLE, use_custom_text=True, custom_text="نص")
    card = render_card(build_card_layout(VERSES, FATIHA, SELECTION, style))
    assert card.find_all("verse") == []
    assert card.find_all("surah-badge") == []
    assert "نص" in card.text()


def test_loading_state_shows_skeletons_for_visible_sections() -> None:
    layout = build_card_layout([], FATIHA, SELECTION, DEFAULT_STYLE, loading=True)
    card = render_card(layout)
    assert "is-loading" in card.classes
    assert card.find_all("verse") == []
    assert len(card.find_all("skeleton-translation")) == 1
    assert len(card.find_all("badge-pill")) == 1

    hidden = apply_style_changes(DEFAULT_STYLE, show_translation=False, show_reference=False)
    card = render_card(build_card_layout([], FATIHA, SELECTION, hidden, loading=True))
    assert card.find_all("skeleton-translation") == []
    assert card.find_all("badge-pill") == []


def test_error_takes_priority_over_loading_and_verses() -> None:
    layout = build_card_layout(
        VERSES, FATIHA, SELECTION, DEFAULT_STYLE, loading=True, error="Failed to load verses"
    )
    card = render_card(layout)
    assert "is-error" in card.classes
    errors = card.find_all("card-error")
    assert [node.text() for node in errors] == ["Failed to load verses"]
    assert errors[0].attrs["role"] == "alert"
    assert card.find_all("verse") == []


def test_live_card_uses_stored_text_color() -> None:
    style = apply_style_changes(DEFAULT_STYLE, text_color="#fbbf24")
    card = render_card(build_card_layout(VERSES, FATIHA, SELECTION, style))
    assert card.style["color"] == "#fbbf24"
    assert card.style["--accent-color"] == DEFAULT_STYLE.accent_color


def test_card_root_flags() -> None:
    style = apply_style_changes(DEFAULT_STYLE, show_accent_line=False, transparent_background=True)
    card = render_card(build_card_layout(VERSES, FATIHA, SELECTION, style))
    assert "show-accent-line" not in card.classes
    assert "transparent-bg" in card.classes
    assert card.style["background-color"] == "transparent"


def test_verse_elements_carry_their_index() -> None:
    card = render_card(build_card_layout(list(reversed(VERSES)), FATIHA, SELECTION, DEFAULT_STYLE))
    assert [node.attrs["data-verse"] for node in card.find_all("verse")] == ["1", "2", "3"]


def test_html_serialization_escapes_text() -> None:
    verses = [VerseRecord(index=1, original_text="<i>", translation_text='"quoted" & <b>')]
    html = element_to_html(render_card(build_card_layout(verses, FATIHA, SELECTION, DEFAULT_STYLE)))
    assert "<i>" not in html
    assert "&lt;b&gt;" in html


def test_embed_page_wraps_card() -> None:
    card = render_card(build_card_layout(VERSES, FATIHA, SELECTION, DEFAULT_STYLE))
    page = render_embed_page(card, "Al-Faatiha 1:1-3")
    soup = BeautifulSoup(page, "html.parser")
    assert soup.html["dir"] == "rtl"
    assert soup.title.string == "Al-Faatiha 1:1-3"
    assert soup.find("meta", attrs={"name": "robots"})["content"] == "noindex, nofollow"
    assert soup.find("link", rel="icon")["href"].startswith("data:image/svg+xml")
    assert soup.select_one(".embed-frame .card-slot .quran-card") is not None


def test_message_page() -> None:
    soup = BeautifulSoup(
        render_message_page("Invalid Verse", "Please check the URL.", heading="Invalid Verse"),
        "html.parser",
    )
    assert soup.select_one(".message-box h1").get_text() == "Invalid Verse"
    error_soup = BeautifulSoup(render_message_page("Error", "Failed to load verses"), "html.parser")
    assert error_soup.select_one(".message-box p.error").get_text() == "Failed to load verses"
