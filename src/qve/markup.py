from __future__ import annotations

from html import escape
from typing import Sequence

from .layout import (
    BADGE_ICON,
    CLOSE_ORNATE,
    OPEN_ORNATE,
    CardLayout,
    VerseBlock,
    build_card_layout,
)
from .models import CardStyle, ChapterMetadata, VerseRecord, VerseSelection

LIGHT_TEXT = "#ffffff"
DARK_TEXT = "#1c2331"

_HEADER = "<!-- Quranic Verse Embed - Generated by Quranic Verse Embed Generator -->"
_FONT_NOTE = (
    "<!-- Note: For best results, include Google Fonts: "
    "https://fonts.googleapis.com/css2?family=Amiri:wght@400;700 -->"
)
_FOOTER = "<!-- End Quranic Verse Embed -->"


def static_text_color(layout: CardLayout) -> str:
    # Derived from background luminance; the stored text color is not consulted here.
    return LIGHT_TEXT if layout.dark else DARK_TEXT


def _border_color(layout: CardLayout) -> str:
    return "rgba(255,255,255,0.1)" if layout.dark else "rgba(0,0,0,0.1)"


def _ornate(glyph: str, accent: str, prefix: str = "") -> str:
    return f'<span style="color: {accent}; font-size: 1.5rem;">{prefix}{glyph}</span>'


def _root_open(layout: CardLayout) -> str:
    return f"""<div style="
  font-family: 'Amiri', 'Traditional Arabic', 'Arabic Typesetting', serif;
  background-color: {layout.background};
  color: {static_text_color(layout)};
  padding: 24px 32px;
  border-radius: 8px;
  position: relative;
  box-sizing: border-box;
  max-width: 100%;
">"""


def _accent_bar(layout: CardLayout) -> str:
    if not layout.accent_line:
        return ""
    return f"""
  <!-- Accent Border -->
  <div style="
    position: absolute;
    top: 0;
    bottom: 0;
    right: 0;
    width: 6px;
    background-color: {layout.accent_color};
    border-radius: 0 8px 8px 0;
  "></div>
  """


def _verse_html(block: VerseBlock, layout: CardLayout) -> str:
    accent = layout.accent_color
    open_brace = _ornate(OPEN_ORNATE, accent)
    close_brace = _ornate(CLOSE_ORNATE, accent, block.number_label or "")
    verse_html = f"""
    <!-- Verse {block.index} -->
    <p style="
      font-size: 2rem;
      line-height: 2;
      direction: rtl;
      text-align: right;
      margin: 0 0 8px 0;
    ">
      {open_brace}{escape(block.text)}{close_brace}
    </p>
    """
    if block.translation is None:
        return verse_html
    label = ""
    if block.translation_label:
        label = (
            '<span style="opacity: 0.5; font-size: 0.875rem; margin-right: 8px;">'
            f"{block.translation_label}</span>"
        )
    bottom = "16px" if block.separated else "0"
    separator = (
        f"border-bottom: 1px solid {_border_color(layout)}; margin-bottom: 16px;"
        if block.separated
        else ""
    )
    return verse_html + f"""
    <p style="
      font-family: 'Inter', system-ui, sans-serif;
      font-size: 1rem;
      line-height: 1.6;
      opacity: 0.8;
      margin: 0;
      padding: 8px 0 {bottom};
      {separator}
      text-align: left;
    ">
      {label}
      {escape(block.translation)}
    </p>
    """


def _badge_html(layout: CardLayout) -> str:
    if layout.badge is None:
        return ""
    accent = layout.accent_color
    return f"""
  <!-- Reference Badge -->
  <div style="
    display: flex;
    justify-content: flex-end;
    margin-top: 16px;
  ">
    <span style="
      font-family: 'Inter', system-ui, sans-serif;
      display: inline-flex;
      align-items: center;
      padding: 4px 12px;
      border-radius: 9999px;
      font-size: 0.875rem;
      background-color: {accent}20;
      color: {accent};
    ">
      {BADGE_ICON} {escape(layout.badge)}
    </span>
  </div>
  """


def render_static_markup(layout: CardLayout) -> str:
    """Render a custom or verse layout as a standalone HTML fragment."""
    if layout.state == "custom":
        accent = layout.accent_color
        return f"""{_HEADER}
{_root_open(layout)}{_accent_bar(layout)}
  <p style="
    font-size: 2rem;
    line-height: 2;
    direction: rtl;
    text-align: right;
    margin: 0;
  ">
    {_ornate(OPEN_ORNATE, accent)}{escape(layout.custom_text or "")}{_ornate(CLOSE_ORNATE, accent)}
  </p>
</div>
{_FOOTER}"""
    if layout.state != "verses":
        raise ValueError(f"Cannot export a card in the {layout.state!r} state.")
    verses_html = "\n".join(_verse_html(block, layout) for block in layout.verses)
    return f"""{_HEADER}
{_FONT_NOTE}
{_root_open(layout)}{_accent_bar(layout)}
  {verses_html}
  {_badge_html(layout)}
</div>
{_FOOTER}"""


def synthesize_static_html(
    verses: Sequence[VerseRecord],
    chapter: ChapterMetadata | None,
    selection: VerseSelection | None,
    style: CardStyle,
    direction: str = "ltr",
) -> str:
    """
    Produce a self-contained HTML card for ``verses`` styled by ``style``.

    The output depends only on the arguments, so identical inputs always give
    identical bytes.
    """
    layout = build_card_layout(verses, chapter, selection, style, direction)
    return render_static_markup(layout)


__all__ = [
    "LIGHT_TEXT",
    "DARK_TEXT",
    "static_text_color",
    "render_static_markup",
    "synthesize_static_html",
]
