from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.spinner import Spinner
from rich.style import Style
from rich.text import Text

from .layout import BADGE_ICON, CLOSE_ORNATE, OPEN_ORNATE, CardLayout


def _framed(text: str, layout: CardLayout, number_label: str | None = None) -> Text:
    accent = Style(color=layout.accent_color)
    line = Text(justify="right")
    line.append(OPEN_ORNATE, style=accent)
    line.append(text)
    line.append(f"{number_label or ''}{CLOSE_ORNATE}", style=accent)
    return line


def render_console(layout: CardLayout) -> RenderableType:
    """Terminal rendition of a card, drawn with the stored text color."""
    base = Style(
        color=layout.text_color,
        bgcolor=None if layout.transparent else layout.background_color,
    )
    border = Style(color=layout.accent_color) if layout.accent_line else Style(dim=True)
    if layout.state == "loading":
        body: RenderableType = Spinner("dots", text="Loading verses…")
    elif layout.state == "error":
        body = Text(layout.message or "", style="bold red")
    elif layout.state == "custom":
        body = _framed(layout.custom_text or "", layout)
    else:
        parts: list[RenderableType] = []
        for block in layout.verses:
            parts.append(_framed(block.text, layout, block.number_label))
            if block.translation is not None:
                translation = Text(style=Style(italic=True))
                if block.translation_label:
                    translation.append(f"{block.translation_label} ", style=Style(dim=True))
                translation.append(block.translation)
                parts.append(translation)
                if block.separated:
                    parts.append(Rule(style=Style(dim=True)))
        if layout.badge is not None:
            parts.append(
                Text(f"{BADGE_ICON} {layout.badge}", style=Style(color=layout.accent_color), justify="right")
            )
        body = Group(*parts)
    return Panel(body, style=base, border_style=border, padding=(1, 2))


__all__ = ["render_console"]
