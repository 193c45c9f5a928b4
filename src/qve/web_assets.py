from __future__ import annotations

from urllib.parse import quote

from .defaults import DEFAULT_ACCENT_COLOR, DEFAULT_BACKGROUND_COLOR
from .layout import CLOSE_ORNATE, OPEN_ORNATE


def build_favicon_svg(
    accent: str = DEFAULT_ACCENT_COLOR,
    *,
    background: str = DEFAULT_BACKGROUND_COLOR,
    border_color: str | None = "#ffffff1a",
) -> str:
    """Return a square SVG badge showing the ornate parentheses in the accent color."""
    border_markup = (
        f'<rect x="1.5" y="1.5" width="61" height="61" rx="12" ry="12" fill="none" '
        f'stroke="{border_color}" stroke-width="1.5" />'
        if border_color
        else ""
    )
    return f"""<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64" role="img" aria-label="verse icon">
  <rect width="64" height="64" rx="14" ry="14" fill="{background}" />
  {border_markup}
  <rect x="52" y="6" width="6" height="52" rx="3" fill="{accent}" />
  <text x="28" y="42" text-anchor="middle" font-family="'Amiri', 'Traditional Arabic', serif"
        font-size="28" font-weight="700" fill="{accent}">{OPEN_ORNATE}{CLOSE_ORNATE}</text>
</svg>"""


def favicon_data_url(
    accent: str = DEFAULT_ACCENT_COLOR,
    *,
    background: str = DEFAULT_BACKGROUND_COLOR,
    border_color: str | None = "#ffffff1a",
) -> str:
    """Build a favicon SVG and wrap it in a data URL for inline use."""
    svg = build_favicon_svg(accent, background=background, border_color=border_color)
    return "data:image/svg+xml," + quote(svg)


QVE_FAVICON_URL = favicon_data_url()


__all__ = ["build_favicon_svg", "favicon_data_url", "QVE_FAVICON_URL"]
