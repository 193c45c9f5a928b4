from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from .layout import BADGE_ICON, CLOSE_ORNATE, OPEN_ORNATE, CardLayout, VerseBlock
from .web_assets import QVE_FAVICON_URL

VOID_TAGS = frozenset({"br", "hr", "img", "meta", "link", "input"})


@dataclass
class Element:
    tag: str
    classes: tuple[str, ...] = ()
    style: dict[str, str] = field(default_factory=dict)
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Element | str"] = field(default_factory=list)

    def iter(self):
        """Yield this element and every descendant element, depth first."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def find_all(self, class_name: str) -> list["Element"]:
        return [node for node in self.iter() if class_name in node.classes]

    def text(self) -> str:
        parts: list[str] = []
        for child in self.children:
            parts.append(child.text() if isinstance(child, Element) else child)
        return "".join(parts)


def element_to_html(node: Element | str) -> str:
    if isinstance(node, str):
        return escape(node, quote=False)
    attrs = dict(node.attrs)
    if node.classes:
        attrs["class"] = " ".join(node.classes)
    if node.style:
        attrs["style"] = "; ".join(f"{key}: {value}" for key, value in node.style.items())
    attr_text = "".join(f' {key}="{escape(value, quote=True)}"' for key, value in attrs.items())
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attr_text}>"
    inner = "".join(element_to_html(child) for child in node.children)
    return f"<{node.tag}{attr_text}>{inner}</{node.tag}>"


def _card_root(layout: CardLayout) -> Element:
    classes = ["quran-card"]
    if layout.accent_line:
        classes.append("show-accent-line")
    if layout.transparent:
        classes.append("transparent-bg")
    return Element(
        "div",
        classes=tuple(classes),
        style={
            "--accent-color": layout.accent_color,
            "background-color": layout.background,
            "color": layout.text_color,
        },
    )


def _pattern(layout: CardLayout) -> Element:
    return Element(
        "div",
        classes=("card-pattern",),
        style={
            "background-image": (
                f"radial-gradient(circle at 50% 50%, {layout.accent_color} 1px, transparent 1px)"
            ),
        },
    )


def _brace(layout: CardLayout, glyph: str, prefix: str | None = None) -> Element:
    children: list[Element | str] = []
    if prefix:
        children.append(Element("span", classes=("verse-number",), children=[prefix]))
    children.append(glyph)
    return Element("span", classes=("ornate",), style={"color": layout.accent_color}, children=children)


def _skeleton(*classes: str) -> Element:
    return Element("div", classes=("skeleton",) + classes)


def _loading_children(layout: CardLayout) -> list[Element | str]:
    children: list[Element | str] = [
        Element(
            "div",
            classes=("skeleton-stack",),
            children=[
                _skeleton("line-lg", "w-full"),
                _skeleton("line-lg", "w-4-5"),
                _skeleton("line-lg", "w-3-4"),
            ],
        )
    ]
    if layout.show_translation:
        children.append(
            Element(
                "div",
                classes=("skeleton-translation",),
                children=[_skeleton("line-sm", "w-full"), _skeleton("line-sm", "w-5-6")],
            )
        )
    if layout.show_reference:
        children.append(
            Element("div", classes=("badge-row",), children=[_skeleton("badge-pill")])
        )
    return children


def _verse_element(block: VerseBlock, layout: CardLayout) -> Element:
    node = Element("div", classes=("verse",), attrs={"data-verse": str(block.index)})
    node.children.append(
        Element(
            "div",
            classes=("arabic-text",),
            attrs={"dir": "rtl"},
            children=[
                _brace(layout, OPEN_ORNATE),
                block.text,
                _brace(layout, CLOSE_ORNATE, block.number_label),
            ],
        )
    )
    if block.translation is not None:
        classes = ("translation-text", "separated") if block.separated else ("translation-text",)
        translation = Element(
            "p",
            classes=classes,
            style={
                "border-color": "rgba(255,255,255,0.1)" if layout.dark else "rgba(0,0,0,0.1)"
            },
        )
        if block.translation_label:
            translation.children.append(
                Element("span", classes=("translation-number",), children=[block.translation_label])
            )
        translation.children.append(block.translation)
        node.children.append(translation)
    return node


def _badge(layout: CardLayout) -> Element:
    return Element(
        "div",
        classes=("badge-row",),
        children=[
            Element(
                "div",
                classes=("surah-badge",),
                children=[
                    Element("span", classes=("badge-icon",), attrs={"aria-hidden": "true"}, children=[BADGE_ICON]),
                    Element("span", children=[layout.badge or ""]),
                ],
            )
        ],
    )


def render_card(layout: CardLayout) -> Element:
    """
    Build the live card element tree for ``layout``.

    Loading and error states replace the card body. Custom text and verse cards
    share the root, accent line and background treatment.
    """
    root = _card_root(layout)
    if layout.state == "loading":
        root.classes += ("is-loading",)
        root.children.extend(_loading_children(layout))
        return root
    if layout.state == "error":
        root.classes += ("is-error",)
        root.children.append(
            Element("p", classes=("card-error",), attrs={"role": "alert"}, children=[layout.message or ""])
        )
        return root

    root.children.append(_pattern(layout))
    if layout.state == "custom":
        root.children.append(
            Element(
                "div",
                classes=("arabic-text",),
                attrs={"dir": "rtl"},
                children=[
                    _brace(layout, OPEN_ORNATE),
                    layout.custom_text or "",
                    _brace(layout, CLOSE_ORNATE),
                ],
            )
        )
        return root

    root.children.append(
        Element(
            "div",
            classes=("verses",),
            children=[_verse_element(block, layout) for block in layout.verses],
        )
    )
    if layout.badge is not None:
        root.children.append(_badge(layout))
    return root


CARD_CSS = """
    body {
      margin: 0;
      padding: 0;
      background: transparent;
    }
    .embed-frame {
      min-height: 100vh;
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 1rem;
      box-sizing: border-box;
    }
    .embed-frame > .card-slot {
      width: 100%;
      max-width: 42rem;
    }
    .quran-card {
      position: relative;
      overflow: hidden;
      box-sizing: border-box;
      padding: 24px 32px;
      border-radius: 8px;
      font-family: 'Amiri', 'Traditional Arabic', 'Arabic Typesetting', serif;
    }
    .quran-card.show-accent-line::after {
      content: "";
      position: absolute;
      top: 0;
      bottom: 0;
      right: 0;
      width: 6px;
      background-color: var(--accent-color);
      border-radius: 0 8px 8px 0;
    }
    .card-pattern {
      position: absolute;
      top: 0;
      left: 0;
      width: 4rem;
      height: 4rem;
      opacity: 0.05;
      pointer-events: none;
      background-size: 8px 8px;
    }
    .verses > .verse + .verse {
      margin-top: 1rem;
    }
    .arabic-text {
      font-size: 2rem;
      line-height: 2;
      text-align: right;
    }
    .ornate {
      font-size: 1.5rem;
    }
    .translation-text {
      font-family: 'Inter', system-ui, sans-serif;
      font-size: 1rem;
      line-height: 1.6;
      opacity: 0.8;
      margin: 0;
      padding: 8px 0 0;
      text-align: left;
      direction: ltr;
    }
    .translation-text.separated {
      padding-bottom: 16px;
      margin-bottom: 16px;
      border-bottom: 1px solid;
    }
    .translation-number {
      opacity: 0.5;
      font-size: 0.875rem;
      margin-right: 8px;
    }
    .badge-row {
      display: flex;
      justify-content: flex-end;
      margin-top: 16px;
    }
    .surah-badge {
      font-family: 'Inter', system-ui, sans-serif;
      display: inline-flex;
      align-items: center;
      gap: 0.4rem;
      padding: 4px 12px;
      border-radius: 9999px;
      font-size: 0.875rem;
      color: var(--accent-color);
      background-color: color-mix(in srgb, var(--accent-color) 12.5%, transparent);
    }
    .skeleton {
      border-radius: 6px;
      background: currentColor;
      opacity: 0.12;
      animation: pulse 1.4s ease-in-out infinite;
    }
    .skeleton-stack > .skeleton + .skeleton,
    .skeleton-translation > .skeleton + .skeleton {
      margin-top: 0.6rem;
    }
    .skeleton-stack {
      margin-bottom: 1.5rem;
    }
    .skeleton-translation {
      padding-top: 1rem;
    }
    .skeleton.line-lg { height: 2.5rem; margin-left: auto; }
    .skeleton.line-sm { height: 1rem; }
    .skeleton.badge-pill { height: 2rem; width: 8rem; border-radius: 9999px; }
    .w-full { width: 100%; }
    .w-5-6 { width: 83.333%; }
    .w-4-5 { width: 80%; }
    .w-3-4 { width: 75%; }
    .card-error {
      margin: 0;
      text-align: center;
      color: #ef4444;
      font-family: 'Inter', system-ui, sans-serif;
    }
    .message-box {
      text-align: center;
      background: #1c2331;
      color: #ffffff;
      padding: 1.5rem;
      border-radius: 0.5rem;
      font-family: 'Inter', system-ui, sans-serif;
    }
    .message-box h1 {
      margin: 0 0 0.5rem;
      font-size: 1.5rem;
    }
    .message-box p {
      margin: 0;
      color: #556279;
    }
    .message-box p.error {
      color: #ef4444;
    }
    @keyframes pulse {
      0%, 100% { opacity: 0.12; }
      50% { opacity: 0.24; }
    }
"""


def _document(title: str, body: Element) -> str:
    return f"""<!DOCTYPE html>
<html lang="ar" dir="rtl">
<head>
  <meta charset="utf-8">
  <title>{escape(title)}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="robots" content="noindex, nofollow">
  <link rel="icon" href="{QVE_FAVICON_URL}">
  <style>{CARD_CSS}  </style>
</head>
<body>
{element_to_html(body)}
</body>
</html>
"""


def render_embed_page(card: Element, title: str) -> str:
    """Wrap a rendered card in a standalone, transparent HTML document."""
    frame = Element(
        "div",
        classes=("embed-frame",),
        children=[Element("div", classes=("card-slot",), children=[card])],
    )
    return _document(title, frame)


def render_message_page(title: str, message: str, *, heading: str | None = None) -> str:
    """Placeholder document shown instead of a card when it cannot be rendered."""
    box = Element("div", classes=("message-box",))
    if heading:
        box.children.append(Element("h1", children=[heading]))
        box.children.append(Element("p", children=[message]))
    else:
        box.children.append(Element("p", classes=("error",), children=[message]))
    frame = Element("div", classes=("embed-frame",), children=[box])
    return _document(title, frame)


__all__ = [
    "Element",
    "element_to_html",
    "render_card",
    "render_embed_page",
    "render_message_page",
    "CARD_CSS",
]
