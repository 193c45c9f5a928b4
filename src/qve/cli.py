from __future__ import annotations

import argparse
import json
import socket
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console
from rich.live import Live
from rich.table import Table

from .acquisition import FetchFailedError, fetch_range, load_chapter
from .console import render_console
from .defaults import (
    ACCENT_PRESETS,
    BACKGROUND_PRESETS,
    DEFAULT_CHAPTER,
    DEFAULT_FROM_VERSE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TO_VERSE,
    MAX_VERSES_LIMIT,
    TEXT_COLOR_PRESETS,
)
from .layout import DIRECTIONS
from .logging_utils import build_uvicorn_log_config, set_debug_logging
from .markup import synthesize_static_html
from .models import DEFAULT_STYLE, THEMES, CardStyle, apply_style_changes
from .provider import AlQuranClient, ChapterCatalog, ProviderError, ProviderUnavailableError
from .ranges import VerseRangeError, resolve_selection
from .reference import (
    MalformedReferenceError,
    build_iframe_code,
    decode_parts,
    decode_reference,
    encode_reference,
)
from .session import PreviewSession
from .web import WebConfig, create_app


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("qve")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"qve {__version__}",
    )


def _add_provider_arguments(ap: argparse.ArgumentParser) -> None:
    ap.add_argument(
        "--api-base",
        help="Base URL of the verse provider API (default: $QVE_API_BASE or api.alquran.cloud).",
    )
    ap.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help=f"Per-request timeout in seconds (default: {DEFAULT_REQUEST_TIMEOUT:g}).",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Print provider requests and load diagnostics to stderr.",
    )


def _add_selection_arguments(ap: argparse.ArgumentParser) -> None:
    default_verses = (
        str(DEFAULT_FROM_VERSE)
        if DEFAULT_FROM_VERSE == DEFAULT_TO_VERSE
        else f"{DEFAULT_FROM_VERSE}-{DEFAULT_TO_VERSE}"
    )
    ap.add_argument(
        "chapter",
        nargs="?",
        default=str(DEFAULT_CHAPTER),
        help=f"Surah number (1-114, default: {DEFAULT_CHAPTER}).",
    )
    ap.add_argument(
        "verses",
        nargs="?",
        default=default_verses,
        help=(
            f"Ayah number or range such as 1-7 (default: {default_verses}; "
            f"at most {MAX_VERSES_LIMIT} verses are rendered)."
        ),
    )


def _preset_names(presets: tuple[tuple[str, str], ...]) -> str:
    return ", ".join(name.lower().replace(" ", "-") for name, _ in presets)


def _color_choice(value: str, presets: tuple[tuple[str, str], ...]) -> str:
    """Map a preset name such as ``dark-gray`` to its hex value; pass anything else through."""
    wanted = value.strip().lower().replace("-", " ")
    for name, color in presets:
        if name.lower() == wanted:
            return color
    return value


def _add_style_arguments(ap: argparse.ArgumentParser) -> None:
    ap.add_argument(
        "--accent",
        help=f"Accent color as hex or preset name ({_preset_names(ACCENT_PRESETS)}).",
    )
    ap.add_argument(
        "--background",
        help=f"Background color as hex or preset name ({_preset_names(BACKGROUND_PRESETS)}).",
    )
    ap.add_argument(
        "--text-color",
        help=f"Text color as hex or preset name ({_preset_names(TEXT_COLOR_PRESETS)}).",
    )
    ap.add_argument("--theme", choices=THEMES, help="Card theme (default: dark).")
    ap.add_argument("--no-translation", action="store_true", help="Hide the translation.")
    ap.add_argument("--no-reference", action="store_true", help="Hide the surah reference badge.")
    ap.add_argument("--verse-numbers", action="store_true", help="Show verse numbers.")
    ap.add_argument("--no-accent-line", action="store_true", help="Hide the accent line.")
    ap.add_argument("--transparent", action="store_true", help="Use a transparent background.")
    ap.add_argument(
        "--custom-text",
        help="Render this text instead of the selected verses (hides the reference badge).",
    )


def _style_from_args(args: argparse.Namespace) -> CardStyle:
    changes: dict[str, object] = {}
    if args.accent:
        changes["accent_color"] = _color_choice(args.accent, ACCENT_PRESETS)
    if args.background:
        changes["background_color"] = _color_choice(args.background, BACKGROUND_PRESETS)
    if args.text_color:
        changes["text_color"] = _color_choice(args.text_color, TEXT_COLOR_PRESETS)
    if args.theme:
        changes["theme"] = args.theme
    if args.no_translation:
        changes["show_translation"] = False
    if args.no_reference:
        changes["show_reference"] = False
    if args.verse_numbers:
        changes["show_verse_numbers"] = True
    if args.no_accent_line:
        changes["show_accent_line"] = False
    if args.transparent:
        changes["transparent_background"] = True
    if args.custom_text:
        changes["use_custom_text"] = True
        changes["custom_text"] = args.custom_text
    try:
        return apply_style_changes(DEFAULT_STYLE, **changes)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Serve embeddable verse cards and embed-code endpoints.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host interface for the web server (default: 0.0.0.0).",
    )
    ap.add_argument(
        "--port",
        type=int,
        default=2046,
        help="Port for the web server (default: 2046).",
    )
    ap.add_argument(
        "--base-url",
        help="Public address used in generated embed references (default: $QVE_BASE_URL or request host).",
    )
    _add_provider_arguments(ap)
    return ap


def build_chapters_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="List all surahs with their verse counts.")
    _add_version_flag(ap)
    _add_provider_arguments(ap)
    return ap


def build_embed_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Print an embed reference, iframe snippet or standalone HTML card.",
    )
    _add_version_flag(ap)
    _add_selection_arguments(ap)
    ap.add_argument(
        "-f",
        "--format",
        choices=["url", "iframe", "html"],
        default="iframe",
        help="Output format (default: iframe).",
    )
    ap.add_argument(
        "--base-url",
        default="",
        help="Address of the qve web server that resolves embed references.",
    )
    ap.add_argument(
        "--dir",
        choices=DIRECTIONS,
        default="ltr",
        help="Reference badge direction for HTML output: ltr (Latin) or rtl (Arabic) (default: ltr).",
    )
    _add_style_arguments(ap)
    _add_provider_arguments(ap)
    return ap


def build_preview_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Preview a verse card in the terminal.")
    _add_version_flag(ap)
    _add_selection_arguments(ap)
    ap.add_argument(
        "--dir",
        choices=DIRECTIONS,
        default="ltr",
        help="Reference badge direction: ltr (Latin) or rtl (Arabic) (default: ltr).",
    )
    _add_style_arguments(ap)
    _add_provider_arguments(ap)
    return ap


def build_decode_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Decode an embed reference into its selection and style.")
    _add_version_flag(ap)
    ap.add_argument("reference", help="Embed URL or path such as /embed/1/1-7?color=f97316")
    return ap


def _client_from_args(args: argparse.Namespace) -> AlQuranClient:
    set_debug_logging(args.debug)
    return AlQuranClient(args.api_base, args.timeout)


def _parse_selection(args: argparse.Namespace):
    try:
        selection, _ = decode_parts(args.chapter, args.verses, {})
    except MalformedReferenceError as exc:
        raise SystemExit(str(exc)) from exc
    return selection


def _run_chapters(args: argparse.Namespace) -> int:
    client = _client_from_args(args)
    try:
        chapters = client.list_chapters()
    except (ProviderError, ProviderUnavailableError) as exc:
        raise SystemExit(f"Failed to load chapter list: {exc}") from exc
    finally:
        client.close()
    table = Table(title="Surahs")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Arabic", justify="right")
    table.add_column("Ayahs", justify="right")
    table.add_column("Revelation")
    for chapter in chapters:
        table.add_row(
            str(chapter.number),
            chapter.latin_name,
            chapter.native_name,
            str(chapter.verse_count),
            chapter.revelation_type or "",
        )
    Console().print(table)
    return 0


def _run_embed(args: argparse.Namespace) -> int:
    selection = _parse_selection(args)
    style = _style_from_args(args)
    if args.format == "url":
        print(encode_reference(args.base_url, selection, style))
        return 0
    if args.format == "iframe":
        print(build_iframe_code(args.base_url, selection, style))
        return 0

    err = Console(stderr=True)
    client = _client_from_args(args)
    try:
        chapter = load_chapter(ChapterCatalog(client), selection.chapter)
        verses = []
        effective = selection
        if not style.custom_mode:
            resolved = resolve_selection(selection, chapter)
            if resolved.truncated:
                err.print(
                    f"[yellow]Only the first {MAX_VERSES_LIMIT} verses are included "
                    f"({resolved.start}-{resolved.end}).[/yellow]"
                )
            verses = fetch_range(client, resolved.chapter, resolved.start, resolved.end)
            effective = resolved.selection
    except (VerseRangeError, FetchFailedError) as exc:
        raise SystemExit(str(exc)) from exc
    finally:
        client.close()
    print(synthesize_static_html(verses, chapter, effective, style, args.dir))
    return 0


def _run_preview(args: argparse.Namespace) -> int:
    selection = _parse_selection(args)
    style = _style_from_args(args)
    client = _client_from_args(args)
    console = Console()
    session = PreviewSession(client, style=style, direction=args.dir)
    try:
        session.select(selection)
        with Live(render_console(session.layout()), console=console, refresh_per_second=8) as live:
            while not session.wait(0.1):
                live.update(render_console(session.layout()))
            live.update(render_console(session.layout()))
    finally:
        client.close()
    state = session.state
    if state.resolved is not None and state.resolved.truncated:
        console.print(f"[yellow]Only the first {MAX_VERSES_LIMIT} verses are shown.[/yellow]")
    return 1 if state.error else 0


def _run_decode(args: argparse.Namespace) -> int:
    try:
        selection, style = decode_reference(args.reference)
    except MalformedReferenceError as exc:
        raise SystemExit(str(exc)) from exc
    payload = {
        "chapter": selection.chapter,
        "from": selection.from_verse,
        "to": selection.to_verse,
        "style": style.as_payload(),
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _resolve_local_ip(host: str) -> str:
    if host not in {"", "0.0.0.0"}:
        return host
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            return sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def _run_web(args: argparse.Namespace) -> None:
    set_debug_logging(args.debug)
    config = WebConfig(
        api_base=args.api_base,
        base_url=args.base_url,
        timeout=args.timeout,
    )
    app = create_app(config)
    public_ip = _resolve_local_ip(args.host)
    url = f"http://{public_ip}:{args.port}/"
    print("Serving qve verse embeds")
    print(f"Web URL: {url}")
    print(f"Example: {url}embed/1/1-7")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="debug" if args.debug else "info",
        log_config=build_uvicorn_log_config(debug=args.debug),
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description=(
            "Embeddable Quranic verse cards. Commands: web, chapters, embed, preview, decode. "
            "Run `qve <command> --help` for details."
        ),
    )
    _add_version_flag(ap)
    return ap


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "web":
        web_args = build_web_parser().parse_args(argv[1:])
        _run_web(web_args)
        return 0
    if argv and argv[0] == "chapters":
        return _run_chapters(build_chapters_parser().parse_args(argv[1:]))
    if argv and argv[0] == "embed":
        return _run_embed(build_embed_parser().parse_args(argv[1:]))
    if argv and argv[0] == "preview":
        return _run_preview(build_preview_parser().parse_args(argv[1:]))
    if argv and argv[0] == "decode":
        return _run_decode(build_decode_parser().parse_args(argv[1:]))

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    parser.error(f"unknown command: {argv[0]}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
