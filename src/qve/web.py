from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .acquisition import FetchFailedError, fetch_range, load_chapter
from .card import render_card, render_embed_page, render_message_page
from .defaults import (
    DEFAULT_ORIGINAL_EDITION,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TRANSLATION_EDITION,
)
from .layout import DIRECTIONS, build_card_layout
from .logging_utils import debug_log
from .markup import synthesize_static_html
from .models import CardStyle, ChapterMetadata, VerseRecord, VerseSelection
from .provider import AlQuranClient, ChapterCatalog, ProviderError, ProviderUnavailableError, VerseProvider
from .ranges import ResolvedRange, VerseRangeError, resolve_selection
from .reference import (
    MalformedReferenceError,
    build_iframe_code,
    decode_parts,
    encode_reference,
    first_values,
)

_BASE_URL_ENV = "QVE_BASE_URL"
EXPORT_FORMATS = ("iframe", "html")


@dataclass(slots=True)
class WebConfig:
    api_base: str | None = None
    base_url: str | None = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    original_edition: str = DEFAULT_ORIGINAL_EDITION
    translation_edition: str = DEFAULT_TRANSLATION_EDITION

    def public_base_url(self, request: Request) -> str:
        configured = self.base_url or os.environ.get(_BASE_URL_ENV)
        if configured:
            return configured.rstrip("/")
        return str(request.base_url).rstrip("/")


@dataclass(frozen=True, slots=True)
class LoadedCard:
    chapter: ChapterMetadata
    resolved: ResolvedRange | None
    verses: list[VerseRecord]


def _load_card(
    provider: VerseProvider,
    catalog: ChapterCatalog,
    selection: VerseSelection,
    style: CardStyle,
) -> LoadedCard:
    chapter = load_chapter(catalog, selection.chapter)
    if style.custom_mode:
        # Custom text ignores the verse range; nothing else to fetch.
        return LoadedCard(chapter=chapter, resolved=None, verses=[])
    resolved = resolve_selection(selection, chapter)
    verses = fetch_range(provider, resolved.chapter, resolved.start, resolved.end)
    return LoadedCard(chapter=chapter, resolved=resolved, verses=verses)


def create_app(config: WebConfig, provider: VerseProvider | None = None) -> FastAPI:
    if provider is None:
        provider = AlQuranClient(
            config.api_base,
            config.timeout,
            original_edition=config.original_edition,
            translation_edition=config.translation_edition,
        )
    catalog = ChapterCatalog(provider)

    app = FastAPI(title="qve Verse Embed")
    app.state.config = config
    app.state.provider = provider
    app.state.catalog = catalog

    async def _load(selection: VerseSelection, style: CardStyle) -> LoadedCard:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _load_card, provider, catalog, selection, style)

    @app.get("/api/chapters")
    async def api_chapters() -> JSONResponse:
        loop = asyncio.get_running_loop()
        try:
            chapters = await loop.run_in_executor(None, catalog.chapters)
        except (ProviderError, ProviderUnavailableError) as exc:
            raise HTTPException(status_code=502, detail="Failed to load chapter list") from exc
        return JSONResponse({"chapters": [chapter.as_payload() for chapter in chapters]})

    @app.get("/api/verses/{chapter}/{verses}")
    async def api_verses(chapter: str, verses: str) -> JSONResponse:
        try:
            selection, style = decode_parts(chapter, verses, {})
        except MalformedReferenceError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        try:
            loaded = await _load(selection, style)
        except VerseRangeError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except FetchFailedError as exc:
            raise HTTPException(status_code=502, detail="Failed to load verses") from exc
        payload: dict[str, object] = {"chapter": loaded.chapter.as_payload()}
        if loaded.resolved is not None:
            payload["range"] = loaded.resolved.as_payload()
        payload["verses"] = [verse.as_payload() for verse in loaded.verses]
        return JSONResponse(payload)

    @app.get("/api/embed-code/{chapter}/{verses}")
    async def api_embed_code(
        chapter: str,
        verses: str,
        request: Request,
        format: str = Query("iframe"),
        dir: str = Query("ltr"),
    ) -> JSONResponse:
        if format not in EXPORT_FORMATS:
            raise HTTPException(status_code=400, detail=f"format must be one of: {', '.join(EXPORT_FORMATS)}")
        if dir not in DIRECTIONS:
            raise HTTPException(status_code=400, detail=f"dir must be one of: {', '.join(DIRECTIONS)}")
        try:
            query = first_values(request.query_params.multi_items())
            selection, style = decode_parts(chapter, verses, query)
        except MalformedReferenceError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        base_url = config.public_base_url(request)
        payload: dict[str, object] = {
            "format": format,
            "reference": encode_reference(base_url, selection, style),
        }
        if format == "iframe":
            payload["code"] = build_iframe_code(base_url, selection, style)
            return JSONResponse(payload)

        try:
            loaded = await _load(selection, style)
        except VerseRangeError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except FetchFailedError as exc:
            raise HTTPException(status_code=502, detail="Failed to load verses") from exc
        effective = loaded.resolved.selection if loaded.resolved else selection
        payload["code"] = synthesize_static_html(loaded.verses, loaded.chapter, effective, style, dir)
        if loaded.resolved is not None:
            payload["range"] = loaded.resolved.as_payload()
        return JSONResponse(payload)

    @app.get("/embed/{chapter}/{verses}", response_class=HTMLResponse)
    async def embed_card(chapter: str, verses: str, request: Request) -> HTMLResponse:
        title = f"Quran - Surah {chapter}:{verses}"
        try:
            query = first_values(request.query_params.multi_items())
            selection, style = decode_parts(chapter, verses, query)
        except MalformedReferenceError as exc:
            debug_log(f"Invalid embed reference {chapter}/{verses}: {exc}")
            return HTMLResponse(
                render_message_page(
                    title,
                    "Please check the Surah and Ayah numbers.",
                    heading="Invalid Verse",
                ),
                status_code=400,
            )
        try:
            loaded = await _load(selection, style)
        except VerseRangeError as exc:
            return HTMLResponse(render_message_page(title, str(exc)), status_code=422)
        except FetchFailedError as exc:
            debug_log(f"Embed load failed for {chapter}/{verses}: {exc}")
            return HTMLResponse(render_message_page(title, "Failed to load verses"), status_code=502)

        effective = loaded.resolved.selection if loaded.resolved else selection
        layout = build_card_layout(loaded.verses, loaded.chapter, effective, style, "ltr")
        return HTMLResponse(render_embed_page(render_card(layout), title))

    return app


__all__ = ["WebConfig", "EXPORT_FORMATS", "create_app"]
