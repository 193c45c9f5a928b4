from __future__ import annotations

import json
import os
import threading
from typing import Protocol

import requests
from requests.adapters import HTTPAdapter

from .defaults import (
    DEFAULT_API_BASE,
    DEFAULT_ORIGINAL_EDITION,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TRANSLATION_EDITION,
    MAX_VERSES_LIMIT,
)
from .logging_utils import debug_log
from .models import ChapterMetadata

_API_BASE_ENV = "QVE_API_BASE"


class ProviderError(RuntimeError):
    """Raised when the text provider returns an unexpected response."""


class ProviderUnavailableError(ConnectionError):
    """Raised when the text provider is unreachable."""


class VerseProvider(Protocol):
    def list_chapters(self) -> list[ChapterMetadata]: ...

    def fetch_original(self, chapter: int, verse: int) -> str: ...

    def fetch_translation(self, chapter: int, verse: int) -> str: ...


def resolve_api_base(api_base: str | None = None) -> str:
    candidate = api_base or os.environ.get(_API_BASE_ENV) or DEFAULT_API_BASE
    trimmed = candidate.strip()
    if not trimmed:
        raise ValueError("Provider base URL cannot be empty.")
    if "://" not in trimmed:
        trimmed = f"https://{trimmed}"
    return trimmed.rstrip("/")


class AlQuranClient:
    """
    Thin wrapper around the api.alquran.cloud REST API.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        *,
        original_edition: str = DEFAULT_ORIGINAL_EDITION,
        translation_edition: str = DEFAULT_TRANSLATION_EDITION,
    ) -> None:
        self.base_url = resolve_api_base(base_url)
        self.timeout = timeout
        self.original_edition = original_edition
        self.translation_edition = translation_edition
        self._session = requests.Session()
        # One range fetch issues two requests per verse at once.
        adapter = HTTPAdapter(pool_maxsize=MAX_VERSES_LIMIT * 2)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    def _get_data(self, path: str) -> object:
        url = f"{self.base_url}{path}"
        debug_log(f"GET {url}")
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderUnavailableError(f"Failed to contact provider at {url}") from exc

        if resp.status_code != 200:
            raise ProviderError(f"{path} failed with status {resp.status_code}: {resp.text}")

        try:
            payload = resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ProviderError(f"Provider returned invalid JSON for {path}") from exc

        if not isinstance(payload, dict):
            raise ProviderError(f"Provider returned an unexpected payload for {path}")
        code = payload.get("code")
        if code != 200:
            raise ProviderError(f"{path} returned code {code}: {payload.get('status')}")
        return payload.get("data")

    def list_chapters(self) -> list[ChapterMetadata]:
        data = self._get_data("/surah")
        if not isinstance(data, list):
            raise ProviderError("Provider returned no chapter list for /surah")
        try:
            chapters = [ChapterMetadata.from_payload(entry) for entry in data]
        except ValueError as exc:
            raise ProviderError(f"Invalid chapter metadata: {exc}") from exc
        chapters.sort(key=lambda chapter: chapter.number)
        return chapters

    def _fetch_verse_text(self, chapter: int, verse: int, edition: str) -> str:
        path = f"/ayah/{chapter}:{verse}/{edition}"
        data = self._get_data(path)
        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ProviderError(f"Provider returned no text for {path}")
        return text

    def fetch_original(self, chapter: int, verse: int) -> str:
        return self._fetch_verse_text(chapter, verse, self.original_edition)

    def fetch_translation(self, chapter: int, verse: int) -> str:
        return self._fetch_verse_text(chapter, verse, self.translation_edition)

    def close(self) -> None:
        self._session.close()


class ChapterCatalog:
    """Chapter metadata loaded from the provider once and reused afterwards."""

    def __init__(self, provider: VerseProvider) -> None:
        self._provider = provider
        self._lock = threading.Lock()
        self._chapters: dict[int, ChapterMetadata] | None = None

    def _by_number(self) -> dict[int, ChapterMetadata]:
        with self._lock:
            if self._chapters is None:
                loaded = sorted(self._provider.list_chapters(), key=lambda chapter: chapter.number)
                self._chapters = {chapter.number: chapter for chapter in loaded}
                debug_log(f"Loaded {len(loaded)} chapters")
            return self._chapters

    def chapters(self) -> list[ChapterMetadata]:
        return list(self._by_number().values())

    def get(self, number: int) -> ChapterMetadata | None:
        return self._by_number().get(number)


__all__ = [
    "ProviderError",
    "ProviderUnavailableError",
    "VerseProvider",
    "AlQuranClient",
    "ChapterCatalog",
    "resolve_api_base",
]
