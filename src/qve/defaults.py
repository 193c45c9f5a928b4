from __future__ import annotations

DEFAULT_API_BASE = "https://api.alquran.cloud/v1"
DEFAULT_ORIGINAL_EDITION = "quran-uthmani"
DEFAULT_TRANSLATION_EDITION = "en.sahih"
DEFAULT_REQUEST_TIMEOUT = 30.0

# Upper bound on verses rendered into a single card.
MAX_VERSES_LIMIT = 30
CHAPTER_COUNT = 114

DEFAULT_ACCENT_COLOR = "#f97316"
DEFAULT_BACKGROUND_COLOR = "#1c2331"
DEFAULT_TEXT_COLOR = "#ffffff"
DEFAULT_THEME = "dark"

DEFAULT_CHAPTER = 1
DEFAULT_FROM_VERSE = 1
DEFAULT_TO_VERSE = 1

ACCENT_PRESETS: tuple[tuple[str, str], ...] = (
    ("Orange", "#f97316"),
    ("Gold", "#f59e0b"),
    ("Emerald", "#10b981"),
    ("Blue", "#3b82f6"),
    ("Purple", "#8b5cf6"),
    ("Rose", "#f43f5e"),
    ("Teal", "#14b8a6"),
    ("Indigo", "#6366f1"),
)

BACKGROUND_PRESETS: tuple[tuple[str, str], ...] = (
    ("Navy", "#1c2331"),
    ("Black", "#0a0a0a"),
    ("Dark Gray", "#1f2937"),
    ("Dark Blue", "#1e3a5f"),
    ("Dark Green", "#14532d"),
    ("White", "#ffffff"),
    ("Light Gray", "#f3f4f6"),
    ("Cream", "#fef3c7"),
)

TEXT_COLOR_PRESETS: tuple[tuple[str, str], ...] = (
    ("White", "#ffffff"),
    ("Light Gray", "#e5e7eb"),
    ("Black", "#000000"),
    ("Dark Gray", "#374151"),
    ("Gold", "#fbbf24"),
    ("Orange", "#f97316"),
)
