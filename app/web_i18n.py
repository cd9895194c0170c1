from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final
from urllib.parse import urlencode

from domain.services.normalize_request import EXTERNAL_LANGUAGE_PARAM, EXTERNAL_PAGE_PARAM

DEFAULT_UI_LANGUAGE: Final[str] = "en"
SUPPORTED_UI_LANGUAGES: Final[set[str]] = {"en", "de"}

_GERMAN_TRANSLATIONS: Final[dict[str, str]] = {
    "Sentence": "Satz",
    "Translations": "Übersetzungen",
    "Alternatives": "Alternativen",
    "There are no details for this sentence.": "Zu diesem Satz gibt es keine Details.",
    "There are no translations for this sentence.": "Zu diesem Satz gibt es keine Übersetzungen.",
    "Start page": "Startseite",
    "Back": "Zurück",
    "Sentences": "Sätze",
    "No sentences available.": "Keine Sätze vorhanden.",
    "Language": "Sprache",
    "Backend unavailable": "Backend nicht verfügbar",
    "The wiki is starting up or shutting down. Try again later.": (
        "Das Wiki startet oder wird beendet. Bitte später erneut versuchen."
    ),
    "Sentence not found": "Satz nicht gefunden",
}

_LANGUAGE_LABELS: Final[dict[str, str]] = {
    "en": "English",
    "de": "Deutsch",
    "fr": "Français",
    "it": "Italiano",
    "es": "Español",
}


def normalize_ui_language(value: str | None) -> str | None:
    raw = str(value or "").strip().lower()
    if not raw:
        return None
    lang = raw.replace("_", "-").split("-", 1)[0]
    if lang in SUPPORTED_UI_LANGUAGES:
        return lang
    return None


def translate_ui_text(key: str, language: str) -> str:
    if normalize_ui_language(language) != "de":
        return key
    return _GERMAN_TRANSLATIONS.get(key, key)


def language_label(language: str) -> str:
    return _LANGUAGE_LABELS.get(language, language)


def preferred_content_language(accept_language: str, languages: list[str]) -> str | None:
    for part in accept_language.split(","):
        candidate = part.split(";", 1)[0].strip().lower().replace("_", "-")
        if not candidate:
            continue
        for language in languages:
            if language.lower() == candidate or language.lower() == candidate.split("-", 1)[0]:
                return language
    return None


@dataclass(frozen=True)
class UILocalizer:
    language: str
    overrides: Mapping[str, str] = field(default_factory=dict)

    def t(self, key: str) -> str:
        return self.overrides.get(key) or translate_ui_text(key, self.language)


def build_language_switch_url(target_language: str, page: str | None = None) -> str:
    params: list[tuple[str, str]] = []
    if page:
        params.append((EXTERNAL_PAGE_PARAM, page))
    params.append((EXTERNAL_LANGUAGE_PARAM, target_language))
    return f"/?{urlencode(params)}"
