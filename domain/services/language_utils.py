from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def pretty_print(text: str | None) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.replace("_", " ")).strip()


def parse_language_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    languages: list[str] = []
    for part in raw.split(","):
        language = part.strip()
        if language and language not in languages:
            languages.append(language)
    return languages
