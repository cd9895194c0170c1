from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from adapters.memory.sentence_repository import InMemorySentenceRepository
from app.backend import SharedBackend
from domain.models import SentenceCollection


def sample_collection_payload() -> dict[str, Any]:
    return {
        "languages": ["en", "de"],
        "sentences": [
            {
                "sentence_id": "s-alternatives",
                "texts": {
                    "en": [
                        "Every man is a human.",
                        "Each man is a human.",
                        "All men are humans.",
                    ],
                    "de": ["Jeder Mann ist ein Mensch."],
                },
                "has_translations": True,
            },
            {
                "sentence_id": "s-sections",
                "texts": {"en": ["John likes Mary."]},
                "details": {
                    "en": [
                        {"name": "Syntax tree", "rich_text": "<b>tree</b>"},
                        {"name": "Logic", "rich_text": "likes(John, Mary)"},
                    ]
                },
            },
            {
                "sentence_id": "s-plain",
                "texts": {"en": ["Mary_Smith   waits."]},
            },
        ],
    }


def sample_collection() -> SentenceCollection:
    return SentenceCollection.model_validate(sample_collection_payload())


class FakeEngineClient:
    kind = "fake"

    def __init__(self) -> None:
        self.closed = False
        self.parsed: list[str] = []

    def parse(self, text: str, language: str = "en") -> str:
        self.parsed.append(text)
        return f"<drs>{text}</drs>"

    def close(self) -> None:
        self.closed = True


def build_fake_backend(parameters: Mapping[str, str]) -> SharedBackend:
    return SharedBackend(
        parameters,
        repository=InMemorySentenceRepository(sample_collection()),
        engine=FakeEngineClient(),
    )
