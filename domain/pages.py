from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import quote

from domain.ports.repositories import SentenceRepository

BlockKind = Literal["alternatives", "section", "translation", "empty"]
PageKind = Literal["details", "translations"]

TAB_SENTENCE = "sentence"
TAB_TRANSLATIONS = "translations"

ALTERNATIVES_HEADING = "Alternatives"
DETAILS_EMPTY_TEXT = "There are no details for this sentence."
TRANSLATIONS_EMPTY_TEXT = "There are no translations for this sentence."


@dataclass(frozen=True)
class PageTab:
    tab_id: str
    label: str
    selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"tab_id": self.tab_id, "label": self.label, "selected": self.selected}


@dataclass(frozen=True)
class ContentBlock:
    kind: BlockKind
    heading: str = ""
    items: tuple[str, ...] = ()
    rich_text: str = ""
    language: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind}
        if self.heading:
            payload["heading"] = self.heading
        if self.kind == "alternatives":
            payload["items"] = list(self.items)
        if self.kind in {"section", "empty"}:
            payload["rich_text"] = self.rich_text
        if self.kind == "translation":
            payload["language"] = self.language
            payload["items"] = list(self.items)
        return payload


@dataclass(frozen=True)
class PageRef:
    kind: PageKind
    sentence_id: str

    @property
    def url(self) -> str:
        path = f"/sentences/{quote(self.sentence_id, safe='')}"
        if self.kind == "translations":
            return f"{path}/translations"
        return path

    def label(self, repository: SentenceRepository, languages: Sequence[str]) -> str:
        sentence = repository.get(self.sentence_id)
        if sentence is None:
            return self.sentence_id
        return sentence.text(languages[0]) if languages else sentence.text("")


def details_page_ref(sentence_id: str) -> PageRef:
    return PageRef(kind="details", sentence_id=sentence_id)


def translations_page_ref(sentence_id: str) -> PageRef:
    return PageRef(kind="translations", sentence_id=sentence_id)


@dataclass(frozen=True)
class ComposedPage:
    ref: PageRef
    language: str
    title: str
    tabs: tuple[PageTab, ...]
    blocks: tuple[ContentBlock, ...] = field(default_factory=tuple)

    def tab_url(self, tab_id: str) -> str:
        if tab_id == TAB_TRANSLATIONS:
            return translations_page_ref(self.ref.sentence_id).url
        return details_page_ref(self.ref.sentence_id).url

    @property
    def tab_ids(self) -> list[str]:
        return [tab.tab_id for tab in self.tabs]

    @property
    def selected_tab(self) -> str | None:
        for tab in self.tabs:
            if tab.selected:
                return tab.tab_id
        return None

    @property
    def is_empty(self) -> bool:
        return len(self.blocks) == 1 and self.blocks[0].kind == "empty"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.ref.kind,
            "sentence_id": self.ref.sentence_id,
            "language": self.language,
            "title": self.title,
            "tabs": [tab.to_dict() for tab in self.tabs],
            "blocks": [block.to_dict() for block in self.blocks],
        }
