from __future__ import annotations

from collections.abc import Sequence

from domain.models import Sentence
from domain.pages import (
    ALTERNATIVES_HEADING,
    DETAILS_EMPTY_TEXT,
    TAB_SENTENCE,
    TAB_TRANSLATIONS,
    TRANSLATIONS_EMPTY_TEXT,
    ComposedPage,
    ContentBlock,
    PageTab,
    details_page_ref,
    translations_page_ref,
)
from domain.services.language_utils import pretty_print


def build_sentence_tabs(
    is_multilingual: bool, selected: str = TAB_SENTENCE
) -> tuple[PageTab, ...]:
    tabs = [PageTab(tab_id=TAB_SENTENCE, label="Sentence", selected=selected == TAB_SENTENCE)]
    if is_multilingual:
        tabs.append(
            PageTab(
                tab_id=TAB_TRANSLATIONS,
                label="Translations",
                selected=selected == TAB_TRANSLATIONS,
            )
        )
    return tuple(tabs)


def compose_details_page(
    sentence: Sentence,
    language: str,
    is_multilingual: bool,
) -> ComposedPage:
    variants = sentence.texts.get(language, [])
    sections = sentence.details(language) or []

    blocks: list[ContentBlock] = []
    empty = True

    if len(variants) > 1:
        empty = False
        blocks.append(
            ContentBlock(
                kind="alternatives",
                heading=ALTERNATIVES_HEADING,
                items=tuple(variant.text for variant in variants),
            )
        )

    for section in sections:
        empty = False
        blocks.append(
            ContentBlock(kind="section", heading=section.name, rich_text=section.rich_text)
        )

    if empty:
        blocks.append(ContentBlock(kind="empty", rich_text=DETAILS_EMPTY_TEXT))

    return ComposedPage(
        ref=details_page_ref(sentence.sentence_id),
        language=language,
        title=pretty_print(sentence.text(language)),
        tabs=build_sentence_tabs(is_multilingual),
        blocks=tuple(blocks),
    )


def compose_translations_page(
    sentence: Sentence,
    language: str,
    languages: Sequence[str],
) -> ComposedPage:
    blocks: list[ContentBlock] = []
    for content_language in languages if sentence.has_translations else ():
        if content_language == language or not sentence.has_language(content_language):
            continue
        blocks.append(
            ContentBlock(
                kind="translation",
                heading=content_language,
                language=content_language,
                items=(pretty_print(sentence.text(content_language)),),
            )
        )
    if not blocks:
        blocks.append(ContentBlock(kind="empty", rich_text=TRANSLATIONS_EMPTY_TEXT))

    return ComposedPage(
        ref=translations_page_ref(sentence.sentence_id),
        language=language,
        title=pretty_print(sentence.text(language)),
        tabs=build_sentence_tabs(True, selected=TAB_TRANSLATIONS),
        blocks=tuple(blocks),
    )
