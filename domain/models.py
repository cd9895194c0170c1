from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from pydantic import AliasChoices, BaseModel, Field, field_validator

DEFAULT_CONTENT_LANGUAGE = "en"


class TextVariant(BaseModel):
    text: str = Field(..., min_length=1)


class DetailSection(BaseModel):
    name: str = Field(..., min_length=1)
    rich_text: str = ""


class Sentence(BaseModel):
    sentence_id: str = Field(..., min_length=1)
    texts: Dict[str, List[TextVariant]]
    sections: Dict[str, List[DetailSection]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("sections", "details"),
    )
    has_translations: bool = False

    @field_validator("texts", mode="before")
    @classmethod
    def coerce_plain_variants(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        coerced: Dict[str, Any] = {}
        for language, variants in value.items():
            if isinstance(variants, str):
                variants = [variants]
            if isinstance(variants, list):
                variants = [
                    {"text": item} if isinstance(item, str) else item for item in variants
                ]
            coerced[str(language)] = variants
        return coerced

    @field_validator("texts", mode="after")
    @classmethod
    def ensure_variants_present(
        cls, texts: Dict[str, List[TextVariant]]
    ) -> Dict[str, List[TextVariant]]:
        if not texts:
            msg = "Sentence needs text in at least one language"
            raise ValueError(msg)
        for language, variants in texts.items():
            if not variants:
                msg = f"Sentence has no text variants for language: {language}"
                raise ValueError(msg)
        return texts

    def languages(self) -> List[str]:
        return list(self.texts.keys())

    def has_language(self, language: str) -> bool:
        return language in self.texts

    def variants(self, language: str) -> List[TextVariant]:
        variants = self.texts.get(language)
        if variants:
            return list(variants)
        return list(next(iter(self.texts.values())))

    def text(self, language: str) -> str:
        return self.variants(language)[0].text

    def details(self, language: str) -> Optional[List[DetailSection]]:
        sections = self.sections.get(language)
        if sections is None:
            return None
        return list(sections)


class SentenceCollection(BaseModel):
    languages: List[str] = Field(default_factory=lambda: [DEFAULT_CONTENT_LANGUAGE])
    sentences: List[Sentence] = Field(default_factory=list)

    @field_validator("languages", mode="after")
    @classmethod
    def ensure_languages(cls, languages: List[str]) -> List[str]:
        cleaned = [language.strip() for language in languages if language.strip()]
        return cleaned or [DEFAULT_CONTENT_LANGUAGE]

    @field_validator("sentences", mode="after")
    @classmethod
    def ensure_unique_sentence_ids(cls, sentences: List[Sentence]) -> List[Sentence]:
        seen: Set[str] = set()
        for sentence in sentences:
            if sentence.sentence_id in seen:
                msg = f"Duplicate sentence_id found: {sentence.sentence_id}"
                raise ValueError(msg)
            seen.add(sentence.sentence_id)
        return sentences

    def get(self, sentence_id: str) -> Optional[Sentence]:
        for sentence in self.sentences:
            if sentence.sentence_id == sentence_id:
                return sentence
        return None

    def sentence_ids(self) -> List[str]:
        return [sentence.sentence_id for sentence in self.sentences]
