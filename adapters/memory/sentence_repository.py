from __future__ import annotations

from domain.models import Sentence, SentenceCollection
from domain.ports.repositories import SentenceRepository


class InMemorySentenceRepository(SentenceRepository):
    def __init__(self, collection: SentenceCollection | None = None) -> None:
        self._collection = collection or SentenceCollection()
        self._by_id = {sentence.sentence_id: sentence for sentence in self._collection.sentences}

    def get(self, sentence_id: str) -> Sentence | None:
        return self._by_id.get(sentence_id)

    def sentence_ids(self) -> list[str]:
        return self._collection.sentence_ids()

    def languages(self) -> list[str]:
        return list(self._collection.languages)
