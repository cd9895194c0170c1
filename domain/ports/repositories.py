from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import Sentence


class SentenceRepository(Protocol):
    def get(self, sentence_id: str) -> Sentence | None: ...

    def sentence_ids(self) -> Sequence[str]: ...

    def languages(self) -> Sequence[str]: ...
