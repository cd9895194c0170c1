from __future__ import annotations

import logging
from pathlib import Path

from adapters.filesystem.json_utils import load_json
from adapters.memory.sentence_repository import InMemorySentenceRepository
from domain.models import SentenceCollection

logger = logging.getLogger(__name__)


class FileSystemSentenceRepository(InMemorySentenceRepository):
    def __init__(self, path: Path, collection: SentenceCollection) -> None:
        super().__init__(collection)
        self.path = path

    @classmethod
    def from_path(cls, path: Path) -> FileSystemSentenceRepository:
        if not path.exists():
            logger.warning("Sentence data file not found: %s", path)
            return cls(path, SentenceCollection())
        return cls(path, SentenceCollection.model_validate(load_json(path)))
