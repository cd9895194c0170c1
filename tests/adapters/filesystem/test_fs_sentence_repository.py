from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from adapters.filesystem.json_utils import parse_json_bytes
from adapters.filesystem.sentence_repository import FileSystemSentenceRepository
from tests.helpers.sentence_fixtures import sample_collection_payload


def test_missing_file_yields_empty_repository(tmp_path: Path) -> None:
    repository = FileSystemSentenceRepository.from_path(tmp_path / "absent.json")

    assert repository.sentence_ids() == []
    assert repository.languages() == ["en"]


def test_loads_sentences_and_languages(data_dir: Path) -> None:
    repository = FileSystemSentenceRepository.from_path(data_dir / "default.json")

    sentence = repository.get("s-sections")
    assert sentence is not None
    assert repository.languages() == ["en", "de"]
    assert [section.name for section in sentence.details("en") or []] == ["Syntax tree", "Logic"]


def test_duplicate_sentence_ids_are_rejected(tmp_path: Path) -> None:
    payload = sample_collection_payload()
    payload["sentences"].append(payload["sentences"][-1])
    path = tmp_path / "dup.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ValidationError):
        FileSystemSentenceRepository.from_path(path)


def test_parse_json_bytes_accepts_bom() -> None:
    raw = b"\xef\xbb\xbf" + b'{"languages": ["en"]}'

    assert parse_json_bytes(raw) == {"languages": ["en"]}


def test_parse_json_bytes_ignores_non_object_payloads() -> None:
    assert parse_json_bytes(b"[1, 2]") == {}
