from __future__ import annotations

import json
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.backend import BackendRegistry
from app.config import AppSettings, WikiSettings
from tests.helpers.sentence_fixtures import sample_collection_payload


def _clear_sw_env() -> None:
    for key in list(os.environ):
        if key.startswith("SW_"):
            os.environ.pop(key, None)


_clear_sw_env()


@pytest.fixture(autouse=True)
def clear_sw_env() -> Generator[None, None, None]:
    _clear_sw_env()
    yield
    _clear_sw_env()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir(parents=True)
    (directory / "default.json").write_text(
        json.dumps(sample_collection_payload()), encoding="utf-8"
    )
    return directory


@pytest.fixture
def wiki_settings(tmp_path: Path, data_dir: Path) -> WikiSettings:
    return WikiSettings(
        title="Test Wiki",
        instance_params={"ontology": "default"},
        context_params={"datadir": str(data_dir), "logdir": str(tmp_path / "logs")},
        backend_wait_timeout_seconds=2.0,
        file_logging=False,
    )


@pytest.fixture
def wiki_settings_factory(wiki_settings: WikiSettings) -> Callable[..., WikiSettings]:
    def _factory(**overrides: object) -> WikiSettings:
        return wiki_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(wiki_settings: WikiSettings) -> AppSettings:
    return AppSettings(wiki=wiki_settings)


@pytest.fixture
def app_settings_factory(
    wiki_settings_factory: Callable[..., WikiSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(wiki=wiki_settings_factory(**overrides))

    return _factory


@pytest.fixture
def registry() -> BackendRegistry:
    return BackendRegistry(poll_interval_seconds=0.01)
