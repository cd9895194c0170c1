from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import AppSettings, WikiSettings, load_settings


def test_defaults_without_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings()

    assert settings.wiki.backend is None
    assert settings.wiki.provide_backend is False
    assert settings.wiki.backend_wait_timeout_seconds == 60.0
    assert settings.wiki.session_cookie_name == "sw_session"


def test_env_overrides_nested_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SW_WIKI__BACKEND", "main")
    monkeypatch.setenv("SW_WIKI__INSTANCE_PARAMS", '{"ontology": "geo", "languages": "en,de"}')
    monkeypatch.setenv("SW_WIKI__S3__BUCKET", "wiki-data")

    settings = load_settings()

    assert settings.wiki.backend == "main"
    assert settings.wiki.instance_params == {"ontology": "geo", "languages": "en,de"}
    assert settings.wiki.s3.bucket == "wiki-data"


def test_yaml_config_is_loaded(tmp_path: Path) -> None:
    config_path = tmp_path / "app.yaml"
    config_path.write_text(
        "\n".join(
            [
                "wiki:",
                "  title: Geo Wiki",
                "  backend: geo",
                "  provide_backend: true",
                "  instance_params:",
                "    ontology: geo",
                "  context_params:",
                "    apecommand: /opt/ape/ape.exe",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.wiki.title == "Geo Wiki"
    assert settings.wiki.backend == "geo"
    assert settings.wiki.provide_backend is True
    assert settings.wiki.instance_params == {"ontology": "geo"}
    assert settings.wiki.context_params == {"apecommand": "/opt/ape/ape.exe"}


def test_config_path_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "wiki.yaml"
    config_path.write_text("wiki:\n  title: From Env\n", encoding="utf-8")
    monkeypatch.setenv("SW_CONFIG_PATH", str(config_path))

    assert load_settings().wiki.title == "From Env"


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml")


def test_blank_backend_means_no_shared_backend() -> None:
    assert WikiSettings(backend="  ").backend is None


def test_parameter_maps_must_be_objects() -> None:
    with pytest.raises(ValidationError):
        WikiSettings(instance_params="not json")
    with pytest.raises(ValidationError):
        WikiSettings(context_params="[1, 2]")


def test_wait_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        AppSettings(wiki=WikiSettings(backend_wait_timeout_seconds=0))
