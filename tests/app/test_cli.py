from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path

import pytest

from typer.testing import CliRunner

from app.cli import app
from tests.helpers.sentence_fixtures import sample_collection_payload

runner = CliRunner()


def _flat(output: str) -> str:
    return " ".join(output.split())


def test_params_prints_effective_parameters(tmp_path: Path) -> None:
    config_path = tmp_path / "app.yaml"
    config_path.write_text("wiki:\n  instance_params:\n    ontology: geo\n", encoding="utf-8")

    result = runner.invoke(
        app,
        ["params", "--config", str(config_path), "-i", "title=Geo", "-c", "logdir=/var/log/wiki"],
    )

    assert result.exit_code == 0
    assert "Effective parameters" in result.stdout
    assert "context:logdir" in result.stdout
    assert "/var/log/wiki" in result.stdout
    assert "context:datadir" in result.stdout
    assert "geo" in result.stdout


def test_params_rejects_malformed_pair(tmp_path: Path) -> None:
    config_path = tmp_path / "app.yaml"
    config_path.write_text("wiki: {}\n", encoding="utf-8")

    result = runner.invoke(app, ["params", "--config", str(config_path), "-i", "novalue"])

    assert result.exit_code == 2


def test_validate_accepts_sentence_data(data_dir: Path) -> None:
    result = runner.invoke(app, ["validate", str(data_dir / "default.json")])

    assert result.exit_code == 0
    assert "(3 sentences)" in _flat(result.stdout)


def test_validate_rejects_duplicate_ids(tmp_path: Path) -> None:
    payload = sample_collection_payload()
    payload["sentences"].append(payload["sentences"][0])
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Validation failed" in result.stdout


def test_show_composes_details_page(data_dir: Path) -> None:
    result = runner.invoke(app, ["show", str(data_dir / "default.json"), "s-sections"])

    assert result.exit_code == 0
    assert "John likes Mary." in result.stdout
    assert "Syntax tree" in result.stdout
    assert "<b>tree</b>" in result.stdout


def test_show_unknown_sentence_fails(data_dir: Path) -> None:
    result = runner.invoke(app, ["show", str(data_dir / "default.json"), "missing"])

    assert result.exit_code == 1


def test_parse_sends_sentence_to_local_engine(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    command = f'{shlex.quote(sys.executable)} -c "import sys; print(sys.argv[2].upper())"'

    result = runner.invoke(app, ["parse", "John waits.", "-c", f"apecommand={command}"])

    assert result.exit_code == 0
    assert "JOHN WAITS." in result.stdout


def test_parse_reports_engine_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(
        app, ["parse", "John waits.", "-c", "apecommand=/nonexistent/ape.exe"]
    )

    assert result.exit_code == 1
    assert "Parser engine failed" in result.stdout


def test_parse_rejects_incomplete_engine_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["parse", "John waits.", "-i", "engine=socket"])

    assert result.exit_code == 2
    assert "apeport" in _flat(result.stdout)
