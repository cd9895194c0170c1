from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.filesystem.sentence_repository import FileSystemSentenceRepository
from app.backend_wiring import build_engine_client
from app.config import load_settings
from domain.models import DEFAULT_CONTENT_LANGUAGE
from domain.ports.engine import EngineError
from domain.services.compose_details_page import compose_details_page
from domain.services.resolve_parameters import resolve_parameters

app = typer.Typer(no_args_is_help=True)
console = Console()


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            console.print(f"[red]Expected KEY=VALUE for {option}:[/] {escape(pair)}")
            raise typer.Exit(code=2)
        parsed[key.strip()] = value
    return parsed


def _effective_parameters(
    instance: list[str], context: list[str], config_path: Path | None
) -> dict[str, str]:
    settings = load_settings(config_path)
    instance_params = {**settings.wiki.instance_params, **_parse_pairs(instance, "--instance")}
    context_params = {**settings.wiki.context_params, **_parse_pairs(context, "--context")}
    return resolve_parameters(instance_params, context_params)


@app.command("params")
def show_params(
    instance: list[str] = typer.Option(
        [], "--instance", "-i", help="Instance parameter KEY=VALUE."
    ),
    context: list[str] = typer.Option([], "--context", "-c", help="Context parameter KEY=VALUE."),
    config_path: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    parameters = _effective_parameters(instance, context, config_path)

    table = Table(title="Effective parameters")
    table.add_column("Key")
    table.add_column("Value")
    for key in sorted(parameters):
        table.add_row(key, parameters[key])
    console.print(table)


@app.command("parse")
def parse(
    text: str = typer.Argument(..., help="Sentence to send to the parser engine."),
    lang: str = typer.Option(DEFAULT_CONTENT_LANGUAGE, "--lang", help="Sentence language."),
    instance: list[str] = typer.Option(
        [], "--instance", "-i", help="Instance parameter KEY=VALUE."
    ),
    context: list[str] = typer.Option([], "--context", "-c", help="Context parameter KEY=VALUE."),
    config_path: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    parameters = _effective_parameters(instance, context, config_path)
    try:
        engine = build_engine_client(parameters)
    except ValueError as exc:
        console.print(f"[red]Invalid engine settings:[/] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    try:
        output = engine.parse(text, language=lang)
    except EngineError as exc:
        console.print(f"[red]Parser engine failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    finally:
        engine.close()
    console.print(output, markup=False, highlight=False, soft_wrap=True)


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Sentence data file to validate."),
) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {escape(str(input_path))}")
        raise typer.Exit(code=1)
    try:
        repository = FileSystemSentenceRepository.from_path(input_path)
    except (ValidationError, ValueError) as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    count = len(repository.sentence_ids())
    console.print(f"[green]Valid sentence data:[/] {escape(str(input_path))} ({count} sentences)")


@app.command("show")
def show(
    input_path: Path = typer.Argument(..., help="Sentence data file."),
    sentence_id: str = typer.Argument(..., help="Sentence to compose."),
    lang: str | None = typer.Option(None, "--lang", help="Display language."),
) -> None:
    repository = FileSystemSentenceRepository.from_path(input_path)
    sentence = repository.get(sentence_id)
    if sentence is None:
        console.print(f"[red]Sentence not found:[/] {escape(sentence_id)}")
        raise typer.Exit(code=1)
    languages = repository.languages()
    page = compose_details_page(sentence, lang or languages[0], len(languages) > 1)

    console.print(f"[bold]{escape(page.title)}[/]")
    console.print(" | ".join(tab.label for tab in page.tabs))
    for block in page.blocks:
        if block.kind == "alternatives":
            console.print(f"[cyan]{escape(block.heading)}[/]")
            for item in block.items:
                console.print(f"  {escape(item)}")
        elif block.kind == "section":
            console.print(f"[cyan]{escape(block.heading)}[/]")
            console.print(f"  {block.rich_text}", markup=False)
        else:
            console.print(f"[italic]{escape(block.rich_text)}[/]")


if __name__ == "__main__":
    app()
