"""Typer CLI entrypoint for evimport."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Literal, cast

import typer

from apps.cli.format_human import render_parse_outcome
from apps.cli.io import default_store_path, dump_json, load_import_context, read_input_text
from core.config.models import MatchingSettings
from core.config.settings_loader import load_settings
from core.enrich.models import ImportContext
from core.enrich.summary import summarize
from core.learning.backends import JsonFileBackend
from core.learning.store import LearningStore
from core.matching.similarity import MatchType
from core.orchestrator.pipeline import parse_event_data
from core.utils.errors import ContextLoadError, SettingsError

app = typer.Typer(help="Pasted event data import CLI", rich_markup_mode=None)
OutputMode = Literal["human", "json"]

_MATCH_TYPES = ("event", "property", "value")


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep subcommands explicit."""


@app.command("parse")
def parse_command(
    input_path: Annotated[
        Path | None,
        typer.Argument(help="File holding the pasted text; '-' or omitted reads stdin."),
    ] = None,
    context: Annotated[
        Path | None,
        typer.Option(exists=True, dir_okay=False, help="Import context JSON file."),
    ] = None,
    scope: Annotated[
        str | None, typer.Option(help="Scope (product) id used for learned matches.")
    ] = None,
    store: Annotated[Path | None, typer.Option(help="Learned matches JSON file.")] = None,
    settings: Annotated[
        Path | None, typer.Option(exists=True, dir_okay=False, help="Settings YAML file.")
    ] = None,
    output: Annotated[str, typer.Option()] = "human",
    verbose: Annotated[bool, typer.Option("--verbose", help="Log pipeline events.")] = False,
) -> None:
    """Parse pasted event data and print the result."""

    _configure_logging(verbose)
    normalized_output = output.lower().strip()
    if normalized_output not in {"human", "json"}:
        typer.echo("ERROR: --output must be one of: human, json.")
        raise typer.Exit(code=1)
    output_mode = cast(OutputMode, normalized_output)

    if context is not None and not scope:
        typer.echo("ERROR: --scope is required with --context.")
        raise typer.Exit(code=1)

    try:
        settings_model = load_settings(settings)
        import_context = load_import_context(context) if context is not None else None
    except (SettingsError, ContextLoadError) as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    try:
        raw_text = read_input_text(input_path)
    except OSError as exc:
        typer.echo(f"ERROR: cannot read input: {exc}")
        raise typer.Exit(code=1) from exc

    outcome = _run_parse(raw_text, import_context, scope, store, settings_model)

    if output_mode == "json":
        payload = outcome.model_dump(mode="json")
        summary = summarize(outcome)
        if summary is not None:
            payload["summary"] = summary.model_dump(mode="json")
        typer.echo(dump_json(payload))
    else:
        typer.echo(render_parse_outcome(outcome))

    raise typer.Exit(code=0 if outcome.success else 2)


@app.command("learn")
def learn_command(
    user_input: Annotated[str, typer.Option("--input", help="What the user pasted.")],
    accepted: Annotated[str, typer.Option(help="Suggestion the user accepted.")],
    scope: Annotated[str, typer.Option(help="Scope (product) id.")],
    match_type: Annotated[str, typer.Option("--type", help="event, property or value.")],
    store: Annotated[Path | None, typer.Option(help="Learned matches JSON file.")] = None,
    settings: Annotated[
        Path | None, typer.Option(exists=True, dir_okay=False, help="Settings YAML file.")
    ] = None,
) -> None:
    """Record a user-accepted suggestion."""

    normalized_type = match_type.lower().strip()
    if normalized_type not in _MATCH_TYPES:
        typer.echo(f"ERROR: --type must be one of: {', '.join(_MATCH_TYPES)}.")
        raise typer.Exit(code=1)

    learning_store = _open_store_or_exit(store, settings)
    match = learning_store.record_accepted_match(
        user_input, accepted, scope, cast(MatchType, normalized_type)
    )
    typer.echo(f"INFO: learned {match.user_input!r} -> {match.accepted_suggestion!r}")


@app.command("stats")
def stats_command(
    store: Annotated[Path | None, typer.Option(help="Learned matches JSON file.")] = None,
    settings: Annotated[
        Path | None, typer.Option(exists=True, dir_okay=False, help="Settings YAML file.")
    ] = None,
) -> None:
    """Print learned match statistics as JSON."""

    learning_store = _open_store_or_exit(store, settings)
    typer.echo(dump_json(learning_store.stats().model_dump(mode="json")))


@app.command("clear")
def clear_command(
    store: Annotated[Path | None, typer.Option(help="Learned matches JSON file.")] = None,
) -> None:
    """Forget every learned match."""

    learning_store = _open_store_or_exit(store, None)
    learning_store.clear()
    typer.echo("INFO: learned matches cleared")


def _run_parse(
    raw_text: str,
    import_context: ImportContext | None,
    scope: str | None,
    store: Path | None,
    settings: MatchingSettings,
):
    if import_context is None:
        return parse_event_data(raw_text, settings=settings)

    learning_store = build_learning_store(store or default_store_path(), settings)
    return parse_event_data(
        raw_text,
        import_context,
        scope,
        boost_source=learning_store,
        settings=settings,
    )


def build_learning_store(path: Path, settings: MatchingSettings) -> LearningStore:
    """Open the file-backed learning store configured by ``settings``."""

    return LearningStore(
        JsonFileBackend(path),
        max_stored=settings.learning.max_stored,
        decay_period=settings.learning.decay_period,
        max_boost=settings.learning.max_boost,
    )


def _open_store_or_exit(store: Path | None, settings: Path | None) -> LearningStore:
    try:
        settings_model = load_settings(settings)
    except SettingsError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc
    return build_learning_store(store or default_store_path(), settings_model)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
