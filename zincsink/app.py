"""Typer CLI entrypoint for zincsink."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Optional

import httpx
import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .client import connect_from_config
from .config import ConfigRepository, SinkSettings
from .engine import DocumentSink, ExporterStats
from .errors import ZincSinkError
from .logging_conf import configure_logging

app = typer.Typer(
    help="Ship JSON documents to ZincSearch in batches.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Settings file commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(config_app, name="config")

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    config_path: Path | None = None
    verbose: bool = False
    transport: httpx.BaseTransport | None = None

    def load_settings(self) -> SinkSettings:
        try:
            return self.repository.load_settings(self.config_path)
        except (ValidationError, ValueError, FileNotFoundError) as exc:
            console.print(f"Invalid settings: {exc}", style="red", markup=False)
            raise typer.Exit(code=2) from exc


def build_state(verbose: bool, config_path: Path | None) -> AppState:
    return AppState(repository=ConfigRepository(), config_path=config_path, verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False, config_path=None)
        ctx.obj = state
    return state


def _iter_records(stream: IO[str]) -> Iterator[tuple[int, str]]:
    for lineno, line in enumerate(stream, start=1):
        text = line.strip()
        if text:
            yield lineno, text


def _render_stats(stats: ExporterStats, skipped: int) -> Table:
    table = Table(title="Shipping summary", box=box.SIMPLE_HEAVY)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("accepted", str(stats.records_accepted))
    table.add_row("skipped", str(skipped))
    table.add_row("sent", str(stats.records_sent))
    table.add_row("batches", str(stats.batches_sent))
    table.add_row("flush failures", str(stats.flush_failures))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings file (YAML or JSON)."),
) -> None:
    ctx.obj = build_state(verbose, config)


@app.command("ping", help="Check the backend health endpoint.")
def ping(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    settings = state.load_settings()
    sink = DocumentSink(
        settings.host,
        settings.user,
        settings.password,
        settings.index,
        transport=state.transport,
        timeout=settings.timeout,
    )
    try:
        sink.health_check()
    except ZincSinkError as exc:
        console.print(f"Backend unhealthy at {sink.endpoints.health}: {exc}", style="red", markup=False)
        raise typer.Exit(code=1) from exc
    finally:
        sink.close()
    console.print(f"Backend healthy at {sink.endpoints.health}", style="green")


@app.command("ship", help="Stream JSON lines from a file (or stdin) into the index.")
def ship(
    ctx: typer.Context,
    source: Path = typer.Argument(Path("-"), help="JSON lines file, '-' for stdin."),
    flush_interval: Optional[float] = typer.Option(
        None, "--flush-interval", min=0.001, help="Override seconds between flushes."
    ),
) -> None:
    state = _get_state(ctx)
    settings = state.load_settings()
    logger = configure_logging(
        verbose=state.verbose or settings.verbose, log_file=settings.log_file
    ).bind(command="ship")
    try:
        stream = sys.stdin if str(source) == "-" else source.open("r", encoding="utf-8")
    except OSError as exc:
        console.print(f"Cannot read {source}: {exc}", style="red", markup=False)
        raise typer.Exit(code=2) from exc

    overrides: dict = {"transport": state.transport}
    if flush_interval is not None:
        overrides["flush_interval"] = flush_interval
    try:
        exporter = connect_from_config(settings, **overrides)
    except ZincSinkError as exc:
        if stream is not sys.stdin:
            stream.close()
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    skipped = 0
    try:
        with exporter:
            for lineno, text in _iter_records(stream):
                try:
                    document = json.loads(text)
                except json.JSONDecodeError as exc:
                    logger.warning("record_skipped", line=lineno, error=str(exc))
                    skipped += 1
                    continue
                if not isinstance(document, dict):
                    logger.warning("record_skipped", line=lineno, error="not a JSON object")
                    skipped += 1
                    continue
                exporter.write(text.encode("utf-8"))
    finally:
        if stream is not sys.stdin:
            stream.close()

    console.print(_render_stats(exporter.stats, skipped))
    if exporter.last_error is not None:
        console.print(f"Final flush failed: {exporter.last_error}", style="red", markup=False)
        raise typer.Exit(code=1)


@config_app.command("init", help="Write a settings file.")
def config_init(
    ctx: typer.Context,
    index: str = typer.Option(..., "--index", help="Target index name."),
    host: str = typer.Option("http://localhost:4080", "--host"),
    user: str = typer.Option("admin", "--user"),
    password: str = typer.Option("", "--password"),
    flush_interval: float = typer.Option(1.0, "--flush-interval", min=0.001),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.config_path or state.repository.locator.settings_path()
    if path.exists() and not force:
        console.print(f"Settings file already exists: {path} (use --force to overwrite)", style="yellow")
        raise typer.Exit(code=1)
    try:
        settings = SinkSettings(
            host=host, user=user, password=password, index=index, flush_interval=flush_interval
        )
    except ValidationError as exc:
        console.print(f"Invalid settings: {exc}", style="red", markup=False)
        raise typer.Exit(code=2) from exc
    state.repository.save_settings(settings, path)
    console.print(f"Settings written to {path}", style="green")


@config_app.command("show", help="Print the effective settings (password masked).")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    settings = state.load_settings()
    console.print(yaml.safe_dump(settings.masked(), allow_unicode=True, sort_keys=False), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
