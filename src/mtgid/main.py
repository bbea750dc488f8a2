"""Command-line entrypoint for the card identifier."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from .batch import BatchIdentifier
from .client import CardIdentifier
from .config import IdentifierConfig, MissingAPIKey, load_env, read_api_key, read_organization
from .examples import load_examples
from .models import IdentificationResult
from .report import ProgressDisplay, render_report

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help="Identify Magic: The Gathering cards from photographs using a vision model.")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Shortcut for --log-level DEBUG."),
) -> None:
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _read_config(
    input_dir: Path,
    examples_dir: Path,
    model: Optional[str],
    max_retries: int,
    delay: float,
    max_edge: int,
    dry_run: bool,
) -> IdentifierConfig:
    kwargs = {
        "unidentified_dir": input_dir,
        "examples_dir": examples_dir,
        "max_retries": max_retries,
        "request_delay": delay,
        "image_max_edge": max_edge or None,
        "dry_run": dry_run,
    }
    if model:
        kwargs["api_model"] = model
    return IdentifierConfig(**kwargs)


def _build_identifier(config: IdentifierConfig, api_key: Optional[str], console: Console) -> CardIdentifier:
    examples = load_examples(config.examples_dir)
    if examples.found:
        console.print(f"[blue]Loaded {len(examples)} example cards from {config.examples_dir}.[/blue]")
    else:
        console.print(f"[yellow]Examples directory {config.examples_dir} not found; continuing without examples.[/yellow]")
    return CardIdentifier(
        config.api_model,
        api_key=api_key,
        organization=None if config.dry_run else read_organization(),
        examples=examples,
        temperature=config.temperature,
        max_output_tokens=config.max_output_tokens,
        image_max_edge=config.image_max_edge,
        timeout=config.request_timeout,
        dry_run=config.dry_run,
    )


def _run(config: IdentifierConfig, api_key: Optional[str], console: Console) -> List[IdentificationResult]:
    identifier = _build_identifier(config, api_key, console)
    batch = BatchIdentifier(
        identifier,
        max_retries=config.max_retries,
        request_delay=config.request_delay,
        extensions=config.allowed_extensions,
    )
    console.print(f"[blue]Scanning for unidentified cards in {config.unidentified_dir}...[/blue]")
    scan = batch.discover(config.unidentified_dir)
    if not scan.found:
        console.print(f"[yellow]Could not read {config.unidentified_dir}.[/yellow]")
    if not scan:
        console.print("[yellow]No unidentified card images found.[/yellow]")
        return []
    console.print(f"[blue]Found {len(scan)} unidentified card images.[/blue]")
    with ProgressDisplay(len(scan), console=console) as progress:
        return batch.run(scan.files, on_status=progress.on_status)


@app.command("identify")
def identify_cards(
    input_dir: Path = typer.Option(Path("Unidentified"), help="Directory of card photographs."),
    examples_dir: Path = typer.Option(Path("Examples"), help="Directory of example image + JSON label pairs."),
    model: Optional[str] = typer.Option(None, help="Vision model name (defaults to $MTGID_MODEL or gpt-4.1-mini)."),
    max_retries: int = typer.Option(3, min=0, help="Retries per image on validation failure or rate limiting."),
    delay: float = typer.Option(1.0, min=0.0, help="Seconds to wait between images."),
    max_edge: int = typer.Option(1568, min=0, help="Downscale images above this edge length; 0 disables."),
    dry_run: bool = typer.Option(False, help="Run without contacting the API and emit synthetic records."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON instead of tables."),
) -> None:
    """Identify every card image in the input directory."""

    load_env(Path.cwd())
    config = _read_config(input_dir, examples_dir, model, max_retries, delay, max_edge, dry_run)
    console = Console(stderr=as_json)

    api_key = None
    if not config.dry_run:
        try:
            api_key = read_api_key()
        except MissingAPIKey as exc:
            console.print(f"[bold red]Error: {exc}[/bold red]")
            raise typer.Exit(code=1)

    try:
        results = _run(config, api_key, console)
    except Exception:
        LOGGER.exception("Unhandled error")
        console.print("[bold red]Unhandled error; see log output for details.[/bold red]")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([result.dict() for result in results], indent=2, ensure_ascii=False))
    elif results:
        render_report(results, console)


@app.command("examples")
def list_examples(
    examples_dir: Path = typer.Option(Path("Examples"), help="Directory of example image + JSON label pairs."),
) -> None:
    """List the example pairs that would prime the model, without calling it."""

    examples = load_examples(examples_dir.expanduser().resolve())
    if not examples.found:
        typer.echo(f"Examples directory {examples_dir} not found.", err=True)
    payload = [pair.as_payload() for pair in examples]
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
