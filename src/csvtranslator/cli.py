"""CLI interface for csvtranslator using Typer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from csvtranslator import __version__
from csvtranslator.backends.base import TranslationBackend
from csvtranslator.pipeline import (
    DEFAULT_ROW_TIMEOUT,
    BatchResult,
    ProgressCallback,
    UnknownLanguageError,
    check_languages,
    translate_file_async,
)
from csvtranslator.translation.languages import LANGUAGE_CODES, is_known_language

app = typer.Typer(
    name="csvtranslator",
    help="Batch-translate key,value text files with Google's web translator.",
    add_completion=False,
)
console = Console()

_verbose = False
_quiet = False


def _print(msg: str, *, verbose_only: bool = False) -> None:
    """Print respecting --verbose/--quiet flags. Errors bypass --quiet."""
    if _quiet:
        return
    if verbose_only and not _verbose:
        return
    console.print(msg)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    logging.getLogger("csvtranslator").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _create_backend(use_dummy: bool, insecure: bool) -> tuple[TranslationBackend, str]:
    """Create a translation backend instance.

    Returns:
        Tuple of (backend_instance, backend_label_for_report).
    """
    if use_dummy:
        from csvtranslator.backends.dummy import DummyBackend
        return DummyBackend(), "dummy"

    from csvtranslator.backends.google import GoogleWebBackend
    label = "google-web:insecure" if insecure else "google-web"
    return GoogleWebBackend(insecure=insecure), label


async def _run_batch(
    file: Path,
    source: str,
    target: str,
    *,
    backend: TranslationBackend,
    output: Path | None,
    timeout: float,
    strict: bool,
    on_progress: ProgressCallback,
) -> BatchResult:
    async with backend:
        return await translate_file_async(
            file, source, target, on_progress,
            backend=backend,
            output=output,
            timeout=timeout,
            strict=strict,
        )


def version_callback(value: bool) -> None:
    if value:
        console.print(f"csvtranslator {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log every translated row and timing.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors.",
    ),
) -> None:
    """csvtranslator: Translate key,value text files automatically."""
    global _verbose, _quiet
    _verbose = verbose
    _quiet = quiet
    _setup_logging(verbose)


@app.command()
def translate(
    file: Path = typer.Argument(
        ..., help="Path to the key,value file to translate.",
    ),
    source: str = typer.Option(
        "English", "--from", "-f",
        envvar="CSVTRANSLATOR_SOURCE",
        help="Source language name (e.g. English).",
    ),
    target: str = typer.Option(
        ..., "--to", "-t",
        envvar="CSVTRANSLATOR_TARGET",
        help="Target language name (e.g. French).",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Output file path. Defaults to <name>-<code>.<ext>.",
    ),
    report: Path | None = typer.Option(
        None, "--report", "-r",
        help="Save report to file (json/md/csv).",
    ),
    timeout: float = typer.Option(
        DEFAULT_ROW_TIMEOUT, "--timeout",
        help="Per-row timeout in seconds.",
    ),
    insecure: bool = typer.Option(
        False, "--insecure",
        envvar="CSVTRANSLATOR_INSECURE",
        help="Skip TLS certificate verification for translation requests.",
    ),
    strict: bool = typer.Option(
        False, "--strict",
        help="Reject unknown languages and fail rows that lose tokens.",
    ),
    use_dummy: bool = typer.Option(
        False, "--dummy",
        help="Use the offline dummy backend.",
    ),
) -> None:
    """Translate a key,value file."""
    from csvtranslator.reporting.formatters import save_report
    from csvtranslator.reporting.report import TranslationReport

    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    if strict:
        try:
            check_languages(source, target)
        except UnknownLanguageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from e
    else:
        for name in (source, target):
            if not is_known_language(name):
                _print(
                    f"[yellow]Warning:[/yellow] Unknown language {name!r};"
                    " sending an empty code."
                )

    backend, label = _create_backend(use_dummy, insecure)
    rpt = TranslationReport(source_lang=source, target_lang=target, backend=label)
    _print(f"Backend: [cyan]{label}[/cyan]", verbose_only=True)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=_quiet,
    ) as progress:
        task = progress.add_task("Translating", total=None)

        def _on_progress(completed: int, total: int, line: str) -> None:
            progress.update(task, completed=completed, total=total)

        batch = asyncio.run(
            _run_batch(
                file, source, target,
                backend=backend,
                output=output,
                timeout=timeout,
                strict=strict,
                on_progress=_on_progress,
            )
        )

    rpt.update_from_batch(batch)
    rpt.finish()

    if batch.rows_skipped:
        _print(f"Skipped [yellow]{batch.rows_skipped}[/yellow] malformed lines")
    _print(
        f"Translated [green]{batch.rows_translated}[/green]/{batch.rows_dispatched}"
        f" rows in {batch.elapsed_seconds:.1f}s",
    )
    _print(f"Saved: [cyan]{batch.output_file}[/cyan]")

    for key, warning in batch.warnings:
        _print(f"[yellow]Warning:[/yellow] {key}: {warning}", verbose_only=True)

    if report:
        save_report(rpt, report)
        _print(f"Report saved: [cyan]{report}[/cyan]")

    if batch.errors:
        table = Table(title=f"Failed rows ({len(batch.errors)})")
        table.add_column("Key", style="dim")
        table.add_column("Error", style="red")
        for key, message in batch.errors[:20]:
            table.add_row(key, message)
        console.print(table)
        raise typer.Exit(1)


@app.command()
def languages() -> None:
    """List supported language names and their codes."""
    table = Table(title="Supported languages")
    table.add_column("Language")
    table.add_column("Code", style="cyan")
    for name, code in sorted(LANGUAGE_CODES.items()):
        table.add_row(name, code)
    console.print(table)
