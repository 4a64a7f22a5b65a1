"""Batch translation of ``key,value`` files.

Used by the CLI and by any other front end. Every row is dispatched at once
as its own asyncio task (fan-out), the batch is joined with
``asyncio.gather`` (fan-in), and the output file is written exactly once
after every row has completed or failed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from csvtranslator.backends.base import (
    TranslationBackend,
    TranslationError,
    TranslationResult,
    TranslationWarning,
)
from csvtranslator.core.rows import (
    Row,
    format_output_line,
    output_path_for,
    read_rows,
    write_output,
)
from csvtranslator.translation.languages import is_known_language, resolve

logger = logging.getLogger(__name__)

# Upper bound for one row, including the transport round trip.
DEFAULT_ROW_TIMEOUT = 60.0

# Type alias for progress callback: (completed, total, output_line)
ProgressCallback = Callable[[int, int, str], None]


class UnknownLanguageError(ValueError):
    """Raised in strict mode when a language name has no known code."""


class JobState(str, Enum):
    PENDING = "pending"
    DISPATCHED = "dispatched"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class TranslationJob:
    """A row bound to its slot in the output sequence."""
    row: Row
    slot: int
    state: JobState = JobState.PENDING
    result: TranslationResult | None = None


@dataclass
class BatchResult:
    """Result of a batch translation operation."""
    input_file: str = ""
    output_file: str = ""
    source_language: str = ""
    target_language: str = ""
    total_lines: int = 0
    rows_dispatched: int = 0
    rows_skipped: int = 0
    rows_translated: int = 0
    rows_failed: int = 0
    elapsed_seconds: float = 0.0
    translation_seconds: float = 0.0
    output: list[str] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[tuple[str, TranslationWarning]] = field(default_factory=list)


DoneCallback = Callable[[BatchResult], None]


def check_languages(*names: str) -> None:
    """Raise UnknownLanguageError for the first name missing from the table."""
    for name in names:
        if not is_known_language(name):
            raise UnknownLanguageError(f"Unknown language: {name!r}")


async def translate_rows(
    rows: Sequence[Row],
    source_language: str,
    target_language: str,
    backend: TranslationBackend,
    *,
    total_lines: int | None = None,
    on_progress: ProgressCallback | None = None,
    timeout: float | None = DEFAULT_ROW_TIMEOUT,
    strict: bool = False,
) -> BatchResult:
    """Translate all rows concurrently, keeping output in input order.

    Failed or timed-out rows still count toward completion; their slot holds
    ``key,""`` and the failure is listed in ``BatchResult.errors``. In strict
    mode, rows whose result carries warnings are failed too.

    Args:
        rows: Parsed input rows.
        source_language: Language name, e.g. "English".
        target_language: Language name, e.g. "French".
        backend: Backend used for every row.
        total_lines: Line count of the source file, for progress percentages.
            Defaults to ``len(rows)``.
        on_progress: Called once per completed row.
        timeout: Per-row limit in seconds, None for no limit.
        strict: Reject unknown language names upfront and fail rows with
            warnings.

    Raises:
        UnknownLanguageError: In strict mode, before any request is sent.
    """
    if strict:
        check_languages(source_language, target_language)

    if total_lines is None:
        total_lines = len(rows)

    batch = BatchResult(
        source_language=source_language,
        target_language=target_language,
        total_lines=total_lines,
        rows_skipped=max(total_lines - len(rows), 0),
    )

    # Reserve every slot before anything completes
    output: list[str] = []
    jobs: list[TranslationJob] = []
    for row in rows:
        jobs.append(TranslationJob(row=row, slot=len(output)))
        output.append("")

    completed = 0
    start = time.monotonic()

    async def _run(job: TranslationJob) -> None:
        nonlocal completed
        job.state = JobState.DISPATCHED
        job_start = time.monotonic()
        try:
            result = await asyncio.wait_for(
                backend.translate(job.row.value, source_language, target_language),
                timeout,
            )
        except asyncio.TimeoutError:
            result = TranslationResult(
                error=TranslationError(f"Timed out after {timeout}s"),
                elapsed=time.monotonic() - job_start,
            )
        except Exception as e:
            logger.debug("Backend raised for key %s", job.row.key, exc_info=True)
            result = TranslationResult(error=e)

        job.result = result
        failed = not result.ok or (strict and bool(result.warnings))
        job.state = JobState.FAILED if failed else JobState.COMPLETE

        line = format_output_line(job.row.key, "" if failed else result.text)
        output[job.slot] = line
        completed += 1

        percent = 100.0 * completed / total_lines if total_lines else 100.0
        logger.info("%.1f%% | %s", percent, line)
        if on_progress is not None:
            on_progress(completed, len(jobs), line)

    await asyncio.gather(*(_run(job) for job in jobs))

    for job in jobs:
        result = job.result
        assert result is not None
        batch.translation_seconds += result.elapsed
        for warning in result.warnings:
            batch.warnings.append((job.row.key, warning))
        if job.state == JobState.FAILED:
            batch.rows_failed += 1
            if result.error is not None:
                batch.errors.append((job.row.key, str(result.error)))
            else:
                reasons = "; ".join(str(w) for w in result.warnings)
                batch.errors.append((job.row.key, f"Rejected in strict mode: {reasons}"))
        else:
            batch.rows_translated += 1

    batch.rows_dispatched = len(jobs)
    batch.output = output
    batch.elapsed_seconds = time.monotonic() - start
    return batch


async def translate_file_async(
    path: str | Path,
    source_language: str,
    target_language: str,
    on_progress: ProgressCallback | None = None,
    on_done: DoneCallback | None = None,
    *,
    backend: TranslationBackend | None = None,
    output: str | Path | None = None,
    timeout: float | None = DEFAULT_ROW_TIMEOUT,
    strict: bool = False,
    insecure: bool = False,
) -> BatchResult:
    """Translate a file and write ``<stem>-<target code><ext>`` next to it.

    When ``backend`` is None a GoogleWebBackend is created (and closed)
    here; ``insecure`` only applies to that backend.
    """
    path = Path(path)
    rows, total_lines = read_rows(path)
    logger.info("Translating file: %s | totalLines: %d", path, total_lines)

    owns_backend = backend is None
    if backend is None:
        from csvtranslator.backends.google import GoogleWebBackend
        backend = GoogleWebBackend(insecure=insecure)

    started = time.monotonic()
    try:
        batch = await translate_rows(
            rows,
            source_language,
            target_language,
            backend,
            total_lines=total_lines,
            on_progress=on_progress,
            timeout=timeout,
            strict=strict,
        )
    finally:
        if owns_backend:
            await backend.aclose()

    if output is None:
        output = output_path_for(path, resolve(target_language) or target_language)
    output = Path(output)
    write_output(output, batch.output)

    batch.input_file = str(path)
    batch.output_file = str(output)
    batch.elapsed_seconds = time.monotonic() - started
    logger.info(
        "Done! Finished in: %.1f seconds. Output file: %s",
        batch.elapsed_seconds, output,
    )

    if on_done is not None:
        on_done(batch)
    return batch


def translate_file(
    path: str | Path,
    source_language: str,
    target_language: str,
    on_progress: ProgressCallback | None = None,
    on_done: DoneCallback | None = None,
    *,
    backend: TranslationBackend | None = None,
    output: str | Path | None = None,
    timeout: float | None = DEFAULT_ROW_TIMEOUT,
    strict: bool = False,
    insecure: bool = False,
) -> BatchResult:
    """Blocking wrapper around :func:`translate_file_async`."""
    return asyncio.run(
        translate_file_async(
            path, source_language, target_language, on_progress, on_done,
            backend=backend,
            output=output,
            timeout=timeout,
            strict=strict,
            insecure=insecure,
        )
    )
