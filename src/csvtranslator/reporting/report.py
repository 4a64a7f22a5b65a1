"""Translation report data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from csvtranslator.pipeline import BatchResult


@dataclass
class TranslationReport:
    """Collects statistics about a translation run."""

    source_file: str = ""
    output_file: str = ""
    source_lang: str = ""
    target_lang: str = ""
    backend: str = ""

    total_lines: int = 0
    rows_dispatched: int = 0
    rows_skipped: int = 0
    rows_translated: int = 0
    rows_failed: int = 0
    translation_seconds: float = 0.0

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def finish(self) -> None:
        self.finished_at = datetime.now()

    def update_from_batch(self, batch: BatchResult) -> None:
        """Copy counters and messages from a finished batch."""
        self.source_file = batch.input_file
        self.output_file = batch.output_file
        self.total_lines = batch.total_lines
        self.rows_dispatched = batch.rows_dispatched
        self.rows_skipped = batch.rows_skipped
        self.rows_translated = batch.rows_translated
        self.rows_failed = batch.rows_failed
        self.translation_seconds = batch.translation_seconds
        self.errors.extend(f"{key}: {message}" for key, message in batch.errors)
        self.warnings.extend(f"{key}: {warning}" for key, warning in batch.warnings)

    def to_dict(self) -> dict:
        return {
            "source_file": self.source_file,
            "output_file": self.output_file,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "backend": self.backend,
            "total_lines": self.total_lines,
            "rows_dispatched": self.rows_dispatched,
            "rows_skipped": self.rows_skipped,
            "rows_translated": self.rows_translated,
            "rows_failed": self.rows_failed,
            "translation_seconds": self.translation_seconds,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
            "warnings": self.warnings,
        }
