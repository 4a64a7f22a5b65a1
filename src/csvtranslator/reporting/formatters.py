"""Output formatters for translation reports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from csvtranslator.reporting.report import TranslationReport


def to_json(report: TranslationReport, indent: int = 2) -> str:
    """Format report as JSON string."""
    return json.dumps(report.to_dict(), indent=indent, default=str, ensure_ascii=False)


def to_markdown(report: TranslationReport) -> str:
    """Format report as Markdown."""
    lines = [
        "# Translation Report",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| Source | `{report.source_file}` |",
        f"| Output | `{report.output_file}` |",
        f"| Languages | {report.source_lang} → {report.target_lang} |",
        f"| Backend | {report.backend} |",
        "",
        "## Statistics",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Lines read | {report.total_lines} |",
        f"| Rows skipped | {report.rows_skipped} |",
        f"| Rows dispatched | {report.rows_dispatched} |",
        f"| Translated | {report.rows_translated} |",
        f"| Failed | {report.rows_failed} |",
        f"| Duration | {report.duration_seconds:.1f}s |",
    ]

    for title, messages in (("Errors", report.errors), ("Warnings", report.warnings)):
        if messages:
            lines.extend(["", f"## {title}", ""])
            lines.extend(f"- {msg}" for msg in messages)

    return "\n".join(lines) + "\n"


def to_csv(report: TranslationReport) -> str:
    """Format report as a single-row CSV."""
    output = io.StringIO()
    data = report.to_dict()
    # Flatten message lists
    data["errors"] = "; ".join(data["errors"])
    data["warnings"] = "; ".join(data["warnings"])
    writer = csv.DictWriter(output, fieldnames=data.keys())
    writer.writeheader()
    writer.writerow(data)
    return output.getvalue()


def save_report(report: TranslationReport, path: str | Path) -> None:
    """Save report to file, auto-detecting format from extension."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".md", ".markdown"):
        content = to_markdown(report)
    elif suffix == ".csv":
        content = to_csv(report)
    else:
        content = to_json(report)

    path.write_text(content, encoding="utf-8")
