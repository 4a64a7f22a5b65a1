"""Reading and writing ``key,value`` text files.

Rows are split on the first comma only, so values may contain commas. This
is deliberately not the ``csv`` module: values are not unescaped on input and
embedded quotes are not re-escaped on output.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DELIMITER = ","
QUOTE = '"'


@dataclass(frozen=True)
class Row:
    """One parsed input line."""
    key: str
    value: str


def parse_line(line: str) -> Row | None:
    """Parse ``key,value``. Returns None for lines without a delimiter.

    Surrounding double quotes are stripped from the value.
    """
    parts = line.rstrip("\r\n").split(DELIMITER, 1)
    if len(parts) != 2:
        return None
    key, value = parts
    return Row(key=key, value=value.strip(QUOTE))


def read_rows(path: str | Path) -> tuple[list[Row], int]:
    """Read a UTF-8 file. Returns (rows, total_lines), skipping malformed lines."""
    text = Path(path).read_text(encoding="utf-8-sig")
    # Records end at \r\n, \r or \n only; other Unicode line breaks are data.
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    rows = [row for row in (parse_line(line) for line in lines) if row is not None]
    return rows, len(lines)


def format_output_line(key: str, text: str) -> str:
    return f"{key}{DELIMITER}{QUOTE}{text}{QUOTE}"


def output_path_for(path: str | Path, suffix: str) -> Path:
    """``dir/strings.csv`` + ``fr`` → ``dir/strings-fr.csv``."""
    path = Path(path)
    return path.with_name(f"{path.stem}-{suffix}{path.suffix}")


def write_output(path: str | Path, lines: list[str]) -> None:
    """Write one line per entry, UTF-8, with a trailing newline."""
    content = "".join(f"{line}\n" for line in lines)
    Path(path).write_text(content, encoding="utf-8")
