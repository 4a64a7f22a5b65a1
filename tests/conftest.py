"""Shared test fixtures for csvtranslator tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from csvtranslator.backends.base import TranslationBackend, TranslationResult
from csvtranslator.backends.google import GoogleWebBackend


def phrase_body(translation: str, source: str, source_code: str = "en") -> str:
    """Response body in the current endpoint shape (no ``,,"en"`` marker)."""
    return f'[[["{translation}","{source}",null,null,10]],null,"{source_code}"]'


def make_google_backend(
    handler: Callable[[httpx.Request], httpx.Response],
) -> GoogleWebBackend:
    """GoogleWebBackend whose requests are answered by ``handler``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleWebBackend(client=client)


class DelayedBackend(TranslationBackend):
    """Upper-cases text after a per-text delay, to shuffle completion order."""

    def __init__(self, delays: dict[str, float] | None = None) -> None:
        self.delays = delays or {}
        self.calls: list[str] = []

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        self.calls.append(text)
        await asyncio.sleep(self.delays.get(text, 0.0))
        return TranslationResult(text=text.upper(), elapsed=self.delays.get(text, 0.0))


@pytest.fixture
def write_input(tmp_path: Path) -> Callable[..., Path]:
    """Write lines to ``tmp_path/<name>`` and return the path."""

    def _write(lines: list[str], name: str = "strings.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
