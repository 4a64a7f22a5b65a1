"""Abstract base class for translation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class TranslationError(Exception):
    """Raised when a backend cannot produce a translation."""


class WarningKind(str, Enum):
    """Silent degradations surfaced on a result instead of being dropped."""
    UNKNOWN_LANGUAGE = "unknown_language"
    UNKNOWN_TOKEN = "unknown_token"


@dataclass(frozen=True)
class TranslationWarning:
    kind: WarningKind
    detail: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


@dataclass
class TranslationResult:
    """Outcome of translating one text.

    ``error`` is set instead of raising when the request could not be built,
    sent, or parsed. ``elapsed`` is wall-clock seconds from request start to
    response.
    """

    text: str = ""
    elapsed: float = 0.0
    warnings: list[TranslationWarning] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TranslationBackend(ABC):
    """Interface for translation backends."""

    @abstractmethod
    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        """Translate a single text.

        Args:
            text: Source text, may contain ``{...}`` tokens.
            source_language: Language name, e.g. "English".
            target_language: Language name, e.g. "French".

        Returns:
            A TranslationResult. Implementations capture failures into
            ``TranslationResult.error`` rather than raising.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources. Default implementation does nothing."""

    async def __aenter__(self) -> TranslationBackend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
