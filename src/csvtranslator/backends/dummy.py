"""Dummy translation backend for testing: prefixes strings with a [XX] tag."""

from __future__ import annotations

from csvtranslator.backends.base import TranslationBackend, TranslationResult
from csvtranslator.translation.languages import resolve
from csvtranslator.translation.tokens import mask, unmask


class DummyBackend(TranslationBackend):
    """Offline backend that prefixes each string with the target language code.

    Tokens go through the same mask/unmask round trip as the real backend.

    Example: "Iron Sword {0}" with target "French" → "[FR] Iron Sword {0}"
    """

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        masked, tokens = mask(text)
        tag = f"[{(resolve(target_language) or target_language).upper()}]"
        return TranslationResult(text=unmask(f"{tag} {masked}", tokens))
