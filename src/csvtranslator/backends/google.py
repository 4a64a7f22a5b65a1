"""Google web translation backend (unofficial ``translate_a/single`` endpoint).

The endpoint is undocumented and unversioned. Its body is a nested
array-of-arrays text that is not guaranteed to be valid JSON, so it is
scraped rather than decoded. All knowledge of that shape lives in
:func:`parse_response`.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import urlencode

import httpx

from csvtranslator.backends.base import (
    TranslationBackend,
    TranslationError,
    TranslationResult,
    TranslationWarning,
    WarningKind,
)
from csvtranslator.translation.languages import resolve
from csvtranslator.translation.tokens import find_unknown_tokens, mask, unmask

logger = logging.getLogger(__name__)

ENDPOINT_URL = "https://translate.googleapis.com/translate_a/single"
CLIENT_ID = "gtx"
DETAIL_FLAG = "t"  # dt=t: return translated text segments

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.1) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/41.0.2228.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Charset": "UTF-8",
}

# Transport timeout in seconds. The batch layer applies its own per-row limit.
DEFAULT_TIMEOUT = 30.0


def build_url(text: str, source_code: str, target_code: str) -> str:
    """Build the query URL. Empty codes are embedded as empty segments."""
    params = {
        "client": CLIENT_ID,
        "sl": source_code,
        "tl": target_code,
        "dt": DETAIL_FLAG,
        "q": text,
    }
    return f"{ENDPOINT_URL}?{urlencode(params)}"


def parse_response(body: str, source_code: str) -> str:
    """Extract plain translated text from a raw response body.

    Multi-phrase bodies carry an echo of the source language (``,,"en"``)
    after the phrase list. Without that marker (single words) the first
    quoted string is the translation.

    Phrase bodies look like ``[[["Bonjour","Hello",,,1],...]],,"en"``: after
    stripping brackets, quoted fragments come in (translation, source echo)
    pairs, separated by structural leftovers such as ``,,,1`` or
    ``,null,null,1,``. Leftovers realign the pairing; a phrase with no echo
    after it is dropped.
    """
    index = body.find(f',,"{source_code}"')
    if index == -1:
        start = body.find('"')
        if start == -1:
            return ""
        end = body.find('"', start + 1)
        if end == -1:
            return ""
        return body[start + 1:end].strip()

    text = body[:index]
    text = text.replace("],[", ",")
    text = text.replace("]", "")
    text = text.replace("[", "")
    text = text.replace('","', '"')

    fragments = [f for f in text.split('"') if f]
    phrases: list[str] = []
    i = 0
    while i < len(fragments):
        fragment = fragments[i]
        if fragment.startswith(","):
            i += 1
            continue
        has_echo = i + 1 < len(fragments) and not fragments[i + 1].startswith(",")
        if has_echo:
            phrases.append(fragment)
            i += 2
        else:
            i += 1

    return "  ".join(phrases).strip()


class GoogleWebBackend(TranslationBackend):
    """Translation backend using Google's free web endpoint.

    Failures never propagate out of :meth:`translate`: they are returned on
    the result and also kept in ``last_error``. One backend serves many
    concurrent rows, so ``last_error`` is the most recent failure across all
    calls and is not cleared by later successes. Use
    ``TranslationResult.error`` for the outcome of a specific call.

    Args:
        insecure: Disable TLS certificate verification for this backend's
            requests only.
        timeout: Transport timeout in seconds.
        client: Pre-built ``httpx.AsyncClient`` (tests, shared pools). The
            backend does not close a client it did not create.
    """

    def __init__(
        self,
        *,
        insecure: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.last_error: BaseException | None = None
        self._owns_client = client is None
        if client is None:
            if insecure:
                logger.warning(
                    "TLS certificate verification is disabled for %s", ENDPOINT_URL,
                )
            client = httpx.AsyncClient(
                timeout=timeout,
                verify=not insecure,
            )
        self._client = client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        result = TranslationResult()

        masked, tokens = mask(text)

        source_code = resolve(source_language)
        target_code = resolve(target_language)
        for name, code in ((source_language, source_code), (target_language, target_code)):
            if not code:
                result.warnings.append(
                    TranslationWarning(WarningKind.UNKNOWN_LANGUAGE, name),
                )

        start = time.monotonic()
        try:
            url = build_url(masked, source_code, target_code)
            response = await self._client.get(url, headers=DEFAULT_HEADERS)
            response.raise_for_status()
            response.encoding = "utf-8"
            body = response.text
        except Exception as e:
            logger.debug("Request failed for %r: %s", text, e)
            error = TranslationError(f"Request failed: {e}")
            error.__cause__ = e
            self.last_error = error
            result.error = error
            result.elapsed = time.monotonic() - start
            return result

        parsed = parse_response(body, source_code)
        for ref in find_unknown_tokens(parsed, tokens):
            result.warnings.append(TranslationWarning(WarningKind.UNKNOWN_TOKEN, ref))
        result.text = unmask(parsed, tokens)
        result.elapsed = time.monotonic() - start

        logger.debug("Translated %r -> %r in %.2fs", text, result.text, result.elapsed)
        return result
