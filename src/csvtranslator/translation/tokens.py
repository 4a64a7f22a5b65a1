"""Mask ``{...}`` placeholders before translation and restore them after.

Translation may reorder or mangle literal tokens such as ``{count}`` or
colour codes like ``{FF0000}``. Each token is swapped for a numeric
``{1}``, ``{2}``... placeholder, which the endpoint passes through verbatim,
and swapped back once the translated text returns.

Example::

    "I have {count} of {total} apples." -> "I have {1} of {2} apples."
"""

from __future__ import annotations

import re

# Non-nested, stops at the first closing brace.
TOKEN_RE = re.compile(r"\{([^}]+)}")


def mask(text: str | None) -> tuple[str, dict[str, str]]:
    """Replace each ``{...}`` token with ``{i}`` (1-based, left to right).

    Returns (masked_text, token_map) where token_map is {"i": original_token}.
    The original token keeps its braces.
    """
    if not text:
        return "", {}

    tokens: dict[str, str] = {}

    def _replace(m: re.Match[str]) -> str:
        index = str(len(tokens) + 1)
        tokens[index] = m.group(0)
        return "{" + index + "}"

    return TOKEN_RE.sub(_replace, text), tokens


def unmask(text: str | None, tokens: dict[str, str]) -> str:
    """Restore tokens masked by :func:`mask`.

    References missing from ``tokens`` are replaced with an empty string.
    Use :func:`find_unknown_tokens` beforehand to detect that loss.
    """
    if text is None:
        return ""
    return TOKEN_RE.sub(lambda m: tokens.get(m.group(1), ""), text)


def find_unknown_tokens(text: str | None, tokens: dict[str, str]) -> list[str]:
    """Return the ``{...}`` references in text that ``tokens`` cannot restore."""
    if not text:
        return []
    return [m.group(0) for m in TOKEN_RE.finditer(text) if m.group(1) not in tokens]
