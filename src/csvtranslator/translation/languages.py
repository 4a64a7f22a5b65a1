"""Language name → endpoint code lookup.

The web endpoint expects short codes. Names are matched exactly (case
sensitive, as typed in the table). Unknown names resolve to an empty code and
are passed through to the endpoint unchanged.
"""

from __future__ import annotations

from types import MappingProxyType

# Codes follow the endpoint, not strict ISO 639-1 ("iw" for Hebrew, "tl" for
# Filipino, "zh-CN" for simplified Chinese).
LANGUAGE_CODES = MappingProxyType({
    "Afrikaans": "af",
    "Albanian": "sq",
    "Arabic": "ar",
    "Armenian": "hy",
    "Azerbaijani": "az",
    "Basque": "eu",
    "Belarusian": "be",
    "Bengali": "bn",
    "Bulgarian": "bg",
    "Catalan": "ca",
    "Chinese": "zh-CN",
    "Croatian": "hr",
    "Czech": "cs",
    "Danish": "da",
    "Dutch": "nl",
    "English": "en",
    "Esperanto": "eo",
    "Estonian": "et",
    "Filipino": "tl",
    "Finnish": "fi",
    "French": "fr",
    "Galician": "gl",
    "German": "de",
    "Georgian": "ka",
    "Greek": "el",
    "Haitian Creole": "ht",
    "Hebrew": "iw",
    "Hindi": "hi",
    "Hungarian": "hu",
    "Icelandic": "is",
    "Indonesian": "id",
    "Irish": "ga",
    "Italian": "it",
    "Japanese": "ja",
    "Korean": "ko",
    "Lao": "lo",
    "Latin": "la",
    "Latvian": "lv",
    "Lithuanian": "lt",
    "Macedonian": "mk",
    "Malay": "ms",
    "Maltese": "mt",
    "Norwegian": "no",
    "Persian": "fa",
    "Polish": "pl",
    "Portuguese": "pt",
    "Romanian": "ro",
    "Russian": "ru",
    "Serbian": "sr",
    "Slovak": "sk",
    "Slovenian": "sl",
    "Spanish": "es",
    "Swahili": "sw",
    "Swedish": "sv",
    "Tamil": "ta",
    "Telugu": "te",
    "Thai": "th",
    "Turkish": "tr",
    "Ukrainian": "uk",
    "Urdu": "ur",
    "Vietnamese": "vi",
    "Welsh": "cy",
    "Yiddish": "yi",
})


def resolve(name: str) -> str:
    """Return the endpoint code for a language name, or "" if unknown."""
    return LANGUAGE_CODES.get(name, "")


def is_known_language(name: str) -> bool:
    return name in LANGUAGE_CODES


def language_names() -> list[str]:
    """Return all supported language names, sorted."""
    return sorted(LANGUAGE_CODES)
