"""Supported target languages."""

from __future__ import annotations

import logging
from typing import Dict

logger = logging.getLogger(__name__)

LANGUAGE_NAMES: Dict[str, str] = {
    "fr": "French",
    "nl": "Dutch",
    "de": "German",
    "ar": "Arabic",
    "ja": "Japanese",
    "da": "Danish",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "ko": "Korean",
    "zh": "Chinese",
    "ru": "Russian",
    "hi": "Hindi",
    "tr": "Turkish",
    "pl": "Polish",
    "sv": "Swedish",
    "no": "Norwegian",
    "fi": "Finnish",
}

DEFAULT_LANGUAGES = "fr,nl,de,ar,ja,da"


def language_name(code: str) -> str:
    """English name for ``code``, or the code itself if unknown."""
    return LANGUAGE_NAMES.get(code, code)


def parse_language_list(text: str) -> Dict[str, str]:
    """
    Parse a comma-separated list of language codes.

    Unknown codes are logged and skipped; duplicates keep their first position.

    Returns:
        Ordered mapping of code -> name
    """
    result: Dict[str, str] = {}
    for raw in text.split(","):
        code = raw.strip().lower()
        if not code:
            continue
        if code in LANGUAGE_NAMES:
            result.setdefault(code, LANGUAGE_NAMES[code])
        else:
            logger.warning(f"Unknown language code: {code} (skipping)")
    return result
