"""Text processing utilities."""

from __future__ import annotations

import re
from typing import List


FENCE_START = re.compile(r'^```[\w-]*\s*')
FENCE_END = re.compile(r'\s*```$')


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence from a model response.

    Args:
        text: Raw response text

    Returns:
        Text without the fence
    """
    if not text or not isinstance(text, str):
        return ""

    clean = text.strip()
    clean = FENCE_START.sub('', clean)
    clean = FENCE_END.sub('', clean)
    return clean


def split_translated_text(text: str) -> List[str]:
    """Split a translated chunk back into lines."""
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    return text.split('\n')


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to maximum length with suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
