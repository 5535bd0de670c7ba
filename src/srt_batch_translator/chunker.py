"""Split translatable lines into size-bounded chunks."""

from __future__ import annotations

import logging
from typing import List, Sequence

from .models import Chunk

logger = logging.getLogger(__name__)


def line_size(line: str) -> int:
    """UTF-8 size of a line in bytes."""
    return len(line.encode("utf-8"))


def joined_size(lines: Sequence[str]) -> int:
    """Size of ``lines`` joined with one newline between each."""
    if not lines:
        return 0
    return sum(line_size(line) for line in lines) + len(lines) - 1


def split_lines(lines: Sequence[str], max_bytes: int) -> List[Chunk]:
    """
    Greedily pack lines into chunks at line boundaries.

    A line joins the current chunk while ``current + size + 1 <= max_bytes``.
    A line that alone exceeds the budget becomes its own chunk.

    Args:
        lines: Lines in document order
        max_bytes: Budget per chunk, newline separators included

    Returns:
        Chunks in order; their lines concatenate back to ``lines``
    """
    if max_bytes < 1:
        raise ValueError(f"max_bytes must be positive, got {max_bytes}")

    chunks: List[Chunk] = []
    current: List[str] = []
    current_size = 0

    for line in lines:
        size = line_size(line)

        if current and current_size + size + 1 > max_bytes:
            chunks.append(Chunk(current))
            current = []
            current_size = 0

        if current:
            current_size += size + 1
        else:
            current_size = size
            if size > max_bytes:
                logger.debug(f"Line of {size} bytes exceeds chunk budget {max_bytes}")
        current.append(line)

    if current:
        chunks.append(Chunk(current))

    return chunks
