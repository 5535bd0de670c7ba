"""SRT document parsing, reconstruction and file utilities."""

from __future__ import annotations

import re
import logging
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Optional, Tuple

from .exceptions import MalformedDocument, ReconstructionOverflow, ReconstructionUnderflow
from .models import CueBlock, TranslatableLine

logger = logging.getLogger(__name__)

INDEX_PATTERN = re.compile(r"[0-9]+")
TIMING_PATTERN = re.compile(
    r"(\d{2}:\d{2}:\d{2},\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2},\d{3})"
)

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB


class LineKind(Enum):
    """Role of a raw line within the document."""
    INDEX = "index"
    TIMING = "timing"
    TEXT = "text"
    SEPARATOR = "separator"
    VERBATIM = "verbatim"


def split_raw_lines(content: str) -> Tuple[List[str], str, bool]:
    """
    Split raw content into lines.

    Returns:
        (lines, newline, has_trailing_newline)
    """
    newline = "\r\n" if "\r\n" in content else "\n"
    text = content.replace("\r\n", "\n").replace("\r", "\n")
    trailing = text.endswith("\n")
    if trailing:
        text = text[:-1]
    lines = text.split("\n") if (text or trailing) else []
    return lines, newline, trailing


def count_lines(content: str) -> int:
    """Number of lines in ``content``, counted the way the parser sees them."""
    lines, _, _ = split_raw_lines(content)
    return len(lines)


class CueDocument:
    """
    Parsed SRT document.

    Keeps both the cue blocks and the raw line stream, so that a document can
    be written back with only its text lines replaced.
    """

    def __init__(
        self,
        blocks: List[CueBlock],
        lines: List[Tuple[LineKind, str]],
        newline: str = "\n",
        trailing_newline: bool = True,
    ):
        self.blocks = blocks
        self._lines = lines
        self.newline = newline
        self.trailing_newline = trailing_newline

    @classmethod
    def parse(cls, content: str) -> "CueDocument":
        """
        Parse SRT content line by line.

        A digit-only line opens a block when none is open. Inside a block the
        first timecode line is its timing, later non-empty lines are text and
        a blank line closes it. Anything else is kept verbatim. A block still
        open at the end of input is flushed.

        Raises:
            MalformedDocument: if no block is recognized
        """
        raw_lines, newline, trailing = split_raw_lines(content)

        blocks: List[CueBlock] = []
        lines: List[Tuple[LineKind, str]] = []
        current: Optional[CueBlock] = None

        for line in raw_lines:
            stripped = line.strip()

            if current is None:
                if INDEX_PATTERN.fullmatch(stripped):
                    current = CueBlock(index=int(stripped))
                    lines.append((LineKind.INDEX, line))
                elif not stripped:
                    lines.append((LineKind.SEPARATOR, line))
                else:
                    lines.append((LineKind.VERBATIM, line))
                continue

            if not stripped:
                blocks.append(current)
                current = None
                lines.append((LineKind.SEPARATOR, line))
                continue

            timing = TIMING_PATTERN.fullmatch(stripped)
            if timing and current.start is None:
                current.start, current.end = timing.groups()
                lines.append((LineKind.TIMING, line))
            elif current.start is not None and not timing:
                current.lines.append(line)
                lines.append((LineKind.TEXT, line))
            else:
                # 无法识别的行原样保留
                current.extra.append(line)
                lines.append((LineKind.VERBATIM, line))

        if current is not None:
            blocks.append(current)

        if not blocks:
            raise MalformedDocument("No subtitle blocks found")

        logger.debug(f"Parsed {len(raw_lines)} lines into {len(blocks)} subtitle blocks")
        return cls(blocks, lines, newline, trailing)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def slot_count(self) -> int:
        """Number of text-line slots."""
        return sum(1 for kind, _ in self._lines if kind is LineKind.TEXT)

    def extract_translatable_text(self) -> List[TranslatableLine]:
        """Flatten all text lines across blocks, in document order."""
        result: List[TranslatableLine] = []
        for block in self.blocks:
            for text in block.lines:
                result.append(TranslatableLine(len(result), block.index, text))
        return result

    def reconstruct(self, translated_lines: Sequence[str], strict: bool = False) -> str:
        """
        Write the document back with its text slots replaced in order.

        In lenient mode slots left over when ``translated_lines`` runs out are
        left unfilled and surplus lines are dropped. In strict mode either
        case raises.
        """
        slots = self.slot_count
        supplied = len(translated_lines)

        if supplied < slots:
            if strict:
                raise ReconstructionUnderflow(
                    f"Got {supplied} translated lines for {slots} text slots",
                    details={"expected": slots, "actual": supplied},
                )
            logger.warning(f"Only {supplied}/{slots} text slots filled")
        elif supplied > slots:
            if strict:
                raise ReconstructionOverflow(
                    f"Got {supplied} translated lines for {slots} text slots",
                    details={"expected": slots, "actual": supplied},
                )
            logger.warning(f"Ignoring {supplied - slots} surplus translated lines")

        out: List[str] = []
        pos = 0
        for kind, raw in self._lines:
            if kind is LineKind.TEXT:
                if pos < supplied:
                    out.append(translated_lines[pos])
                    pos += 1
                continue
            out.append(raw)

        return self._join(out)

    def serialize(self) -> str:
        """Original content, line structure intact."""
        return self._join([raw for _, raw in self._lines])

    def _join(self, lines: List[str]) -> str:
        text = self.newline.join(lines)
        if self.trailing_newline:
            text += self.newline
        return text


def render_blocks(blocks: Sequence[CueBlock], include_extra: bool = True) -> str:
    """Render blocks as a standalone SRT snippet, blank line between blocks."""
    return "\n\n".join(block.to_srt(include_extra) for block in blocks)


def parse_srt(content: str) -> CueDocument:
    """Shorthand for :meth:`CueDocument.parse`."""
    return CueDocument.parse(content)


def read_srt(path: Path) -> str:
    """Read an SRT file, dropping a UTF-8 BOM and keeping line endings."""
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return f.read()


def validate_srt_file(path: Path) -> Optional[str]:
    """
    Validate SRT file before processing.

    Args:
        path: Path to SRT file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix != '.srt':
        return f"Invalid file extension: {suffix} (expected .srt)"

    # 检查文件大小
    size = path.stat().st_size
    if size == 0:
        return "File is empty"
    if size > MAX_FILE_SIZE:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None


def save_srt(content: str, path: Path) -> None:
    """
    Save translated SRT content to a new file.

    Args:
        content: Serialized document
        path: Output file path; must not exist yet

    Raises:
        FileExistsError: if ``path`` already exists
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("x", encoding="utf-8", newline="") as f:
        try:
            f.write(content)
        except BaseException:
            f.close()
            path.unlink()
            raise

    logger.debug(f"Saved {count_lines(content)} lines to {path}")
