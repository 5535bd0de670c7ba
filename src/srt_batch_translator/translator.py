"""Core document translation logic."""

from __future__ import annotations

import logging
from typing import List, Sequence, Union

from .backends import PromptBackend, TextBackend
from .chunker import joined_size, split_lines
from .exceptions import EmptyResponse, MalformedDocument, PostconditionViolation
from .languages import language_name
from .models import Chunk, CueBlock
from .parser import CueDocument, render_blocks
from .text_utils import split_translated_text, strip_code_fences, truncate_text

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10

Backend = Union[TextBackend, PromptBackend]


def build_batch_prompt(snippet: str, target_name: str, source_name: str = "English") -> str:
    """Build the instruction for translating one batch of SRT blocks."""
    return f"""Translate these SRT subtitle entries from {source_name} to {target_name}.

IMPORTANT: Only output the translated SRT content - no explanations or additional text.

Keep the exact same format:
- Same subtitle numbers
- Same timecodes (HH:MM:SS,mmm --> HH:MM:SS,mmm)
- Only translate the subtitle text
- Keep the same number of text lines in each entry
- Keep blank lines between entries

Input subtitles:
{snippet}"""


def _check_line_count(translated: List[str], expected: int, label: str) -> None:
    if len(translated) != expected:
        raise PostconditionViolation(
            f"{label} returned {len(translated)} lines, expected {expected}",
            details={"expected": expected, "actual": len(translated)},
        )


async def translate_lines(
    lines: Sequence[str],
    target_language: str,
    backend: TextBackend,
) -> List[str]:
    """
    Translate lines with a text backend, chunking by payload size.

    Chunks are sent one after another, in order.
    """
    budget = backend.max_payload_bytes
    if joined_size(lines) <= budget:
        chunks = [Chunk(list(lines))]
    else:
        chunks = split_lines(lines, budget)
        logger.debug(f"Text is large, split into {len(chunks)} chunks")

    translated: List[str] = []
    for i, chunk in enumerate(chunks, 1):
        logger.debug(f"Translating chunk {i}/{len(chunks)} ({chunk.size} bytes)")
        result = await backend.translate_text(chunk.text, target_language)
        chunk_lines = split_translated_text(result)
        _check_line_count(chunk_lines, len(chunk), f"Chunk {i}")
        translated.extend(chunk_lines)

    return translated


def _align_reply(reply: CueDocument, sources: Sequence[CueBlock], label: str) -> List[str]:
    """Take the reply's text lines block by block, checking each block's line count."""
    if len(reply.blocks) != len(sources):
        raise PostconditionViolation(
            f"{label} returned {len(reply.blocks)} blocks, expected {len(sources)}",
            details={"expected": len(sources), "actual": len(reply.blocks)},
        )

    lines: List[str] = []
    for source, block in zip(sources, reply.blocks):
        if len(block.lines) != len(source.lines):
            raise PostconditionViolation(
                f"{label} block {source.index} returned {len(block.lines)} lines, "
                f"expected {len(source.lines)}",
                details={
                    "block": source.index,
                    "expected": len(source.lines),
                    "actual": len(block.lines),
                },
            )
        lines.extend(block.lines)
    return lines


async def translate_blocks(
    blocks: Sequence[CueBlock],
    target_language: str,
    backend: PromptBackend,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> List[str]:
    """
    Translate blocks with a prompt backend, ``batch_size`` blocks per call.

    Only blocks with text are sent, without their verbatim lines. Each
    response is parsed as SRT and must hold the same blocks with the same
    number of text lines each.
    """
    target_name = language_name(target_language)
    total = len(blocks)
    translated: List[str] = []

    for start in range(0, total, batch_size):
        batch = [block for block in blocks[start:start + batch_size] if block.lines]
        batch_no = start // batch_size + 1
        if not batch:
            continue

        prompt = build_batch_prompt(render_blocks(batch, include_extra=False), target_name)
        logger.debug(
            f"Processing batch {batch_no}: blocks {start + 1}-{min(start + batch_size, total)} "
            f"(prompt {len(prompt)} chars)"
        )

        response = strip_code_fences(await backend.complete(prompt))
        try:
            reply = CueDocument.parse(response)
        except MalformedDocument as e:
            logger.debug(f"Unparseable response: {truncate_text(response, 200)}")
            raise EmptyResponse(f"Batch {batch_no} response contains no subtitle blocks") from e

        translated.extend(_align_reply(reply, batch, f"Batch {batch_no}"))

    return translated


async def translate_document(
    document: CueDocument,
    target_language: str,
    backend: Backend,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> str:
    """
    Translate a whole document.

    Returns:
        Serialized translated document with the source's line structure

    Raises:
        BackendUnavailable, EmptyResponse: a backend call failed
        PostconditionViolation: a backend reply had the wrong number of lines
    """
    lines = [line.text for line in document.extract_translatable_text()]

    if not lines:
        logger.debug("No subtitle text found to translate")
        return document.reconstruct([], strict=True)

    logger.debug(f"Extracted {len(lines)} text lines ({joined_size(lines)} bytes)")

    if isinstance(backend, TextBackend):
        translated = await translate_lines(lines, target_language, backend)
    elif isinstance(backend, PromptBackend):
        translated = await translate_blocks(document.blocks, target_language, backend, batch_size)
    else:
        raise TypeError(f"Unsupported backend: {type(backend).__name__}")

    return document.reconstruct(translated, strict=True)
