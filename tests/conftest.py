"""Shared fixtures and fake backends."""

from typing import Callable, List, Optional

import pytest

from srt_batch_translator.backends import PromptBackend, TextBackend
from srt_batch_translator.exceptions import BackendUnavailable

TWO_BLOCKS = (
    "1\n00:00:01,000 --> 00:00:02,000\nHello\n\n"
    "2\n00:00:03,000 --> 00:00:04,000\nWorld\n"
)


class FakeTextBackend(TextBackend):
    """Records calls; translates with ``transform`` applied per line."""

    name = "fake"

    def __init__(
        self,
        transform: Callable[[str], str] = lambda line: line,
        max_payload_bytes: int = 4000,
        fail_for: Optional[set] = None,
        status_code: int = 500,
    ):
        self.transform = transform
        self.max_payload_bytes = max_payload_bytes
        self.fail_for = fail_for or set()
        self.status_code = status_code
        self.calls: List[tuple] = []

    async def translate_text(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if target_language in self.fail_for:
            raise BackendUnavailable(f"HTTP {self.status_code}", status_code=self.status_code)
        return "\n".join(self.transform(line) for line in text.split("\n"))


class FakePromptBackend(PromptBackend):
    """Returns canned responses in order, or echoes the prompt's subtitles."""

    def __init__(self, responses: Optional[List[str]] = None):
        self.responses = list(responses) if responses is not None else None
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.responses is not None:
            return self.responses.pop(0)
        return prompt.split("Input subtitles:\n", 1)[1].upper()


@pytest.fixture
def two_block_srt():
    return TWO_BLOCKS


@pytest.fixture
def source_dir(tmp_path):
    """Directory with two English subtitle files."""
    (tmp_path / "a.en.srt").write_text(TWO_BLOCKS, encoding="utf-8")
    nested = tmp_path / "season1"
    nested.mkdir()
    (nested / "b.en.srt").write_text(TWO_BLOCKS.replace("World", "Again"), encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path
