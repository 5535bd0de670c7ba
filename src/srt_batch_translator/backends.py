"""Translation backend interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TextBackend(ABC):
    """Machine translation of plain newline-separated text."""

    name = "text"
    # Chunk payload budget in bytes
    max_payload_bytes = 4000

    @abstractmethod
    async def translate_text(self, text: str, target_language: str) -> str:
        """Translate ``text`` line for line into ``target_language``."""

    async def aclose(self) -> None:
        pass


class PromptBackend(ABC):
    """Instruction-following model that receives whole SRT snippets."""

    name = "prompt"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Run ``prompt`` and return the raw response text."""

    async def aclose(self) -> None:
        pass
