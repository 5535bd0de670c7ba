"""Prompt-driven translation backends."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import List, Dict, Optional, Sequence
from enum import Enum

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    RateLimitError,
    AuthenticationError,
    BadRequestError,
    APIStatusError,
)

from .backends import PromptBackend
from .exceptions import BackendUnavailable, EmptyResponse, PrerequisiteMissing

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_MODEL = "claude-sonnet-4-20250514"


class APIErrorType(Enum):
    """API 错误类型分类。"""
    RATE_LIMIT = "rate_limit"      # 429
    CONNECTION = "connection"       # 网络问题
    AUTH = "auth"                   # 401
    BAD_REQUEST = "bad_request"     # 400
    SERVER = "server"               # 500+
    UNKNOWN = "unknown"


def classify_error(error: Exception) -> APIErrorType:
    """分类 API 错误。"""
    if isinstance(error, RateLimitError):
        return APIErrorType.RATE_LIMIT
    elif isinstance(error, APIConnectionError):
        return APIErrorType.CONNECTION
    elif isinstance(error, AuthenticationError):
        return APIErrorType.AUTH
    elif isinstance(error, BadRequestError):
        return APIErrorType.BAD_REQUEST
    elif isinstance(error, APIStatusError):
        if error.status_code >= 500:
            return APIErrorType.SERVER
        return APIErrorType.UNKNOWN
    else:
        return APIErrorType.UNKNOWN


async def call_llm_async(
    client: AsyncOpenAI,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float = 0.3,
) -> str:
    """
    Make one async call to the chat completions API.

    Args:
        client: AsyncOpenAI client instance
        model: Model name to use
        messages: List of message dictionaries
        temperature: Sampling temperature

    Returns:
        Response content, stripped

    Raises:
        BackendUnavailable: on any API error
        EmptyResponse: when the model returns no content
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
        )
    except Exception as e:
        error_type = classify_error(e)
        status = getattr(e, "status_code", None)
        raise BackendUnavailable(
            f"LLM call failed ({error_type.value}): {e}",
            status_code=status,
            details={"error_type": error_type.value},
        ) from e

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        raise EmptyResponse(f"Model {model} returned an empty response")
    return content.strip()


def create_client(
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 120.0
) -> AsyncOpenAI:
    """
    Create an AsyncOpenAI client.

    Args:
        api_key: API key for authentication
        base_url: API base URL, None for the OpenAI default
        timeout: Default timeout for requests

    Returns:
        Configured AsyncOpenAI client
    """
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
    )


class OpenAIPromptBackend(PromptBackend):
    """Chat completions backend for any OpenAI-compatible endpoint."""

    name = "openai"

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float = 0.3):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def complete(self, prompt: str) -> str:
        return await call_llm_async(
            self.client,
            self.model,
            [{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )

    async def aclose(self) -> None:
        await self.client.close()


class CommandPromptBackend(PromptBackend):
    """
    Runs an external CLI with the prompt, e.g. ``claude --model M -p PROMPT``.

    The prompt is appended as the last argument; stdout is the response.
    """

    name = "command"

    def __init__(self, argv: Sequence[str]):
        if not argv:
            raise ValueError("argv must not be empty")
        self.argv = list(argv)

    @classmethod
    def claude(cls, model: str = DEFAULT_COMMAND_MODEL, executable: str = "claude") -> "CommandPromptBackend":
        return cls([executable, "--model", model, "-p"])

    def check_available(self) -> str:
        """
        Return the resolved executable path.

        Raises:
            PrerequisiteMissing: if the executable is not on PATH
        """
        path = shutil.which(self.argv[0])
        if not path:
            raise PrerequisiteMissing(
                f"'{self.argv[0]}' command not found. Please ensure it is installed and in PATH.",
                details={"executable": self.argv[0]},
            )
        return path

    async def complete(self, prompt: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.argv, prompt,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BackendUnavailable(f"Failed to start {self.argv[0]}: {e}") from e

        stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise BackendUnavailable(
                f"{self.argv[0]} exited with status {proc.returncode}: {message[:200]}",
                details={"returncode": proc.returncode},
            )

        output = stdout.decode("utf-8", errors="replace").strip()
        if not output:
            raise EmptyResponse(f"{self.argv[0]} produced no output")
        return output
