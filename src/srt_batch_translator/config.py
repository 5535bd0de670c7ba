"""Configuration and constants."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .languages import DEFAULT_LANGUAGES, parse_language_list

logger = logging.getLogger(__name__)

# Load environment variables once
load_dotenv()

SERVICES = ("claude", "aws", "openai")

# Default source file suffix
SOURCE_SUFFIX = ".en.srt"


def _env_int(name: str, default: int) -> int:
    """
    Read an integer environment variable.

    Raises:
        ValueError: if the variable is set but is not an integer
    """
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "0").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class TranslatorConfig:
    """Configuration for the batch subtitle translator."""

    # Input settings
    directory: str = "."
    source_suffix: str = SOURCE_SUFFIX
    source_language: str = "en"
    languages: Dict[str, str] = field(default_factory=dict)

    # Service settings
    service: str = "claude"
    region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    aws_profile: Optional[str] = None

    # LLM settings
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model_name: Optional[str] = None
    command: str = "claude"

    # Processing settings
    concurrency: Optional[int] = None
    chunk_bytes: int = 4000
    batch_size: int = 10
    progress_every: int = 10
    show_progress_bar: bool = False

    verbose: bool = False

    # Problems found while reading the environment, reported by validate()
    env_errors: List[str] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        """Fill unset values from the environment."""
        if not self.languages:
            self.languages = parse_language_list(
                os.environ.get("TRANSLATE_LANGUAGES", DEFAULT_LANGUAGES)
            )
        if self.aws_access_key_id is None:
            self.aws_access_key_id = os.environ.get("AWS_ACCESS_KEY_ID")
        if self.aws_secret_access_key is None:
            self.aws_secret_access_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
        if self.aws_session_token is None:
            self.aws_session_token = os.environ.get("AWS_SESSION_TOKEN")
        if self.aws_profile is None:
            self.aws_profile = os.environ.get("AWS_PROFILE")
        if self.api_key is None:
            self.api_key = os.environ.get("LLM_API_KEY") or os.environ.get("OPENAI_API_KEY")
        if self.base_url is None:
            self.base_url = os.environ.get("LLM_BASE_URL")
        if self.concurrency is None:
            # 并发模式只用于 AWS
            default = 0 if self.service == "aws" else 1
            try:
                self.concurrency = _env_int("TRANSLATE_CONCURRENCY", default)
            except ValueError as e:
                logger.warning(str(e))
                self.env_errors.append(str(e))
                self.concurrency = default

    @classmethod
    def from_args(cls, args) -> "TranslatorConfig":
        """Create config from argparse namespace, falling back to the environment."""
        languages_arg = getattr(args, 'languages', None)
        languages = parse_language_list(languages_arg) if languages_arg else {}

        service = getattr(args, 'service', None) or os.environ.get("TRANSLATE_SERVICE", "claude")

        return cls(
            directory=getattr(args, 'directory', None) or ".",
            source_suffix=getattr(args, 'source_suffix', None) or SOURCE_SUFFIX,
            languages=languages,
            service=service.strip().lower(),
            region=getattr(args, 'region', None) or os.environ.get("AWS_REGION", "us-east-1"),
            aws_profile=getattr(args, 'profile', None),
            api_key=getattr(args, 'api_key', None),
            base_url=getattr(args, 'base_url', None),
            model_name=getattr(args, 'model_name', None) or os.environ.get("LLM_MODEL"),
            concurrency=getattr(args, 'concurrency', None),
            chunk_bytes=getattr(args, 'chunk_bytes', 4000),
            batch_size=getattr(args, 'batch_size', 10),
            progress_every=getattr(args, 'progress_every', 10),
            show_progress_bar=getattr(args, 'progress_bar', False),
            verbose=getattr(args, 'verbose', False) or _env_flag("DEBUG"),
        )

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if self.env_errors:
            return self.env_errors[0]

        if self.service not in SERVICES:
            return f"Unknown translation service: {self.service} (expected one of {', '.join(SERVICES)})"

        if not self.languages:
            return "No valid language codes specified in TRANSLATE_LANGUAGES"

        if not self.source_suffix.endswith(".srt"):
            return f"Source suffix must end with .srt, got {self.source_suffix}"

        if self.concurrency < 0:
            return f"Concurrency must be >= 0, got {self.concurrency}"

        if self.chunk_bytes < 1 or self.chunk_bytes > 10000:
            return f"Chunk bytes must be 1-10000, got {self.chunk_bytes}"

        if self.batch_size < 1 or self.batch_size > 50:
            return f"Batch size must be 1-50, got {self.batch_size}"

        if self.progress_every < 1:
            return f"Progress interval must be >= 1, got {self.progress_every}"

        if self.service == "openai" and not self.api_key:
            return "API key is required. Set LLM_API_KEY or use --api-key"

        if self.service == "openai" and not self.model_name:
            return "Model name is required. Set LLM_MODEL or use --model"

        return None
