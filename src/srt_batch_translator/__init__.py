"""
SRT Batch Translator - translate subtitle folders into many languages.

Features:
- Structure-preserving SRT parsing (only text lines change)
- AWS Translate backend with built-in SigV4 signing
- Prompt-driven backends (Claude CLI, OpenAI-compatible APIs)
- Concurrent job scheduling with a bounded worker pool
- Safe re-runs: existing translations are skipped
"""

__version__ = "1.0.0"

from .models import CueBlock, Chunk, TranslatableLine, TranslationJob, JobResult, JobState
from .parser import CueDocument, parse_srt, read_srt, save_srt, validate_srt_file, count_lines
from .chunker import split_lines
from .signer import Credentials, SignedRequest, sign_request
from .credentials import resolve_credentials
from .translator import translate_document
from .scheduler import find_source_files, enumerate_jobs, run_job, run_all
from .progress import AggregateReport
from .config import TranslatorConfig

__all__ = [
    # Models
    "CueBlock",
    "Chunk",
    "TranslatableLine",
    "TranslationJob",
    "JobResult",
    "JobState",
    "AggregateReport",
    "TranslatorConfig",
    # Parsing
    "CueDocument",
    "parse_srt",
    "read_srt",
    "save_srt",
    "validate_srt_file",
    "count_lines",
    # Chunking
    "split_lines",
    # Signing
    "Credentials",
    "SignedRequest",
    "sign_request",
    "resolve_credentials",
    # Translation
    "translate_document",
    # Scheduling
    "find_source_files",
    "enumerate_jobs",
    "run_job",
    "run_all",
]
