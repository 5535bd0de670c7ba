"""Data models for cue blocks, chunks and translation jobs."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass
class CueBlock:
    """Represents a single subtitle block in SRT format."""

    index: int
    start: Optional[str] = None
    end: Optional[str] = None
    lines: List[str] = field(default_factory=list)
    # Lines kept verbatim because they could not be classified
    extra: List[str] = field(default_factory=list)

    # 缓存时间戳解析结果
    _start_cache: Optional[float] = field(default=None, repr=False, compare=False)
    _end_cache: Optional[float] = field(default=None, repr=False, compare=False)

    @property
    def timecode(self) -> str:
        """Return the timecode line in SRT format."""
        return f"{self.start} --> {self.end}"

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def start_seconds(self) -> float:
        """Convert start timecode to seconds (cached)."""
        if self._start_cache is None:
            self._start_cache = self._time_str_to_seconds(self.start)
        return self._start_cache

    @property
    def end_seconds(self) -> float:
        """Convert end timecode to seconds (cached)."""
        if self._end_cache is None:
            self._end_cache = self._time_str_to_seconds(self.end)
        return self._end_cache

    @staticmethod
    def _time_str_to_seconds(t_str: Optional[str]) -> float:
        """Convert SRT timecode string to seconds."""
        try:
            h, m, s_full = t_str.split(':')
            s, ms = s_full.split(',')
            return int(h) * 3600 + int(m) * 60 + int(s) + int(ms) / 1000.0
        except (ValueError, AttributeError):
            return 0.0

    def to_srt(self, include_extra: bool = True) -> str:
        """Render the block without its trailing blank line."""
        parts = [str(self.index)]
        if self.start is not None:
            parts.append(self.timecode)
        parts.extend(self.lines)
        if include_extra:
            parts.extend(self.extra)
        return "\n".join(parts)


@dataclass(frozen=True)
class TranslatableLine:
    """A text line addressed by its position in the flattened document."""

    position: int
    block_index: int
    text: str


@dataclass
class Chunk:
    """Consecutive lines submitted as one translation request."""

    lines: List[str]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def size(self) -> int:
        """UTF-8 size of the joined chunk text."""
        return len(self.text.encode("utf-8"))

    def __len__(self) -> int:
        return len(self.lines)


class JobState(Enum):
    """Lifecycle of a translation job."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED, JobState.SKIPPED)


@dataclass
class TranslationJob:
    """One (source file, target language) unit of work."""

    job_id: str
    source: Path
    language: str
    language_name: str
    destination: Path
    state: JobState = JobState.PENDING

    def transition(self, new_state: JobState) -> None:
        """Move to ``new_state``; terminal states are final."""
        if self.state.is_terminal:
            raise ValueError(
                f"Job {self.job_id} already {self.state.value}, cannot become {new_state.value}"
            )
        self.state = new_state


@dataclass
class JobResult:
    """Terminal outcome of a job."""

    job: TranslationJob
    state: JobState
    error: str = ""
    error_code: str = ""
    line_count: int = 0
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.state is JobState.FAILED

    @property
    def skipped(self) -> bool:
        return self.state is JobState.SKIPPED
