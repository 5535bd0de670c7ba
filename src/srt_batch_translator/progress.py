"""Run progress aggregation.

Workers never touch the counters. They put :class:`JobEvent` values on the
aggregator's queue, and the aggregator task is the only writer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from tqdm import tqdm

from .models import JobResult, JobState, TranslationJob

logger = logging.getLogger(__name__)


class EventKind(Enum):
    STARTED = "started"
    FINISHED = "finished"


@dataclass
class JobEvent:
    kind: EventKind
    job: TranslationJob
    result: Optional[JobResult] = None


@dataclass
class AggregateReport:
    """Final outcome of a run."""

    total: int
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    elapsed: float = 0.0
    results: List[JobResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed + self.skipped

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.all_ok else 1

    def failures(self) -> List[JobResult]:
        return [r for r in self.results if r.failed]


def format_result(result: JobResult) -> str:
    """One status line for a finished job."""
    job = result.job
    if result.state is JobState.SKIPPED:
        return f"[{job.job_id}] SKIP {job.destination} (already exists)"
    if result.state is JobState.SUCCEEDED:
        return (
            f"[{job.job_id}] SUCCESS {job.destination} "
            f"({result.line_count} lines, {result.elapsed:.1f}s)"
        )
    return f"[{job.job_id}] ERROR {job.source.name} -> {job.language_name}: {result.error} ({result.elapsed:.1f}s)"


class ProgressAggregator:
    """Collects job events and reports progress every ``progress_every`` completions."""

    def __init__(self, total: int, progress_every: int = 10, show_bar: bool = False):
        self.total = total
        self.progress_every = max(1, progress_every)
        self.show_bar = show_bar
        self.events: asyncio.Queue[JobEvent] = asyncio.Queue()
        self.report = AggregateReport(total=total)
        self.running = 0

    async def run(self) -> AggregateReport:
        """Consume events until every job has finished."""
        started_at = time.monotonic()
        bar = tqdm(total=self.total, desc="Translating", unit="job", disable=not self.show_bar)

        try:
            while self.report.processed < self.total:
                event = await self.events.get()
                if event.kind is EventKind.STARTED:
                    self.running += 1
                    logger.debug(f"[{event.job.job_id}] PROCESSING {event.job.source.name} -> {event.job.language_name}")
                else:
                    self._record(event.result)
                    bar.update(1)
                self.events.task_done()
        finally:
            bar.close()

        self.report.elapsed = time.monotonic() - started_at
        return self.report

    def _record(self, result: JobResult) -> None:
        report = self.report
        report.results.append(result)
        self.running = max(0, self.running - 1)

        if result.state is JobState.SKIPPED:
            report.skipped += 1
            logger.info(format_result(result))
        elif result.state is JobState.SUCCEEDED:
            report.succeeded += 1
            logger.info(format_result(result))
        else:
            report.failed += 1
            logger.error(format_result(result))

        if report.processed % self.progress_every == 0 or report.processed == self.total:
            logger.info(self.progress_line())

    def progress_line(self) -> str:
        report = self.report
        percent = report.processed * 100 // self.total if self.total else 100
        return (
            f"Progress: {percent}% ({report.processed}/{self.total}) - "
            f"Success: {report.succeeded}, Errors: {report.failed}, "
            f"Skipped: {report.skipped}, Running: {self.running}"
        )
