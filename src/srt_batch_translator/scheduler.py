"""Job enumeration and concurrent execution."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from .config import SOURCE_SUFFIX
from .exceptions import JOB_ERRORS, MalformedDocument, PostconditionViolation
from .models import JobResult, JobState, TranslationJob
from .parser import CueDocument, count_lines, read_srt, save_srt, validate_srt_file
from .progress import AggregateReport, EventKind, JobEvent, ProgressAggregator
from .translator import DEFAULT_BATCH_SIZE, Backend, translate_document

logger = logging.getLogger(__name__)


def find_source_files(directory: Path, suffix: str = SOURCE_SUFFIX) -> List[Path]:
    """Find source subtitle files under ``directory``, sorted."""
    return sorted(p for p in directory.rglob(f"*{suffix}") if p.is_file())


def destination_path(source: Path, language: str, source_suffix: str = SOURCE_SUFFIX) -> Path:
    """``movie.en.srt`` -> ``movie.fr.srt`` in the same directory."""
    name = source.name
    if not name.endswith(source_suffix):
        raise ValueError(f"{source} does not end with {source_suffix}")
    return source.with_name(f"{name[:-len(source_suffix)]}.{language}.srt")


def enumerate_jobs(
    files: Iterable[Path],
    languages: Mapping[str, str],
    source_suffix: str = SOURCE_SUFFIX,
) -> List[TranslationJob]:
    """
    One job per (file, language) pair, files outer and languages inner.

    Args:
        files: Source files
        languages: Ordered mapping of language code -> name
    """
    jobs: List[TranslationJob] = []
    for source in files:
        for code, name in languages.items():
            jobs.append(TranslationJob(
                job_id=f"{len(jobs) + 1:03d}",
                source=source,
                language=code,
                language_name=name,
                destination=destination_path(source, code, source_suffix),
            ))
    return jobs


async def run_job(
    job: TranslationJob,
    backend: Backend,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> JobResult:
    """
    Run one job to a terminal result.

    Existing destinations are skipped without calling the backend. Job-level
    errors are returned as a failed result, never raised.
    """
    started = time.monotonic()

    if job.destination.exists():
        return JobResult(job, JobState.SKIPPED)

    try:
        error = validate_srt_file(job.source)
        if error:
            raise MalformedDocument(error, details={"path": str(job.source)})

        content = read_srt(job.source)
        document = CueDocument.parse(content)
        translated = await translate_document(document, job.language, backend, batch_size)

        save_srt(translated, job.destination)

        # 校验行数，失败时删除刚写入的文件
        try:
            source_lines = count_lines(content)
            target_lines = count_lines(read_srt(job.destination))
            if source_lines != target_lines:
                raise PostconditionViolation(
                    f"Line count mismatch: source ({source_lines}) vs target ({target_lines})",
                    details={"source": source_lines, "target": target_lines},
                )
        except Exception:
            job.destination.unlink(missing_ok=True)
            raise
    except JOB_ERRORS as e:
        return JobResult(
            job,
            JobState.FAILED,
            error=str(e),
            error_code=getattr(e, "code", type(e).__name__),
            elapsed=time.monotonic() - started,
        )

    return JobResult(
        job,
        JobState.SUCCEEDED,
        line_count=target_lines,
        elapsed=time.monotonic() - started,
    )


async def _worker(
    jobs: asyncio.Queue,
    events: asyncio.Queue,
    backend: Backend,
    batch_size: int,
) -> None:
    """Take jobs until the queue is empty, reporting each through ``events``."""
    while True:
        try:
            job: TranslationJob = jobs.get_nowait()
        except asyncio.QueueEmpty:
            return

        job.transition(JobState.RUNNING)
        events.put_nowait(JobEvent(EventKind.STARTED, job))
        try:
            result = await run_job(job, backend, batch_size)
        except Exception as e:
            logger.exception(f"[{job.job_id}] Unexpected error")
            result = JobResult(job, JobState.FAILED, error=str(e), error_code="internal_error")

        job.transition(result.state)
        events.put_nowait(JobEvent(EventKind.FINISHED, job, result))
        jobs.task_done()


async def run_all(
    jobs: List[TranslationJob],
    backend: Backend,
    concurrency: Optional[int] = 0,
    progress_every: int = 10,
    batch_size: int = DEFAULT_BATCH_SIZE,
    show_bar: bool = False,
) -> AggregateReport:
    """
    Run every job and aggregate the results.

    Args:
        jobs: Fresh (pending) jobs, run in order
        backend: Translation backend shared by all workers
        concurrency: Worker pool size; 1 is sequential, 0 or None starts
            one worker per job
        progress_every: Log a progress line every N completed jobs

    Returns:
        AggregateReport; all jobs run to completion regardless of failures
    """
    not_pending = [j.job_id for j in jobs if j.state is not JobState.PENDING]
    if not_pending:
        raise ValueError(f"Jobs already started: {', '.join(not_pending)}")

    if not jobs:
        return AggregateReport(total=0)

    queue: asyncio.Queue = asyncio.Queue()
    for job in jobs:
        queue.put_nowait(job)

    workers_count = len(jobs) if not concurrency or concurrency < 1 else min(concurrency, len(jobs))
    logger.info(f"Starting {len(jobs)} translation jobs ({workers_count} workers)...")

    aggregator = ProgressAggregator(len(jobs), progress_every, show_bar)
    aggregator_task = asyncio.create_task(aggregator.run())

    workers = [
        asyncio.create_task(_worker(queue, aggregator.events, backend, batch_size))
        for _ in range(workers_count)
    ]

    await queue.join()
    await asyncio.gather(*workers)
    return await aggregator_task
