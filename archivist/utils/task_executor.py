"""Fire-and-forget task submission for archive processing.

Processing an archive request can take tens of seconds (the Wayback Machine
is slow), so a request handler may hand it off instead of awaiting it.  The
lifecycle service only promises that the work has been *submitted*; it does
not promise that it runs before the submitting call returns.

Two executors implement the :class:`TaskExecutor` protocol:

1. **AsyncioTaskExecutor** -- schedules each job with ``asyncio.create_task``
   on the running loop and keeps a strong reference until it finishes
   (the loop itself only holds weak references to tasks).
2. **BackgroundTasksExecutor** -- adapts FastAPI's ``BackgroundTasks`` so
   the job runs after the HTTP response has been sent.

Failures inside a job are logged, never re-raised into the submitter.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Protocol

import structlog
from fastapi import BackgroundTasks

from archivist.utils.logging import get_logger

Job = Callable[[], Awaitable[Any]]

_logger: structlog.BoundLogger = get_logger(__name__)


class TaskExecutor(Protocol):
    """Anything that accepts a zero-argument coroutine function to run later."""

    def submit(self, job: Job, *, name: str = "job") -> None:
        ...


async def _run_logged(job: Job, name: str) -> None:
    try:
        await job()
    except Exception:
        _logger.exception("background_job_failed", job=name)


class AsyncioTaskExecutor:
    """Run jobs as detached asyncio tasks on the current event loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def submit(self, job: Job, *, name: str = "job") -> None:
        task = asyncio.create_task(_run_logged(job, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        """Number of submitted jobs that have not finished yet."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every job submitted so far.  Used at shutdown and in tests."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class BackgroundTasksExecutor:
    """Queue jobs on a FastAPI ``BackgroundTasks`` instance for this request."""

    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, job: Job, *, name: str = "job") -> None:
        self._background_tasks.add_task(_run_logged, job, name)
