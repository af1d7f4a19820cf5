"""Deferred job scheduling.

Jobs are addressed by name and broadcast to every handler registered for
that name. Scheduling is best-effort: a job that is already pending with
the same arguments is not queued twice, there is no cancellation, and
handlers are expected to be idempotent.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

from sitemaps.lastmod import job_context

logger = logging.getLogger(__name__)


JobHandler = Callable[..., None]


@dataclass(frozen=True)
class ScheduledJob:
    """A job waiting to run."""
    run_at: float                 # time.time() timestamp
    job_name: str
    args: tuple[Any, ...]


class Scheduler(ABC):
    """Runs named jobs some time in the future."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[JobHandler]] = {}

    def register(self, job_name: str, handler: JobHandler) -> None:
        """Register a handler for a job name."""
        handlers = self._handlers.setdefault(job_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def run_job(self, job_name: str, args: tuple[Any, ...]) -> None:
        """Run every handler for a job, inside the job context."""
        handlers = self._handlers.get(job_name, [])
        if not handlers:
            logger.warning(f"No handlers registered for job {job_name}")
            return

        with job_context():
            for handler in handlers:
                handler(*args)

    @abstractmethod
    def schedule_once(self, delay: float, job_name: str, args: tuple[Any, ...] = ()) -> None:
        """Run a job once, at least `delay` seconds from now."""
        pass


class QueueScheduler(Scheduler):
    """In-memory queue drained explicitly with run_pending().

    Suited to the CLI and to tests, where there is no long-running process
    to execute jobs in the background.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        super().__init__()
        self._clock = clock
        self._queue: list[ScheduledJob] = []

    @property
    def pending(self) -> list[ScheduledJob]:
        """Jobs waiting to run, in scheduling order."""
        return list(self._queue)

    def schedule_once(self, delay: float, job_name: str, args: tuple[Any, ...] = ()) -> None:
        args = tuple(args)
        if any(j.job_name == job_name and j.args == args for j in self._queue):
            return
        self._queue.append(ScheduledJob(self._clock() + delay, job_name, args))
        logger.debug(f"Queued {job_name}{args} in {delay}s")

    def run_pending(self, now: float | None = None) -> int:
        """Run jobs that are due. Pass now=float('inf') to run everything.

        Returns the number of jobs run.
        """
        now = self._clock() if now is None else now
        due = [j for j in self._queue if j.run_at <= now]
        self._queue = [j for j in self._queue if j.run_at > now]

        for job in due:
            self.run_job(job.job_name, job.args)
        return len(due)


class ThreadScheduler(Scheduler):
    """Runs jobs on a thread pool after a timer expires.

    Used by the HTTP server so that recomputation happens outside the
    request/response cycle. Handler failures are logged and dropped.
    """

    def __init__(self, max_workers: int = 2) -> None:
        super().__init__()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sitemaps-job")
        self._lock = threading.Lock()
        self._timers: dict[tuple[str, tuple[Any, ...]], threading.Timer] = {}
        self._closed = False

    def schedule_once(self, delay: float, job_name: str, args: tuple[Any, ...] = ()) -> None:
        key = (job_name, tuple(args))
        with self._lock:
            if self._closed:
                logger.debug(f"Scheduler is shut down, dropping {job_name}{key[1]}")
                return
            if key in self._timers:
                return
            timer = threading.Timer(delay, self._submit, args=(key,))
            timer.daemon = True
            self._timers[key] = timer
        timer.start()
        logger.debug(f"Scheduled {job_name}{key[1]} in {delay}s")

    def _submit(self, key: tuple[str, tuple[Any, ...]]) -> None:
        with self._lock:
            self._timers.pop(key, None)
            # A timer can fire while shutdown() is running
            if self._closed:
                logger.debug(f"Scheduler is shut down, dropping {key[0]}{key[1]}")
                return
            self._executor.submit(self._run_safely, *key)

    def _run_safely(self, job_name: str, args: tuple[Any, ...]) -> None:
        try:
            self.run_job(job_name, args)
        except Exception:
            logger.exception(f"Job {job_name}{args} failed")

    def shutdown(self, wait: bool = True) -> None:
        """Cancel pending timers and stop the worker pool."""
        with self._lock:
            self._closed = True
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait)
