"""
Task executors for fitness evaluation batches.

The engine queues one job per unevaluated chromosome, calls start(), and
only looks at the batch result:
- LinearTaskExecutor runs the jobs one after another on the caller
- ParallelTaskExecutor spreads them over a bounded thread pool
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional

from .constants import DEFAULT_MAX_THREADS, DEFAULT_MIN_THREADS
from .errors import ArgumentError, InvalidStateError

logger = logging.getLogger(__name__)

Job = Callable[[], None]


class TaskExecutor(ABC):
    """
    Base class for batch executors.

    Args:
        timeout: Budget in seconds for one start() call (None = unbounded)
    """

    def __init__(self, timeout: Optional[float] = None):
        self._jobs: List[Job] = []
        self._lock = threading.Lock()
        self._is_running = False
        self._stop_requested = False
        self.timeout = timeout

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    @timeout.setter
    def timeout(self, value: Optional[float]) -> None:
        if value is not None and value <= 0:
            raise ArgumentError(f"timeout must be positive, got {value}")
        self._timeout = value

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._is_running

    @property
    def pending_jobs(self) -> int:
        with self._lock:
            return len(self._jobs)

    def add(self, job: Job) -> None:
        """Queue a job for the next start()."""
        if job is None or not callable(job):
            raise ArgumentError("job must be a callable")
        with self._lock:
            self._jobs.append(job)

    def clear(self) -> None:
        """Drop every queued job."""
        with self._lock:
            self._jobs.clear()

    def stop(self) -> None:
        """Ask the running batch to abandon the jobs it has not started."""
        with self._lock:
            self._stop_requested = True

    def start(self) -> bool:
        """
        Run every queued job.

        Returns:
            True if all jobs ran to completion, False on timeout or stop
        """
        with self._lock:
            if self._is_running:
                raise InvalidStateError("Executor is already running a batch")
            jobs = list(self._jobs)
            self._is_running = True
            self._stop_requested = False

        try:
            return self._run(jobs)
        finally:
            with self._lock:
                self._is_running = False

    def _should_stop(self) -> bool:
        with self._lock:
            return self._stop_requested

    @abstractmethod
    def _run(self, jobs: List[Job]) -> bool:
        """Execute a snapshot of the queued jobs."""


class LinearTaskExecutor(TaskExecutor):
    """
    Runs jobs sequentially on the calling thread.

    A job exception propagates immediately and the remaining jobs are
    abandoned. The timeout is checked after every job.
    """

    def _run(self, jobs: List[Job]) -> bool:
        start_time = time.monotonic()

        for job in jobs:
            if self._should_stop():
                logger.debug("Linear batch stopped before completion")
                return False

            job()

            if self.timeout is not None and time.monotonic() - start_time > self.timeout:
                logger.debug(f"Linear batch exceeded the {self.timeout}s timeout")
                return False

        return True


class ParallelTaskExecutor(TaskExecutor):
    """
    Runs jobs on a bounded thread pool.

    Every job is submitted exactly once. When the timeout elapses or stop()
    is called, jobs that have not started are cancelled and the pool is shut
    down without waiting, so a slow job can finish on its own thread but
    never blocks the caller.

    Job exceptions do not break the pool: they are collected and the first
    one is re-raised once the batch is over.

    Args:
        min_threads: Lower bound on worker threads
        max_threads: Upper bound on worker threads
        timeout: Budget in seconds for one start() call (None = unbounded)
    """

    def __init__(
        self,
        min_threads: int = DEFAULT_MIN_THREADS,
        max_threads: Optional[int] = DEFAULT_MAX_THREADS,
        timeout: Optional[float] = None,
    ):
        if min_threads < 1:
            raise ArgumentError(f"min_threads must be at least 1, got {min_threads}")
        if max_threads is None:
            max_threads = min_threads
        if max_threads < min_threads:
            raise ArgumentError(
                f"max_threads ({max_threads}) must not be less than "
                f"min_threads ({min_threads})"
            )
        super().__init__(timeout)
        self.min_threads = min_threads
        self.max_threads = max_threads
        self._cancel_event: Optional[threading.Event] = None
        self._futures: List[Future] = []

    def stop(self) -> None:
        super().stop()
        with self._lock:
            cancel_event = self._cancel_event
            futures = list(self._futures)
        if cancel_event is not None:
            cancel_event.set()
            for future in futures:
                future.cancel()

    def _run(self, jobs: List[Job]) -> bool:
        if not jobs:
            return True

        n_workers = max(self.min_threads, min(self.max_threads, len(jobs)))
        cancel_event = threading.Event()
        pool = ThreadPoolExecutor(
            max_workers=n_workers,
            thread_name_prefix='gaforge-fitness',
        )

        completed = False
        try:
            futures = [pool.submit(_run_unless_cancelled, job, cancel_event) for job in jobs]
            with self._lock:
                self._cancel_event = cancel_event
                self._futures = futures
                stop_requested = self._stop_requested

            if stop_requested:
                cancel_event.set()
                for future in futures:
                    future.cancel()

            logger.debug(f"Dispatched {len(jobs)} jobs to {n_workers} workers")
            done, not_done = wait(futures, timeout=self.timeout)

            if not_done:
                logger.warning(
                    f"Parallel batch timed out after {self.timeout}s with "
                    f"{len(not_done)} of {len(futures)} jobs unfinished"
                )
                cancel_event.set()
                for future in not_done:
                    future.cancel()
            else:
                completed = not cancel_event.is_set()
        finally:
            pool.shutdown(wait=completed, cancel_futures=True)
            with self._lock:
                self._cancel_event = None
                self._futures = []

        errors = [
            f.exception() for f in done
            if not f.cancelled() and f.exception() is not None
        ]
        if errors:
            logger.error(f"{len(errors)} job(s) failed in parallel batch")
            raise errors[0]

        return completed


def _run_unless_cancelled(job: Job, cancel_event: threading.Event) -> None:
    """Skip jobs whose batch was cancelled while they sat in the pool queue."""
    if cancel_event.is_set():
        return
    job()
