"""Shared bounded worker pool for data-parallel fan-out.

Theme discovery, job execution and per-file copies all map a function over
a pre-collected list of independent items. They share one fixed-size
``ThreadPoolExecutor``. A ``map`` issued from inside one of the pool's own
threads runs inline in that thread: a job that fans out its file copies
must not wait on futures queued behind other jobs holding every worker.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_worker_state = threading.local()


def _mark_worker_thread() -> None:
    _worker_state.in_pool = True


def in_worker_thread() -> bool:
    """Return True when called from a WorkerPool thread."""
    return getattr(_worker_state, "in_pool", False)


def default_worker_count() -> int:
    return os.cpu_count() or 4


class WorkerPool:
    """Fixed-size thread pool with an order-preserving ``map``."""

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max(1, max_workers or default_worker_count())
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="deploy",
            initializer=_mark_worker_thread,
        )
        logger.debug("Worker pool started with %d worker(s)", self.max_workers)

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply ``fn`` to every item and return results in input order.

        The first exception raised by any call is re-raised after pending
        calls are cancelled; calls already running finish on their own.
        """
        work = list(items)
        if not work:
            return []
        if len(work) == 1 or self.max_workers == 1 or in_worker_thread():
            return [fn(item) for item in work]

        futures: list[Future[R]] = [self._executor.submit(fn, item) for item in work]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def run_parallel(pool: WorkerPool | None, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
    """Map ``fn`` over ``items`` on ``pool``, or sequentially without one."""
    if pool is None:
        return [fn(item) for item in items]
    return pool.map(fn, items)
