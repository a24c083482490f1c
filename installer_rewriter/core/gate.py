"""Admission control for per-version processing units.

A ``ConcurrencyGate`` sits between the orchestrator and its executor. Each
submission takes a permit first and hands it back when the submitted work
finishes, so at most ``limit`` units are ever running at once. Submitting
while every permit is taken blocks the submitting thread.

An unlimited gate (``limit=None``) submits straight through.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyGate:
    """Counting-permit gate in front of an ``Executor``.

    Parameters
    ----------
    limit:
        Maximum number of admitted, unfinished units. ``None`` disables
        the gate.
    """

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
        self._limit = limit
        self._permits = threading.BoundedSemaphore(limit) if limit is not None else None

    @property
    def limit(self) -> int | None:
        return self._limit

    def submit(
        self,
        executor: Executor,
        fn: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> Future[T]:
        """Acquire a permit, then submit *fn* to *executor*.

        The permit is released when the returned future completes, whether
        the work succeeded, raised, or was never started because the
        executor rejected it.
        """
        if self._permits is None:
            return executor.submit(fn, *args, **kwargs)

        self._permits.acquire()
        try:
            future = executor.submit(fn, *args, **kwargs)
        except BaseException:
            self._permits.release()
            raise
        future.add_done_callback(self._release)
        return future

    def _release(self, _future: Future[Any]) -> None:
        assert self._permits is not None
        self._permits.release()

    def __repr__(self) -> str:
        return f"<ConcurrencyGate limit={self._limit}>"
