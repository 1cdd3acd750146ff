"""
SerialExecutor - single-worker FIFO execution context.
"""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any


class SerialExecutor:
    """
    Runs submitted jobs one at a time, in submission order, on one thread.

    Everything that touches the resource guarded by this executor must be
    submitted here; the worker thread is its only user.
    """

    def __init__(self, name: str = "codable-storage") -> None:
        """
        Initialize the executor.

        Args:
            name: Prefix for the worker thread name.
        """
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._worker_ident: int | None = None

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """
        Queue a job behind every job submitted before it.

        Args:
            fn: Callable to run on the worker thread.
            *args: Arguments for fn.

        Returns:
            Future resolved with the job's result.

        Raises:
            RuntimeError: If the executor has been shut down.
        """
        return self._pool.submit(self._call, fn, args)

    def _call(self, fn: Callable[..., Any], args: tuple) -> Any:
        self._worker_ident = threading.get_ident()
        return fn(*args)

    def owns_current_thread(self) -> bool:
        """Return True when called from a job running on this executor."""
        return self._worker_ident == threading.get_ident()

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting jobs. Jobs already queued still run.

        Args:
            wait: Block until queued jobs have finished. Ignored when called
                  from the worker thread itself, which cannot wait for itself.
        """
        self._pool.shutdown(wait=wait and not self.owns_current_thread())
