"""
Completion delivery on the caller's context.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any

from codable_storage.engine.serial_executor import SerialExecutor

logger = logging.getLogger(__name__)


class DeliveryChain:
    """
    Delivery threads for callers that are not running an event loop.

    Completions of operations issued by ordinary code run on the first
    executor of the chain. Operations issued from inside a completion
    deliver on the next executor down, created on first use, so a
    completion may wait for a nested call without blocking the executor
    it runs on. Each executor delivers in FIFO order.
    """

    def __init__(self, name: str = "codable-storage-delivery") -> None:
        self._name = name
        self._executors: list[SerialExecutor] = []
        self._lock = threading.Lock()

    def executor_for_caller(self) -> SerialExecutor:
        """Return the executor that delivers completions to the current thread."""
        with self._lock:
            depth = 0
            for level, executor in enumerate(self._executors):
                if executor.owns_current_thread():
                    depth = level + 1
                    break
            while len(self._executors) <= depth:
                level = len(self._executors)
                self._executors.append(SerialExecutor(name=f"{self._name}-{level}"))
            return self._executors[depth]

    def owns_current_thread(self) -> bool:
        with self._lock:
            return any(e.owns_current_thread() for e in self._executors)

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop every delivery executor. Completions already queued still run.

        Args:
            wait: Block until queued completions have run. Ignored when called
                  from a completion, which may be waited on by an outer one.
        """
        wait = wait and not self.owns_current_thread()
        with self._lock:
            executors = list(self._executors)
        for executor in executors:
            executor.shutdown(wait=wait)


class ExecutorDispatcher:
    """Runs completions on a delivery executor."""

    def __init__(self, executor: SerialExecutor) -> None:
        self.executor = executor

    def deliver(self, completion: Callable[..., Any], *args: Any) -> None:
        self.executor.submit(self._call, completion, args)

    @staticmethod
    def _call(completion: Callable[..., Any], args: tuple) -> None:
        try:
            completion(*args)
        except Exception:
            logger.exception("Storage completion %r raised", completion)


class LoopDispatcher:
    """Schedules completions on the event loop that issued the operation."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    def deliver(self, completion: Callable[..., Any], *args: Any) -> None:
        try:
            self.loop.call_soon_threadsafe(completion, *args)
        except RuntimeError:
            # Loop closed before the operation finished; nobody is left to notify
            logger.warning("Event loop closed, dropping storage completion %r", completion)


def capture_dispatcher(delivery: DeliveryChain) -> ExecutorDispatcher | LoopDispatcher:
    """
    Capture the calling context.

    Args:
        delivery: Delivery threads for callers without a loop.

    Returns:
        A LoopDispatcher bound to the running event loop, if any,
        an ExecutorDispatcher on the caller's delivery executor otherwise.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return ExecutorDispatcher(delivery.executor_for_caller())
    return LoopDispatcher(loop)
