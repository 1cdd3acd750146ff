"""
Engine - Main storage engine API.
"""

import asyncio
import logging
import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from codable_storage import config
from codable_storage.engine.dispatch import (
    DeliveryChain,
    ExecutorDispatcher,
    LoopDispatcher,
    capture_dispatcher,
)
from codable_storage.engine.initializer import StoreInitializer
from codable_storage.engine.serial_executor import SerialExecutor
from codable_storage.interfaces.codec import Codec
from codable_storage.interfaces.record_table import RecordTable
from codable_storage.models.codec import JSONCodec
from codable_storage.models.exceptions import (
    BackingStoreError,
    InitializationError,
    StorageError,
)
from codable_storage.models.record import Record

logger = logging.getLogger(__name__)

GetCompletion = Callable[[Any, Exception | None], None]
Completion = Callable[[Exception | None], None]


def _resolve_once(future: asyncio.Future, value: Any, error: Exception | None) -> None:
    """Settle a future from a completion, ignoring anything after the first call."""
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)


class Engine:
    """
    Durable key-value store for structured values.

    Provides, each as a completion-callback call and as a coroutine:
    - get(key, value_type) / aget: Read and decode the value stored under a key
    - put(value, key) / aput: Replace the value under a key, or remove it when value is None
    - clear() / aclear: Remove every stored value

    Architecture:
    - Values are encoded by a Codec and stored as records of a single table
    - All operations of one engine run on one worker thread, in submission order
    - Writes are fetch-delete-insert inside one transaction, rolled back on failure
    - Completions are delivered on the caller's event loop when there is one,
      otherwise on per-engine delivery threads that never touch the store

    If the backing store cannot be opened the engine is degraded: location is
    None and every operation reports InitializationError without doing I/O.
    """

    def __init__(
        self,
        location: str | os.PathLike | None = None,
        *,
        codec: Codec | None = None,
        timeout: float = config.DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the storage engine.

        Args:
            location: Store file to use. None selects the default location,
                      <documents>/CodableStorage/storage.db.
            codec: Value codec (default: JSONCodec).
            timeout: Seconds to wait for a store locked by another connection.
        """
        timeout = config.validate_timeout(timeout)

        self._codec: Codec = codec if codec is not None else JSONCodec()

        # Set together on success, all None when degraded or closed
        self._table: RecordTable | None = None
        self._executor: SerialExecutor | None = None
        self._delivery: DeliveryChain | None = None
        self._location: Path | None = None

        # Reported by every operation when there is no executor
        self._init_error: InitializationError | None = None

        # Guards executor hand-off between submitters and close()
        self._state_lock = threading.Lock()

        self._initialize(location, timeout)

    def _initialize(self, location: str | os.PathLike | None, timeout: float) -> None:
        try:
            table, resolved = StoreInitializer(location, timeout).open()
        except InitializationError as e:
            logger.warning("Storage engine degraded: %s", e.reason)
            self._init_error = e
            return

        self._table = table
        self._location = resolved
        self._executor = SerialExecutor(name=f"codable-storage-{resolved.name}")
        # Completions for callers without an event loop; never the store thread
        self._delivery = DeliveryChain(name=f"codable-storage-{resolved.name}-delivery")
        logger.debug("Storage engine ready at %s", resolved)

    @property
    def location(self) -> Path | None:
        """Resolved store location, None when the engine is degraded or closed."""
        return self._location

    @property
    def is_degraded(self) -> bool:
        return self._executor is None

    @property
    def codec(self) -> Codec:
        return self._codec

    # Callback API

    def get(self, key: str, value_type: Any, completion: GetCompletion) -> None:
        """
        Retrieve the value stored under a key.

        Args:
            key: The key to look up.
            value_type: Type the stored value is decoded into.
            completion: Called once with (value, error). A missing key is
                        (None, None); a decode failure is (None, DecodeError).
        """
        self._schedule(completion, self._read, key, value_type, with_value=True)

    def put(self, value: Any, key: str, completion: Completion) -> None:
        """
        Store a value under a key, replacing any previous value.

        A value of None removes the key instead.

        Args:
            value: The value to store, or None to remove the key.
            key: The key to store under.
            completion: Called once with the error, or None on success.
        """
        self._schedule(completion, self._write, value, key, with_value=False)

    def clear(self, completion: Completion) -> None:
        """
        Remove every stored value.

        Args:
            completion: Called once with the error, or None on success.
        """
        self._schedule(completion, self._clear, with_value=False)

    # Coroutine API, delegating to the callback API

    async def aget(self, key: str, value_type: Any) -> Any:
        """
        Async retrieve the value stored under a key.

        Args:
            key: The key to look up.
            value_type: Type the stored value is decoded into.

        Returns:
            The decoded value, or None if the key is not stored.

        Raises:
            StorageError: DecodeError, BackingStoreError or InitializationError.
        """
        future = asyncio.get_running_loop().create_future()
        self.get(key, value_type, lambda value, error: _resolve_once(future, value, error))
        return await future

    async def aput(self, value: Any, key: str) -> None:
        """
        Async store a value under a key, or remove the key when value is None.

        Raises:
            StorageError: EncodeError, BackingStoreError or InitializationError.
        """
        future = asyncio.get_running_loop().create_future()
        self.put(value, key, lambda error: _resolve_once(future, None, error))
        await future

    async def aclear(self) -> None:
        """
        Async remove every stored value.

        Raises:
            StorageError: BackingStoreError or InitializationError.
        """
        future = asyncio.get_running_loop().create_future()
        self.clear(lambda error: _resolve_once(future, None, error))
        await future

    # Scheduling

    def _schedule(
        self,
        completion: Callable[..., None],
        operation: Callable[..., Any],
        *args: Any,
        with_value: bool,
    ) -> None:
        with self._state_lock:
            executor = self._executor
            if executor is not None and self._delivery is not None:
                dispatcher = capture_dispatcher(self._delivery)
                executor.submit(self._run, dispatcher, completion, operation, args, with_value)
                return

        # Degraded: report on the calling thread, no I/O
        error = self._init_error or InitializationError()
        if with_value:
            completion(None, error)
        else:
            completion(error)

    def _run(
        self,
        dispatcher: ExecutorDispatcher | LoopDispatcher,
        completion: Callable[..., None],
        operation: Callable[..., Any],
        args: tuple,
        with_value: bool,
    ) -> None:
        """Run one operation on the worker thread and hand its outcome back."""
        result: Any = None
        error: Exception | None = None
        try:
            result = operation(*args)
        except StorageError as e:
            error = e
        except Exception as e:
            logger.exception("Unexpected failure in storage operation %s", operation.__name__)
            error = e

        if with_value:
            dispatcher.deliver(completion, result, error)
        else:
            dispatcher.deliver(completion, error)

    # Operations (worker thread only)

    @contextmanager
    def _transaction(self) -> Iterator[RecordTable]:
        """Begin a transaction; commit on success, roll back everything on failure."""
        table = self._table
        if table is None:
            raise self._init_error or InitializationError()

        table.begin()
        try:
            yield table
            table.commit()
        except Exception:
            try:
                table.rollback()
            except BackingStoreError as rollback_error:
                logger.warning("Rollback failed: %s", rollback_error)
            else:
                logger.debug("Transaction rolled back")
            raise

    def _read(self, key: str, value_type: Any) -> Any:
        table = self._table
        if table is None:
            raise self._init_error or InitializationError()

        records = table.fetch(key)
        if not records:
            return None
        if len(records) > 1:
            # Should not happen with put(); the oldest record wins
            logger.debug("Found %d records for key %r, using the first", len(records), key)

        return self._codec.decode(records[0].value, value_type)

    def _write(self, value: Any, key: str) -> None:
        with self._transaction() as table:
            existing = table.fetch(key)
            if value is None:
                table.delete(existing)
                return

            data = self._codec.encode(value)
            table.delete(existing)
            table.insert(Record(key=key, value=data))

    def _clear(self) -> None:
        with self._transaction() as table:
            table.delete_all()

    def _close_table(self, table: RecordTable) -> None:
        try:
            table.close()
        except BackingStoreError as e:
            logger.warning("Failed to close record table: %s", e)

    # Lifecycle

    def close(self) -> None:
        """
        Close the engine, waiting for queued operations to finish.

        Afterwards every operation reports InitializationError. May be called
        from a completion; it then returns without waiting for completions
        still queued behind it.
        """
        with self._state_lock:
            executor = self._executor
            delivery = self._delivery
            table = self._table
            if executor is None:
                return
            self._executor = None
            self._delivery = None
            self._location = None
            self._init_error = InitializationError("engine is closed")

        if table is not None:
            # Queued behind pending operations, which still see the open table
            executor.submit(self._close_table, table)
        executor.shutdown(wait=True)
        self._table = None
        if delivery is not None:
            delivery.shutdown(wait=True)

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "Engine":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.close)

    def __repr__(self) -> str:
        state = "degraded" if self.is_degraded else str(self._location)
        return f"Engine({state})"
