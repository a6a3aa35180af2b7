"""Single-owner worker that serializes access to a storage backend."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..domain import StoreUnavailable
from .backend import StorageBackend

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[StorageBackend], Awaitable[T]]


class StorageWorker:
    """Owns a storage backend and runs operations against it one at a time.

    Embedded storage engines expect a single open handle used from a single
    context. StorageWorker enforces that discipline explicitly: one asyncio
    task consumes a queue of requests and is the only code that ever touches
    the backend. Callers submit an operation and await its result; they may
    do so concurrently from any number of tasks.

    Guarantees:
    - Operations run strictly in submission order, never interleaved
    - An operation's exception is delivered to its caller only; the worker
      keeps running
    - After ``close()``, queued operations that had not started and every
      later submission fail with StoreUnavailable
    - The same holds when the worker task dies underneath its callers, for
      example when it is cancelled or its event loop shuts down; the worker
      is bound to the event loop it first ran on

    Examples:
        >>> worker = StorageWorker(InMemoryStorageBackend())
        >>> events = await worker.submit(lambda backend: backend.find(predicate))
        >>> await worker.close()
    """

    def __init__(self, backend: StorageBackend) -> None:
        """Initialize the worker. The consuming task starts on first use.

        Args:
            backend: The storage handle this worker takes ownership of
        """
        self._backend = backend
        self._queue: asyncio.Queue[tuple[Operation[Any], asyncio.Future[Any]] | None] = (
            asyncio.Queue()
        )
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._shut_down = False

    @property
    def closed(self) -> bool:
        """Whether the worker has been torn down."""
        return self._closed

    async def submit(self, operation: Operation[T]) -> T:
        """Run an operation against the backend in the worker's context.

        Args:
            operation: Coroutine function receiving the backend.

        Returns:
            Whatever the operation returns.

        Raises:
            StoreUnavailable: If the worker is closed, or closes before the
                operation gets to run.
            Exception: Anything the operation itself raises.
        """
        if self._closed:
            raise StoreUnavailable("Event store has been closed")

        loop = asyncio.get_running_loop()
        if self._task is None:
            self._task = loop.create_task(self._run(), name="chainevents-storage-worker")
        elif self._task.done() or self._task.get_loop() is not loop:
            # Worker was cancelled or belongs to an event loop that has gone away
            self._closed = True
            raise StoreUnavailable("Event store worker is no longer running")

        future: asyncio.Future[T] = loop.create_future()
        self._queue.put_nowait((operation, future))
        return await future

    async def close(self) -> None:
        """Stop the worker and close the backend.

        The operation currently running, if any, completes normally. Safe to
        call after the worker task has died; the backend is still closed.
        """
        if self._shut_down:
            return
        self._shut_down = True
        self._closed = True

        self._abandon_queued()

        task, self._task = self._task, None
        if task is not None and not task.done() and task.get_loop() is asyncio.get_running_loop():
            self._queue.put_nowait(None)
            await task

        await self._backend.close()

    def _abandon_queued(self, current: asyncio.Future[Any] | None = None) -> None:
        """Fail the in-flight request, if any, and every queued request."""
        abandoned = []
        if current is not None:
            abandoned.append(current)
        while not self._queue.empty():
            request = self._queue.get_nowait()
            if request is not None:
                abandoned.append(request[1])

        failed = 0
        for future in abandoned:
            if not future.done():
                future.set_exception(StoreUnavailable("Event store closed before query ran"))
                failed += 1
        if failed:
            LOGGER.debug("Abandoned queued storage operations", extra={"count": failed})

    async def _run(self) -> None:
        """Consume requests until the stop sentinel arrives."""
        future: asyncio.Future[Any] | None = None
        try:
            while True:
                request = await self._queue.get()
                if request is None:
                    return

                operation, future = request
                if future.done():
                    # Caller gave up waiting
                    continue

                try:
                    result = await operation(self._backend)
                except Exception as exc:
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(result)
        finally:
            # Reached with pending work only when the task is cancelled,
            # e.g. by event loop shutdown
            self._closed = True
            self._abandon_queued(future)
