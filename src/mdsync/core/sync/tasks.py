"""
Pending handles and the deferred task queue.

The sync engine is single threaded. Work that cannot finish immediately
(a store that commits lazily, a link to a document that has not been
synced yet) is expressed with two tools:

- ``Pending``: a minimal promise. Continuations registered with ``then``
  run synchronously, in registration order, when the handle settles.
- ``DeferredTaskQueue``: a FIFO of callables drained after the main pass.
  Tasks queued while draining run in the same drain. A task failing with
  a DocumentError is logged and collected; the rest of the queue keeps
  running.
"""

import logging
from collections import deque
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from mdsync.core.errors import DocumentError

logger = logging.getLogger(__name__)

T = TypeVar("T")

PENDING = "pending"
RESOLVED = "resolved"
REJECTED = "rejected"


class Pending(Generic[T]):
    """
    A value that may not be available yet.

    Example:
        >>> handle = Pending()
        >>> doubled = handle.then(lambda v: v * 2)
        >>> handle.resolve(21)
        >>> doubled.result()
        42
    """

    def __init__(self) -> None:
        self._state = PENDING
        self._value: Any = None
        self._error: BaseException | None = None
        self._callbacks: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        if self._state == RESOLVED:
            return f"Pending(resolved={self._value!r})"
        if self._state == REJECTED:
            return f"Pending(rejected={self._error!r})"
        return "Pending()"

    @classmethod
    def resolved(cls, value: T) -> "Pending[T]":
        """Return a handle already resolved with ``value``."""
        handle: Pending[T] = cls()
        handle.resolve(value)
        return handle

    @classmethod
    def rejected(cls, error: BaseException) -> "Pending[Any]":
        """Return a handle already rejected with ``error``."""
        handle: Pending[Any] = cls()
        handle.reject(error)
        return handle

    @classmethod
    def wrap(cls, value: "T | Pending[T]") -> "Pending[T]":
        """Return ``value`` if it is a handle, else a resolved handle for it."""
        if isinstance(value, Pending):
            return value
        return cls.resolved(value)

    @property
    def done(self) -> bool:
        """True once the handle is resolved or rejected."""
        return self._state != PENDING

    @property
    def failed(self) -> bool:
        """True if the handle was rejected."""
        return self._state == REJECTED

    @property
    def error(self) -> BaseException | None:
        """The rejection error, if any."""
        return self._error

    def resolve(self, value: "T | Pending[T]") -> None:
        """Settle with ``value``; a handle value is followed instead."""
        if isinstance(value, Pending):
            value.then(self.resolve, self.reject)
            return
        self._settle(RESOLVED, value, None)

    def reject(self, error: BaseException) -> None:
        """Settle with ``error``."""
        self._settle(REJECTED, None, error)

    def _settle(self, state: str, value: Any, error: BaseException | None) -> None:
        if self._state != PENDING:
            raise RuntimeError(f"Pending value already {self._state}")
        self._state, self._value, self._error = state, value, error
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def then(
        self,
        on_resolve: Callable[[T], Any] | None = None,
        on_reject: Callable[[BaseException], Any] | None = None,
    ) -> "Pending[Any]":
        """
        Chain a continuation.

        Returns a new handle settled with the continuation's return value
        (or its exception). Without ``on_reject``, a rejection passes
        through to the new handle unchanged.
        """
        chained: Pending[Any] = Pending()

        def run() -> None:
            try:
                if self._state == RESOLVED:
                    result = on_resolve(self._value) if on_resolve else self._value
                elif on_reject is not None:
                    assert self._error is not None
                    result = on_reject(self._error)
                else:
                    assert self._error is not None
                    chained.reject(self._error)
                    return
            except Exception as e:
                chained.reject(e)
                return
            chained.resolve(result)

        if self.done:
            run()
        else:
            self._callbacks.append(run)
        return chained

    def result(self) -> T:
        """
        Return the resolved value.

        Raises:
            RuntimeError: If the handle has not settled yet
            Exception: The rejection error, if the handle was rejected
        """
        if self._state == PENDING:
            raise RuntimeError("Pending value has not been settled")
        if self._error is not None:
            raise self._error
        return self._value


class DeferredTaskQueue:
    """
    FIFO queue of follow-up work.

    Example:
        >>> queue = DeferredTaskQueue()
        >>> queue.defer(print, "linked")
        >>> queue.run()
        linked
        []
    """

    def __init__(self) -> None:
        self._tasks: deque[tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]] = deque()

    def __len__(self) -> int:
        return len(self._tasks)

    def defer(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``fn(*args, **kwargs)`` to run on the next drain."""
        self._tasks.append((fn, args, kwargs))

    def run(self) -> list[DocumentError]:
        """
        Drain the queue, including tasks queued while draining.

        Returns:
            DocumentErrors raised (or rejected) by tasks during this drain.
            Handles still pending when the drain ends append to this list
            if they are rejected later.

        Raises:
            ConfigurationError: Setup defects are not swallowed
        """
        errors: list[DocumentError] = []

        def record(error: BaseException) -> None:
            if not isinstance(error, DocumentError):
                raise error
            logger.warning(f"Follow-up task failed: {error}")
            errors.append(error)

        while self._tasks:
            fn, args, kwargs = self._tasks.popleft()
            try:
                result = fn(*args, **kwargs)
            except DocumentError as e:
                record(e)
                continue
            if isinstance(result, Pending):
                if result.done:
                    if result.failed:
                        assert result.error is not None
                        record(result.error)
                else:
                    result.then(None, record)

        return errors
