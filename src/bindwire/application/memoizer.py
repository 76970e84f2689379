import threading
from types import TracebackType
from typing import Any, Callable, Optional


class Memoizer:
    """Runs a producer at most once and replays its outcome to every caller.

    Both outcomes are cached: a returned value is returned again and a raised
    exception is raised again with its original traceback, so a failing
    producer is never retried. Callers racing the first computation block
    until it completes.

    Cycle detection is per thread. A cycle through two memoized constructors
    entered from opposite ends by two threads at once blocks both threads,
    each waiting on the lock the other holds. Within a single thread such a
    cycle is reported as CyclicBinding.

    Attributes:
        _lock: Guards the first computation. Reentrant so that a producer
            resolving its own key reaches the cycle detector instead of
            deadlocking.
        _done: Set only after the outcome has been stored.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._done = False
        self._value: Any = None
        self._error: Optional[BaseException] = None
        self._traceback: Optional[TracebackType] = None

    def load(self, producer: Callable[[], Any]) -> Any:
        """Return the memoized outcome of producer, computing it on first use.

        Args:
            producer: Zero-argument callable computing the value.

        Returns:
            The value produced by the first call.

        Raises:
            Exception: The exception raised by the first call, unchanged.
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = producer()
                    except Exception as error:
                        self._error = error
                        self._traceback = error.__traceback__
                    self._done = True
        if self._error is not None:
            raise self._error.with_traceback(self._traceback)
        return self._value
