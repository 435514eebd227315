#
#
#

"""Cancellation tokens for in-flight DIM calls.

A token is shared between the code that may abandon an operation and the
client performing it. Cancelling is one-way and thread safe.
"""

from threading import Event, Lock, Timer
from typing import Callable, List, Optional

from .exceptions import DimClientCanceled


class CancelToken:
    def __init__(self):
        self._event = Event()
        self._lock = Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._timer: Optional[Timer] = None
        self.reason: Optional[str] = None

    @classmethod
    def with_timeout(cls, seconds: float) -> 'CancelToken':
        """Return a token that cancels itself after `seconds`."""
        token = cls()
        timer = Timer(seconds, token.cancel, kwargs={'reason': 'timed out'})
        timer.daemon = True
        token._timer = timer
        timer.start()
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = 'canceled') -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        if self._timer is not None:
            self._timer.cancel()
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register `callback` to run once on cancellation.

        Runs immediately when the token is already cancelled. Returns a
        function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def raise_if_cancelled(self, method: str) -> None:
        if self._event.is_set():
            raise DimClientCanceled(method, self.reason)

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def _discard(self, callback):
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass
