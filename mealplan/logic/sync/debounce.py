"""Cancellable delayed task used for the debounced plan save.

schedule() cancels any pending run and submits a new one; cancel() drops it.
Each submission carries a generation token. The callback receives the token
and must claim() it (while holding the owner's lock) before acting, so a timer
that already fired but lost the race against a cancel does nothing.
"""
import threading
from typing import Callable


class DelayedTask:
    def __init__(self, delay: float, callback: Callable[[int], None],
                 timer_factory: Callable = threading.Timer):
        self.delay = delay
        self._callback = callback
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def schedule(self) -> int:
        self.cancel()
        self._generation += 1
        token = self._generation
        timer = self._timer_factory(self.delay, self._callback, args=(token,))
        timer.daemon = True
        self._timer = timer
        self._pending = True
        timer.start()
        return token

    def cancel(self) -> bool:
        """Drop the pending run. Returns True if one was pending."""
        was_pending = self._pending
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if was_pending:
            # Invalidate a run that fired but has not claimed yet
            self._generation += 1
        self._pending = False
        return was_pending

    def claim(self, token: int) -> bool:
        """True exactly once for the current, still-pending submission."""
        if not self._pending or token != self._generation:
            return False
        self._pending = False
        self._timer = None
        return True


__all__ = ['DelayedTask']
