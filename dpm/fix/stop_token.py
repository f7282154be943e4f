"""Cooperative cancellation for the retry loop."""

from __future__ import annotations

import threading


class StopToken:
    """Stop request raised by a signal handler and polled by the controller.

    The token is only checked at the loop top and before the retry delay;
    parsing and command rendering never look at it.
    """

    def __init__(self) -> None:
        self._event: threading.Event = threading.Event()

    def signalHandle_requestStop(self, signum: int, _frame) -> None:
        """
        signal.signal()-compatible handler that requests a stop.

        Args:
            signum: Received signal number.
            _frame: Python frame object (unused).
        """
        _ = signum
        self.stop_request()

    def stop_request(self) -> None:
        """Request a stop."""
        self._event.set()

    def isStopped(self) -> bool:
        """Check if a stop was requested."""
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to `seconds`, waking early on a stop request.

        Returns:
            True if a stop was requested before or during the wait.
        """
        if seconds <= 0:
            return self._event.is_set()
        return self._event.wait(seconds)
