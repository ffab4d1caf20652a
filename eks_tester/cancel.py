# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Cancellation tokens and deadline-carrying contexts.

Every blocking wait in the lifecycle engines goes through a :class:`Context`,
which resolves on whichever comes first: the timer, a cancellation of its
token (explicit stop or OS signal), the context deadline, or completion of
a sub-operation future.
"""

from __future__ import annotations

import signal
import threading
import time
from concurrent.futures import Future
from typing import Any

from eks_tester import logger
from eks_tester.errors import CancellationError, PollTimeoutError

STOP_REASON = "stopped"


class CancelToken:
    """Thread-safe, one-shot cancellation signal carrying a reason."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = STOP_REASON) -> None:
        """Cancel the token. Only the first reason is kept."""
        with self._cond:
            if self._reason is None:
                self._reason = reason
            self._cond.notify_all()

    def notify(self) -> None:
        """Wake all waiters without cancelling."""
        with self._cond:
            self._cond.notify_all()

    def wait(self, timeout: float, until: Any = None) -> bool:
        """Block until cancelled, ``until()`` is true, or *timeout* elapses.

        Returns:
            True if the wait ended because the token was cancelled.
        """
        def _done() -> bool:
            return self._reason is not None or (until is not None and until())

        with self._cond:
            self._cond.wait_for(_done, timeout=max(timeout, 0))
            return self._reason is not None


class Context:
    """A cancellation token paired with an optional monotonic deadline."""

    def __init__(self, token: CancelToken | None = None, deadline: float | None = None) -> None:
        self.token = token if token is not None else CancelToken()
        self.deadline = deadline

    @classmethod
    def background(cls) -> Context:
        """Context that is never cancelled and never expires."""
        return cls()

    def with_timeout(self, seconds: float) -> Context:
        """Child sharing this token, expiring after *seconds* (or earlier)."""
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return Context(self.token, deadline)

    def detached(self, seconds: float | None = None) -> Context:
        """Context with a fresh token: cancellation of this one is ignored."""
        deadline = None if seconds is None else time.monotonic() + seconds
        return Context(CancelToken(), deadline)

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self) -> None:
        """Raise if the context is already cancelled or past its deadline.

        Raises:
            CancellationError: If the token was cancelled.
            PollTimeoutError: If the deadline has elapsed.
        """
        if self.token.cancelled:
            raise CancellationError(self.token.reason)
        if self.expired():
            raise PollTimeoutError("deadline exceeded")

    def _bounded(self, seconds: float) -> tuple[float, bool]:
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            return max(remaining, 0), True
        return seconds, False

    def sleep(self, seconds: float) -> None:
        """Sleep for *seconds* unless cancelled or the deadline comes first.

        Raises:
            CancellationError: If the token is cancelled while waiting.
            PollTimeoutError: If the deadline elapses while waiting.
        """
        self.check()
        wait_for, hits_deadline = self._bounded(seconds)
        if self.token.wait(wait_for):
            raise CancellationError(self.token.reason)
        if hits_deadline:
            raise PollTimeoutError("deadline exceeded")

    def wait_future(self, future: Future, timeout: float) -> Any:
        """Wait for a sub-operation with its own bounded timeout.

        Args:
            future: Pending sub-operation.
            timeout: Sub-operation timeout, independent of the context deadline.

        Returns:
            The future's result.

        Raises:
            CancellationError: If the token is cancelled first.
            PollTimeoutError: If the context deadline elapses first.
            TimeoutError: If the sub-operation timeout elapses first.
        """
        self.check()
        future.add_done_callback(lambda _: self.token.notify())
        wait_for, hits_deadline = self._bounded(timeout)
        if self.token.wait(wait_for, until=future.done):
            raise CancellationError(self.token.reason)
        if future.done():
            return future.result()
        if hits_deadline:
            raise PollTimeoutError("deadline exceeded")
        raise TimeoutError(f"sub-operation did not finish within {timeout}s")


def install_signal_handlers(token: CancelToken, signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)) -> None:
    """Cancel *token* when the process receives one of *signals*.

    Must be called from the main thread.
    """
    def _handler(signum: int, _frame: Any) -> None:
        name = signal.Signals(signum).name
        logger.warning("received os signal %s; cancelling", name)
        token.cancel(f"received os signal {name}")

    for sig in signals:
        signal.signal(sig, _handler)
