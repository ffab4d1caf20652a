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

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

from eks_tester.cancel import Context
from eks_tester.errors import CancellationError, PollTimeoutError, ResourceFailedError
from eks_tester.poller import PollPhase, ResourceSnapshot, poll

COMPLETE = "CREATE_COMPLETE"


def _poll(describe, ctx=None, interval=0.01, query_timeout=0.5):
    return list(
        poll(
            describe,
            "stack-1",
            COMPLETE,
            ctx=ctx or Context.background().with_timeout(2),
            poll_interval=interval,
            initial_delay=0,
            query_timeout=query_timeout,
        )
    )


def test_poll_completes_with_outputs() -> None:
    describe = MagicMock(
        side_effect=[
            ResourceSnapshot("CREATE_IN_PROGRESS"),
            ResourceSnapshot("CREATE_IN_PROGRESS"),
            ResourceSnapshot(COMPLETE, outputs={"Key": "value"}),
        ]
    )
    results = _poll(describe)

    assert [r.phase for r in results] == [PollPhase.IN_PROGRESS, PollPhase.IN_PROGRESS, PollPhase.COMPLETE]
    assert results[-1].outputs == {"Key": "value"}
    assert results[-1].terminal
    describe.assert_called_with("stack-1")


def test_poll_failed_status_on_first_read_returns_immediately() -> None:
    describe = MagicMock(return_value=ResourceSnapshot("ROLLBACK_COMPLETE", reason="boom", failed=True))
    start = time.monotonic()
    results = _poll(describe, ctx=Context.background().with_timeout(10), interval=5)

    assert time.monotonic() - start < 1
    assert len(results) == 1
    assert results[0].phase is PollPhase.FAILED
    assert isinstance(results[0].error, ResourceFailedError)
    assert "ROLLBACK_COMPLETE" in str(results[0].error)
    assert "boom" in str(results[0].error)


def test_poll_times_out_within_deadline_plus_interval() -> None:
    deadline, interval = 0.2, 0.05
    describe = MagicMock(return_value=ResourceSnapshot("CREATE_IN_PROGRESS"))
    start = time.monotonic()
    results = _poll(describe, ctx=Context.background().with_timeout(deadline), interval=interval)

    assert time.monotonic() - start <= deadline + interval + 0.1
    assert results[-1].phase is PollPhase.FAILED
    assert isinstance(results[-1].error, PollTimeoutError)
    assert all(not r.terminal for r in results[:-1])


def test_poll_cancelled_before_start_never_queries() -> None:
    ctx = Context()
    ctx.token.cancel("stopped")
    describe = MagicMock(return_value=ResourceSnapshot(COMPLETE))

    results = _poll(describe, ctx=ctx)

    assert len(results) == 1
    assert isinstance(results[0].error, CancellationError)
    describe.assert_not_called()


def test_poll_cancellation_wins_over_completion() -> None:
    ctx = Context()

    def describe(handle: str) -> ResourceSnapshot:
        ctx.token.cancel("stopped")
        return ResourceSnapshot(COMPLETE)

    results = _poll(describe, ctx=ctx)

    assert results[-1].phase is PollPhase.FAILED
    assert isinstance(results[-1].error, CancellationError)


def test_poll_cancel_during_wait() -> None:
    ctx = Context()
    threading.Timer(0.05, ctx.token.cancel).start()
    describe = MagicMock(return_value=ResourceSnapshot("CREATE_IN_PROGRESS"))
    start = time.monotonic()

    results = _poll(describe, ctx=ctx, interval=5)

    assert time.monotonic() - start < 1
    assert isinstance(results[-1].error, CancellationError)


def test_poll_query_timeout_is_transient() -> None:
    calls = []

    def describe(handle: str) -> ResourceSnapshot:
        calls.append(handle)
        if len(calls) == 1:
            time.sleep(0.2)
            return ResourceSnapshot("CREATE_IN_PROGRESS")
        return ResourceSnapshot(COMPLETE)

    results = _poll(describe, query_timeout=0.05)

    assert any(isinstance(r.error, TimeoutError) and not r.terminal for r in results)
    assert results[-1].phase is PollPhase.COMPLETE


def test_poll_query_error_is_terminal() -> None:
    describe = MagicMock(side_effect=RuntimeError("throttled"))
    results = _poll(describe)

    assert len(results) == 1
    assert results[0].phase is PollPhase.FAILED
    assert str(results[0].error) == "throttled"
