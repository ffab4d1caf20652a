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

"""Generic status poller for eventually-consistent external resources."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from eks_tester import logger
from eks_tester.cancel import Context
from eks_tester.errors import CancellationError, PollTimeoutError, ResourceFailedError


class PollPhase(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ResourceSnapshot:
    """One status read from the external system.

    Attributes:
        status: Raw status string (e.g. ``CREATE_IN_PROGRESS``).
        outputs: Output name to value; meaningful once complete.
        reason: Free-form status reason reported alongside the status.
        failed: Whether the status is a terminal failure.
    """

    status: str
    outputs: dict[str, str] = field(default_factory=dict)
    reason: str = ""
    failed: bool = False


@dataclass(frozen=True)
class PollResult:
    """Stream element produced by :func:`poll`."""

    handle: str
    phase: PollPhase
    status: str = ""
    outputs: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None

    @property
    def terminal(self) -> bool:
        return self.phase is not PollPhase.IN_PROGRESS


def poll(
    describe: Callable[[str], ResourceSnapshot],
    handle: str,
    desired_status: str,
    *,
    ctx: Context,
    poll_interval: float,
    initial_delay: float,
    query_timeout: float,
) -> Iterator[PollResult]:
    """Poll *handle* until it reaches *desired_status* or a terminal failure.

    The stream is lazy and single-use. It ends after exactly one terminal
    result: COMPLETE once the desired status is observed, or FAILED on a
    failure status, a query error, the context deadline, or cancellation,
    whichever happens first. A query that exceeds *query_timeout* yields an
    IN_PROGRESS result carrying the timeout and polling continues.

    Args:
        describe: Read-only status query for a handle.
        handle: Identifier of the resource to poll.
        desired_status: Status that completes the poll.
        ctx: Carries cancellation and the overall deadline.
        poll_interval: Seconds between attempts.
        initial_delay: Seconds to wait before the first attempt.
        query_timeout: Per-attempt timeout, distinct from the deadline.

    Yields:
        PollResult snapshots; the last one is terminal.
    """
    logger.info("polling %s for %s (interval=%ss, initial delay=%ss)",
                handle, desired_status, poll_interval, initial_delay)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="poll")
    try:
        delay = initial_delay
        while True:
            try:
                ctx.sleep(delay)
                snapshot = ctx.wait_future(executor.submit(describe, handle), query_timeout)
            except (CancellationError, PollTimeoutError) as err:
                logger.warning("polling %s aborted: %s", handle, err)
                yield PollResult(handle, PollPhase.FAILED, error=err)
                return
            except TimeoutError as err:
                logger.warning("status query for %s timed out; retrying", handle)
                yield PollResult(handle, PollPhase.IN_PROGRESS, error=err)
                delay = poll_interval
                continue
            except Exception as err:
                logger.warning("status query for %s failed: %s", handle, err)
                yield PollResult(handle, PollPhase.FAILED, error=err)
                return

            delay = poll_interval
            logger.info("polled %s: %s %s", handle, snapshot.status, snapshot.reason)
            if snapshot.status == desired_status:
                yield PollResult(handle, PollPhase.COMPLETE, snapshot.status, dict(snapshot.outputs))
                return
            if snapshot.failed:
                err = ResourceFailedError(
                    f"{handle} reached {snapshot.status} while waiting for {desired_status}"
                    + (f" ({snapshot.reason})" if snapshot.reason else "")
                )
                yield PollResult(handle, PollPhase.FAILED, snapshot.status, error=err)
                return
            yield PollResult(handle, PollPhase.IN_PROGRESS, snapshot.status)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
