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

"""Idempotency and status guard wrapped around every lifecycle operation."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import timedelta

from eks_tester import console, logger
from eks_tester.state import ManagedResource, StatusRecorder


def create_skip_reason(res: ManagedResource) -> str | None:
    """Why a create is a no-op for *res*, or None if it must act."""
    if not res.create_enabled:
        return "creation disabled"
    if res.external_ref:
        return f"external resource {res.external_ref!r} given"
    if res.created:
        return "already created"
    if res.handle:
        return f"creation already submitted ({res.handle})"
    return None


def delete_skip_reason(res: ManagedResource) -> str | None:
    """Why a delete is a no-op for *res*, or None if it must act."""
    if not res.create_enabled:
        return "creation disabled; resource not owned"
    if not res.created and not res.handle:
        return "not created"
    return None


class StatusGuard:
    """Skips satisfied transitions and persists timing and outcome of the rest.

    Args:
        recorder: Write-through sink for the status record.
        resource: Record of the unit being driven.
        kind: Human-readable kind used in log and status messages.
    """

    def __init__(self, recorder: StatusRecorder, resource: ManagedResource, kind: str) -> None:
        self.recorder = recorder
        self.resource = resource
        self.kind = kind

    def create(self, act: Callable[[], None]) -> bool:
        """Run *act* unless the resource is already in the desired state.

        Returns:
            True if *act* ran to completion, False if the create was skipped.
        """
        return self._run("create", create_skip_reason(self.resource), act)

    def delete(self, act: Callable[[], None]) -> bool:
        """Run *act* unless there is nothing to delete.

        Returns:
            True if *act* ran to completion, False if the delete was skipped.
        """
        return self._run("delete", delete_skip_reason(self.resource), act)

    def _run(self, phase: str, skip_reason: str | None, act: Callable[[], None]) -> bool:
        name = self.resource.name
        if skip_reason is not None:
            console.print(f"[yellow]\u2139\ufe0f  Skipping {phase} {self.kind} {name}: {skip_reason}[/yellow]")
            logger.info("skipping %s %s %s: %s", phase, self.kind, name, skip_reason)
            return False

        start = time.monotonic()
        try:
            act()
        except Exception as err:
            self.recorder.record(f"failed to {phase} {self.kind} {name} ({err})")
            raise
        finally:
            took = timedelta(seconds=time.monotonic() - start)
            setattr(self.resource, f"{phase}_took", took)
            self.recorder.sync()
            logger.info("%s %s %s took %s", phase, self.kind, name, took)
        self.recorder.record(f"{phase}d {self.kind} {name}")
        self.recorder.sync()
        return True
