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

"""Stack lifecycle engine: create-or-skip, submit, poll, extract outputs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from rich.panel import Panel

from eks_tester import console, logger
from eks_tester.aws.cfn import StackClient
from eks_tester.cancel import Context
from eks_tester.config import StackTimings
from eks_tester.constants import (
    CFN_CAPABILITY_NAMED_IAM,
    CFN_STATUS_CREATE_COMPLETE,
    CFN_STATUS_DELETE_COMPLETE,
)
from eks_tester.errors import OutputContractError
from eks_tester.guard import StatusGuard
from eks_tester.poller import PollResult, poll
from eks_tester.state import ManagedResource, StatusRecorder


@dataclass(frozen=True)
class StackSpec:
    """Everything needed to submit one stack.

    Attributes:
        template_body: Template text.
        parameters: Parameter key to value.
        tags: Tags applied to the stack.
        known_outputs: Output keys the caller knows how to consume.
        capabilities: Capabilities acknowledged on submission.
    """

    template_body: str
    parameters: dict[str, str]
    tags: dict[str, str]
    known_outputs: frozenset[str]
    capabilities: tuple[str, ...] = field(default=(CFN_CAPABILITY_NAMED_IAM,))


def map_outputs(handle: str, outputs: Mapping[str, str], known: Iterable[str]) -> dict[str, str]:
    """Validate stack outputs against the known schema.

    Raises:
        OutputContractError: If any output key is not in *known*.
    """
    known = set(known)
    for key in outputs:
        if key not in known:
            raise OutputContractError(f"unexpected OutputKey {key!r} from {handle!r}")
    return dict(outputs)


class StackLifecycle:
    """Drives stacks through create and delete, persisting every observed status.

    Args:
        client: CloudFormation client.
        recorder: Write-through sink for the status record.
        timings: Deadline and polling cadence.
    """

    def __init__(self, client: StackClient, recorder: StatusRecorder, timings: StackTimings | None = None) -> None:
        self.client = client
        self.recorder = recorder
        self.timings = timings or StackTimings()

    def create(
        self,
        resource: ManagedResource,
        build_spec: Callable[[], StackSpec],
        ctx: Context,
        kind: str = "stack",
    ) -> bool:
        """Create the stack for *resource* unless it already exists or is external.

        Args:
            resource: Record of the stack; updated in place.
            build_spec: Evaluated once, at submission time.
            ctx: Cancellation context; the engine adds its own deadline.
            kind: Human-readable kind for messages.

        Returns:
            True if a stack was created, False if the create was skipped.
        """
        guard = StatusGuard(self.recorder, resource, kind)
        return guard.create(lambda: self._create(resource, build_spec(), ctx, kind))

    def delete(self, resource: ManagedResource, kind: str = "stack") -> bool:
        """Delete the stack for *resource*; runs to completion regardless of cancellation.

        Returns:
            True if a stack was deleted, False if the delete was skipped.
        """
        guard = StatusGuard(self.recorder, resource, kind)
        return guard.delete(lambda: self._delete(resource, kind))

    def _create(self, resource: ManagedResource, spec: StackSpec, ctx: Context, kind: str) -> None:
        console.print(Panel.fit(f"Creating {kind} {resource.name}", style="bold blue"))
        handle = self.client.submit_create(
            resource.name, spec.template_body, spec.parameters, spec.tags, spec.capabilities,
        )
        resource.handle = handle
        self.recorder.sync()

        last = self._drive(resource, CFN_STATUS_CREATE_COMPLETE, ctx.with_timeout(self.timings.deadline), "create")
        resource.outputs = map_outputs(handle, last.outputs, spec.known_outputs)
        resource.created = True
        console.print(f"[green]\u2705 Created {kind} {resource.name} ({handle})[/green]")

    def _delete(self, resource: ManagedResource, kind: str) -> None:
        console.print(Panel.fit(f"Deleting {kind} {resource.name}", style="bold blue"))
        self.client.submit_delete(resource.handle)
        # do not exit on stop; an interrupted delete orphans resources
        ctx = Context.background().detached(self.timings.deadline)
        self._drive(resource, CFN_STATUS_DELETE_COMPLETE, ctx, "delete")
        console.print(f"[green]\u2705 Deleted {kind} {resource.name} ({resource.handle})[/green]")
        resource.created = False
        resource.handle = ""
        resource.outputs = {}

    def _drive(self, resource: ManagedResource, desired: str, ctx: Context, phase: str) -> PollResult:
        """Consume the poll stream, syncing the record after every status read.

        Raises:
            The terminal result's error, verbatim.
        """
        last: PollResult | None = None
        for last in poll(
            self.client.describe,
            resource.handle,
            desired,
            ctx=ctx,
            poll_interval=self.timings.poll_interval,
            initial_delay=self.timings.initial_delay,
            query_timeout=self.timings.query_timeout,
        ):
            if last.status:
                resource.status = last.status
            if last.error is not None:
                logger.warning("polling error: %s", last.error)
                self.recorder.record(f"failed to {phase} {resource.name} ({last.error})")
            self.recorder.sync()
        if last is None:
            raise RuntimeError(f"no poll result for {resource.handle!r}")
        if last.error is not None:
            raise last.error
        return last
