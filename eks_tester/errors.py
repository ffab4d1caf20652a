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

"""Error taxonomy shared by every lifecycle operation."""

from __future__ import annotations


class TesterError(Exception):
    """Base class for every failure surfaced by eks_tester."""


class ConfigError(TesterError):
    """A required identifier is missing or invalid. Never retried."""


class SubmissionError(TesterError):
    """The external system rejected a create or delete call."""


class PollTimeoutError(TesterError):
    """The deadline elapsed before the resource reached a terminal state."""


class CancellationError(TesterError):
    """The caller aborted the operation (stop request or OS signal)."""


class ResourceFailedError(TesterError):
    """The external system reported a terminal failure status."""


class OutputContractError(TesterError):
    """A completed resource returned outputs outside the known schema."""


class ReadinessError(TesterError):
    """The endpoint never appeared or never answered a health probe."""


class EndpointFormatError(ReadinessError):
    """A load balancer hostname does not follow the ELB naming format."""


class DeleteAggregateError(TesterError):
    """One or more independent delete steps failed.

    Attributes:
        errors: Message of every failed step, in execution order.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))
