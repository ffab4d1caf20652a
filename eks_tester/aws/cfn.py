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

"""CloudFormation stack client (submit, describe, delete)."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from eks_tester import logger
from eks_tester.constants import (
    CFN_CAPABILITY_NAMED_IAM,
    CFN_ON_FAILURE_DELETE,
    CFN_STATUS_DELETE_COMPLETE,
    CFN_TERMINAL_FAILURES,
)
from eks_tester.errors import SubmissionError
from eks_tester.poller import ResourceSnapshot


def new_tags(tags: dict[str, str]) -> list[dict[str, str]]:
    """Convert a mapping into the CloudFormation tag list shape."""
    return [{"Key": k, "Value": v} for k, v in tags.items()]


def _is_stack_gone(err: ClientError) -> bool:
    error = err.response.get("Error", {})
    return error.get("Code") == "ValidationError" and "does not exist" in error.get("Message", "")


def caller_account_id(region: str | None = None) -> str:
    """Resolve the AWS account ID of the current credentials via STS."""
    return boto3.client("sts", region_name=region).get_caller_identity()["Account"]


class StackClient:
    """Thin wrapper over the boto3 CloudFormation client.

    Args:
        region: AWS region; ignored when *client* is given.
        client: Pre-built boto3 CloudFormation client.
    """

    def __init__(self, region: str | None = None, client: Any = None) -> None:
        self._cfn = client if client is not None else boto3.client("cloudformation", region_name=region)

    def submit_create(
        self,
        name: str,
        template_body: str,
        parameters: dict[str, str],
        tags: dict[str, str],
        capabilities: tuple[str, ...] = (CFN_CAPABILITY_NAMED_IAM,),
    ) -> str:
        """Submit a create-stack request.

        Returns:
            The stack ID.

        Raises:
            SubmissionError: If CloudFormation rejects the request.
        """
        try:
            out = self._cfn.create_stack(
                StackName=name,
                TemplateBody=template_body,
                Parameters=[{"ParameterKey": k, "ParameterValue": v} for k, v in parameters.items()],
                Tags=new_tags(tags),
                Capabilities=list(capabilities),
                OnFailure=CFN_ON_FAILURE_DELETE,
            )
        except (ClientError, BotoCoreError) as err:
            raise SubmissionError(f"failed to create stack {name!r} ({err})") from err
        logger.info("submitted stack %s: %s", name, out["StackId"])
        return out["StackId"]

    def submit_delete(self, handle: str) -> None:
        """Submit a delete-stack request.

        Raises:
            SubmissionError: If CloudFormation rejects the request.
        """
        try:
            self._cfn.delete_stack(StackName=handle)
        except (ClientError, BotoCoreError) as err:
            raise SubmissionError(f"failed to delete stack {handle!r} ({err})") from err
        logger.info("submitted stack deletion %s", handle)

    def describe(self, handle: str) -> ResourceSnapshot:
        """Read the current status and outputs of a stack.

        A stack that no longer exists is reported as ``DELETE_COMPLETE``.
        ``DELETE_COMPLETE`` is flagged as failed so that it terminates a
        create poll (``OnFailure=DELETE`` removes failed stacks) while still
        completing a delete poll.
        """
        try:
            resp = self._cfn.describe_stacks(StackName=handle)
        except ClientError as err:
            if _is_stack_gone(err):
                return ResourceSnapshot(CFN_STATUS_DELETE_COMPLETE, reason="stack does not exist", failed=True)
            raise
        stack = resp["Stacks"][0]
        status = stack["StackStatus"]
        outputs = {o["OutputKey"]: o.get("OutputValue", "") for o in stack.get("Outputs", [])}
        return ResourceSnapshot(
            status=status,
            outputs=outputs,
            reason=stack.get("StackStatusReason", ""),
            failed=status in CFN_TERMINAL_FAILURES or status == CFN_STATUS_DELETE_COMPLETE,
        )
