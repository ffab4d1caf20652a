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

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from eks_tester.aws.cfn import StackClient, caller_account_id, new_tags
from eks_tester.errors import SubmissionError

TEMPLATE = json.dumps(
    {
        "Parameters": {"ClusterRoleName": {"Type": "String"}},
        "Resources": {"Handle": {"Type": "AWS::CloudFormation::WaitConditionHandle"}},
        "Outputs": {"ClusterRoleARN": {"Value": {"Ref": "ClusterRoleName"}}},
    }
)


def test_new_tags() -> None:
    assert new_tags({"Kind": "eks-tester"}) == [{"Key": "Kind", "Value": "eks-tester"}]


@mock_aws
def test_create_describe_delete(aws_credentials) -> None:
    stacks = StackClient(region="us-west-2")

    handle = stacks.submit_create("role", TEMPLATE, {"ClusterRoleName": "my-role"}, {"Kind": "eks-tester"})
    snapshot = stacks.describe(handle)

    assert handle.startswith("arn:aws:cloudformation:us-west-2:")
    assert snapshot.status == "CREATE_COMPLETE"
    assert snapshot.outputs == {"ClusterRoleARN": "my-role"}
    assert not snapshot.failed

    stacks.submit_delete(handle)
    assert stacks.describe(handle).status == "DELETE_COMPLETE"


@mock_aws
def test_describe_missing_stack_is_deleted(aws_credentials) -> None:
    snapshot = StackClient(region="us-west-2").describe("does-not-exist")

    assert snapshot.status == "DELETE_COMPLETE"
    assert snapshot.failed


@mock_aws
def test_caller_account_id(aws_credentials) -> None:
    assert caller_account_id("us-west-2") == "123456789012"


def test_submit_create_rejected() -> None:
    cfn = MagicMock()
    cfn.create_stack.side_effect = ClientError(
        {"Error": {"Code": "AlreadyExistsException", "Message": "Stack [role] already exists"}},
        "CreateStack",
    )

    with pytest.raises(SubmissionError, match="already exists"):
        StackClient(client=cfn).submit_create("role", TEMPLATE, {}, {})

    kwargs = cfn.create_stack.call_args.kwargs
    assert kwargs["OnFailure"] == "DELETE"
    assert kwargs["Capabilities"] == ["CAPABILITY_NAMED_IAM"]


def test_describe_other_errors_propagate() -> None:
    cfn = MagicMock()
    cfn.describe_stacks.side_effect = ClientError(
        {"Error": {"Code": "Throttling", "Message": "Rate exceeded"}}, "DescribeStacks",
    )

    with pytest.raises(ClientError):
        StackClient(client=cfn).describe("role")


def test_describe_flags_terminal_failures() -> None:
    cfn = MagicMock()
    cfn.describe_stacks.return_value = {"Stacks": [{"StackStatus": "ROLLBACK_COMPLETE"}]}

    snapshot = StackClient(client=cfn).describe("role")

    assert snapshot.failed
    assert snapshot.outputs == {}
