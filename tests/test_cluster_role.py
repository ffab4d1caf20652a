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

import pytest

from eks_tester.cancel import Context
from eks_tester.cluster_role import ClusterRoleTester, build_stack_spec, select_template
from eks_tester.config import ClusterRoleConfig, TesterConfig
from eks_tester.errors import ConfigError
from eks_tester.stack import StackLifecycle
from tests.conftest import FAST_STACK, ROLE_ARN, FakeStackClient

TESTER_CFG = TesterConfig(name="e2e")


def _tester(recorder, role_cfg: ClusterRoleConfig, client: FakeStackClient | None = None):
    client = client or FakeStackClient()
    return ClusterRoleTester(TESTER_CFG, role_cfg, recorder, StackLifecycle(client, recorder, FAST_STACK)), client


def test_select_template() -> None:
    assert select_template(TESTER_CFG) == "cluster-role-basic.yaml"
    assert select_template(TesterConfig(nlb_hello_world=True)) == "cluster-role-nlb.yaml"


def test_build_stack_spec_optional_parameters() -> None:
    spec = build_stack_spec(TESTER_CFG, ClusterRoleConfig(name="role"))
    assert spec.parameters == {"ClusterRoleName": "role"}
    assert spec.tags == {"Kind": "eks-tester", "Name": "e2e"}
    assert spec.known_outputs == {"ClusterRoleARN"}
    assert "AWS::IAM::Role" in spec.template_body

    spec = build_stack_spec(
        TESTER_CFG,
        ClusterRoleConfig(name="role", service_principals=["eks.amazonaws.com", "eks-beta-pdx.aws.internal"]),
    )
    assert spec.parameters["ClusterRoleServicePrincipals"] == "eks.amazonaws.com,eks-beta-pdx.aws.internal"


def test_create_exposes_role_arn(recorder) -> None:
    tester, client = _tester(recorder, ClusterRoleConfig(name="e2e-role-cluster"))

    assert tester.create(Context.background()) is True

    assert tester.role_arn == ROLE_ARN
    assert client.create_calls[0]["name"] == "e2e-role-cluster"


def test_external_arn_skips_creation(recorder) -> None:
    arn = "arn:aws:iam::123456789012:role/existing"
    tester, client = _tester(recorder, ClusterRoleConfig(name="e2e-role-cluster", arn=arn))

    assert tester.create(Context.background()) is False
    assert tester.role_arn == arn
    assert client.create_calls == []
    assert tester.delete() is False


def test_create_disabled_skips(recorder) -> None:
    tester, client = _tester(recorder, ClusterRoleConfig(name="r", create=False))

    assert tester.create(Context.background()) is False
    assert client.create_calls == []
    assert not tester.resource.created


def test_create_requires_name(recorder) -> None:
    tester, _ = _tester(recorder, ClusterRoleConfig(name=""))

    with pytest.raises(ConfigError):
        tester.create(Context.background())


def test_delete_after_create(recorder) -> None:
    tester, client = _tester(recorder, ClusterRoleConfig(name="r"))
    tester.create(Context.background())

    assert tester.delete() is True
    assert len(client.delete_calls) == 1
    assert tester.role_arn == ""
