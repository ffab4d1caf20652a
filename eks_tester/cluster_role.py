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

"""EKS cluster IAM role, provisioned as a CloudFormation stack."""

from __future__ import annotations

from eks_tester import console
from eks_tester.cancel import Context
from eks_tester.config import ClusterRoleConfig, TesterConfig
from eks_tester.constants import (
    OUTPUT_CLUSTER_ROLE_ARN,
    PARAM_CLUSTER_ROLE_MANAGED_POLICY_ARNS,
    PARAM_CLUSTER_ROLE_NAME,
    PARAM_CLUSTER_ROLE_SERVICE_PRINCIPALS,
    RESOURCE_CLUSTER_ROLE,
    TAG_KIND,
    TEMPLATE_CLUSTER_ROLE_BASIC,
    TEMPLATE_CLUSTER_ROLE_NLB,
    TEMPLATES_DIR,
)
from eks_tester.errors import ConfigError
from eks_tester.guard import create_skip_reason
from eks_tester.stack import StackLifecycle, StackSpec
from eks_tester.state import ManagedResource, StatusRecorder

KIND = "cluster role"


def select_template(tester_cfg: TesterConfig) -> str:
    """Template file for the cluster role.

    The NLB variant grants the ec2 permissions the service controller
    needs to provision network load balancers.
    """
    if tester_cfg.nlb_hello_world:
        return TEMPLATE_CLUSTER_ROLE_NLB
    return TEMPLATE_CLUSTER_ROLE_BASIC


def build_stack_spec(tester_cfg: TesterConfig, role_cfg: ClusterRoleConfig) -> StackSpec:
    """Template, parameters and tags for the cluster role stack."""
    parameters = {PARAM_CLUSTER_ROLE_NAME: role_cfg.name}
    if role_cfg.service_principals:
        parameters[PARAM_CLUSTER_ROLE_SERVICE_PRINCIPALS] = ",".join(role_cfg.service_principals)
    if role_cfg.managed_policy_arns:
        parameters[PARAM_CLUSTER_ROLE_MANAGED_POLICY_ARNS] = ",".join(role_cfg.managed_policy_arns)
    return StackSpec(
        template_body=(TEMPLATES_DIR / select_template(tester_cfg)).read_text(),
        parameters=parameters,
        tags={"Kind": TAG_KIND, "Name": tester_cfg.name},
        known_outputs=frozenset({OUTPUT_CLUSTER_ROLE_ARN}),
    )


class ClusterRoleTester:
    """Creates and deletes the cluster role stack.

    Args:
        tester_cfg: Environment-wide settings.
        role_cfg: Cluster role settings.
        recorder: Write-through sink for the status record.
        stacks: Stack lifecycle engine.
    """

    def __init__(
        self,
        tester_cfg: TesterConfig,
        role_cfg: ClusterRoleConfig,
        recorder: StatusRecorder,
        stacks: StackLifecycle,
    ) -> None:
        self.tester_cfg = tester_cfg
        self.role_cfg = role_cfg
        self.recorder = recorder
        self.stacks = stacks

    @property
    def resource(self) -> ManagedResource:
        res = self.recorder.resource(RESOURCE_CLUSTER_ROLE, self.role_cfg.name)
        res.create_enabled = self.role_cfg.create
        res.external_ref = self.role_cfg.arn
        return res

    @property
    def role_arn(self) -> str:
        """ARN of the role in use: external, or the stack output."""
        res = self.resource
        return res.external_ref or res.outputs.get(OUTPUT_CLUSTER_ROLE_ARN, "")

    def create(self, ctx: Context) -> bool:
        """Create the role stack, or skip if not owned or already present.

        Raises:
            ConfigError: If the role must be created but has no name.
        """
        res = self.resource
        if create_skip_reason(res) is None and not res.name:
            raise ConfigError("empty cluster role name")
        created = self.stacks.create(res, lambda: build_stack_spec(self.tester_cfg, self.role_cfg), ctx, KIND)
        if created:
            console.print(f"  role name : {res.name}")
            console.print(f"  stack id  : {res.handle}")
            console.print(f"  role arn  : {self.role_arn}")
        return created

    def delete(self) -> bool:
        return self.stacks.delete(self.resource, KIND)
