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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# -- Resolved paths --
PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"


def load_dependencies() -> dict:
    """Load chart sources and version pins from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = PACKAGE_DIR / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Stack lifecycle (seconds) --
STACK_DEADLINE_SECONDS = 10 * 60
STACK_POLL_INTERVAL_SECONDS = 25
STACK_INITIAL_DELAY_SECONDS = 10
STACK_QUERY_TIMEOUT_SECONDS = 30

# -- Add-on install (seconds) --
HELM_INSTALL_TIMEOUT_SECONDS = 15 * 60
NAMESPACE_DELETE_INTERVAL_SECONDS = 15
NAMESPACE_DELETE_TIMEOUT_SECONDS = 10 * 60

# -- Readiness (seconds) --
READINESS_WINDOW_SECONDS = 2 * 60
READINESS_TICK_SECONDS = 5
READINESS_SETTLE_SECONDS = 20
READINESS_REQUEST_TIMEOUT_SECONDS = 5
SERVICE_GET_TIMEOUT_SECONDS = 60
KUBECTL_DESCRIBE_TIMEOUT_SECONDS = 15

# -- CloudFormation --
CFN_STATUS_CREATE_COMPLETE = "CREATE_COMPLETE"
CFN_STATUS_DELETE_COMPLETE = "DELETE_COMPLETE"
CFN_CAPABILITY_NAMED_IAM = "CAPABILITY_NAMED_IAM"
CFN_ON_FAILURE_DELETE = "DELETE"
CFN_TERMINAL_FAILURES = (
    "CREATE_FAILED",
    "ROLLBACK_COMPLETE",
    "ROLLBACK_FAILED",
    "DELETE_FAILED",
    "UPDATE_ROLLBACK_COMPLETE",
    "UPDATE_ROLLBACK_FAILED",
)
TAG_KIND = "eks-tester"

# -- Cluster role --
TEMPLATE_CLUSTER_ROLE_BASIC = "cluster-role-basic.yaml"
TEMPLATE_CLUSTER_ROLE_NLB = "cluster-role-nlb.yaml"
PARAM_CLUSTER_ROLE_NAME = "ClusterRoleName"
PARAM_CLUSTER_ROLE_SERVICE_PRINCIPALS = "ClusterRoleServicePrincipals"
PARAM_CLUSTER_ROLE_MANAGED_POLICY_ARNS = "ClusterRoleManagedPolicyARNs"
OUTPUT_CLUSTER_ROLE_ARN = "ClusterRoleARN"
RESOURCE_CLUSTER_ROLE = "cluster_role"

# -- WordPress add-on --
RESOURCE_WORDPRESS = "wordpress"
DEFAULT_WORDPRESS_NAMESPACE = "wordpress"
DEFAULT_WORDPRESS_SERVICE = "wordpress"
DEFAULT_WORDPRESS_USERNAME = "user"
DEFAULT_STORAGE_CLASS = "gp2"
AMI_TYPE_AL2_X86_64 = "AL2_x86_64"
NG_TYPE_CUSTOM = "custom"
NG_TYPE_MANAGED = "managed"

# -- NLB identity --
NLB_ARN_FORMAT = "arn:aws:elasticloadbalancing:{region}:{account_id}:loadbalancer/net/{path}"
ANNOTATION_AWS_LB_TYPE = "service.beta.kubernetes.io/aws-load-balancer-type"
AWS_LB_TYPE_NLB = "nlb"

# -- Tester defaults --
DEFAULT_TESTER_NAME = "eks-tester"
DEFAULT_REGION = "us-west-2"
DEFAULT_STATUS_FILE = "eks-tester-status.yaml"
STATUS_HISTORY_LIMIT = 50
