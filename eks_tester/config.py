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

"""Configuration classes, timing defaults, and config resolution/display."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from eks_tester import console
from eks_tester.constants import (
    DEFAULT_REGION,
    DEFAULT_STATUS_FILE,
    DEFAULT_STORAGE_CLASS,
    DEFAULT_TESTER_NAME,
    DEFAULT_WORDPRESS_NAMESPACE,
    DEFAULT_WORDPRESS_SERVICE,
    DEFAULT_WORDPRESS_USERNAME,
    HELM_INSTALL_TIMEOUT_SECONDS,
    NAMESPACE_DELETE_INTERVAL_SECONDS,
    NAMESPACE_DELETE_TIMEOUT_SECONDS,
    READINESS_REQUEST_TIMEOUT_SECONDS,
    READINESS_SETTLE_SECONDS,
    READINESS_TICK_SECONDS,
    READINESS_WINDOW_SECONDS,
    STACK_DEADLINE_SECONDS,
    STACK_INITIAL_DELAY_SECONDS,
    STACK_POLL_INTERVAL_SECONDS,
    STACK_QUERY_TIMEOUT_SECONDS,
    dep_value,
)
from eks_tester.errors import ConfigError


# ============================================================================
# Configuration classes
# ============================================================================

class TesterConfig(BaseSettings):
    """Environment-wide settings, auto-loaded from EKS_* env vars.

    Attributes:
        name: Name of the test environment; used in tags and default names.
        region: AWS region.
        account_id: AWS account ID, or empty to resolve it through STS.
        kubeconfig_path: kubeconfig of the target cluster, or None for the default.
        kubectl_path: kubectl binary used for diagnostics.
        status_file: Path of the persisted status record.
        managed_node_groups: Whether add-ons are placed on managed node groups.
        nlb_hello_world: Whether the NLB hello-world add-on is enabled.
    """

    model_config = SettingsConfigDict(env_prefix="EKS_", extra="ignore")

    name: str = DEFAULT_TESTER_NAME
    region: str = DEFAULT_REGION
    account_id: str = Field(default="", pattern=r"^(\d{12})?$")
    kubeconfig_path: str | None = None
    kubectl_path: str = "kubectl"
    status_file: str = DEFAULT_STATUS_FILE
    managed_node_groups: bool = False
    nlb_hello_world: bool = False


class ClusterRoleConfig(BaseSettings):
    """Cluster IAM role settings, auto-loaded from EKS_CLUSTER_ROLE_* env vars.

    Attributes:
        create: Whether this tool creates the role.
        name: Role (and stack) name; defaults to ``<tester name>-role-cluster``.
        arn: Externally supplied role ARN; bypasses creation.
        service_principals: Override for the role's trusted service principals.
        managed_policy_arns: Override for the role's managed policies.
    """

    model_config = SettingsConfigDict(env_prefix="EKS_CLUSTER_ROLE_", extra="ignore")

    create: bool = True
    name: str = ""
    arn: str = ""
    service_principals: list[str] = Field(default_factory=list)
    managed_policy_arns: list[str] = Field(default_factory=list)


class WordpressConfig(BaseSettings):
    """WordPress add-on settings, auto-loaded from EKS_ADDON_WORDPRESS_* env vars.

    Attributes:
        enable: Whether the add-on is installed.
        namespace: Namespace the release is installed into.
        release_name: Helm release name.
        service_name: Service exposing the release through a load balancer.
        username: WordPress admin user name.
        password: WordPress admin and database password.
        storage_class: Storage class for persistent volumes.
        chart_version: Chart version pin, or empty for latest.
        verify_content: Whether readiness also requires the welcome page marker.
    """

    model_config = SettingsConfigDict(env_prefix="EKS_ADDON_WORDPRESS_", extra="ignore")

    enable: bool = False
    namespace: str = DEFAULT_WORDPRESS_NAMESPACE
    release_name: str = Field(default=dep_value("wordpress", "chart", default="wordpress"))
    service_name: str = DEFAULT_WORDPRESS_SERVICE
    username: str = DEFAULT_WORDPRESS_USERNAME
    password: str = ""
    storage_class: str = DEFAULT_STORAGE_CLASS
    chart_version: str = Field(default=dep_value("wordpress", "version", default=""))
    verify_content: bool = False


# ============================================================================
# Timings
# ============================================================================

@dataclass(frozen=True)
class StackTimings:
    """Deadline and polling cadence for stack create/delete (seconds)."""

    deadline: float = STACK_DEADLINE_SECONDS
    poll_interval: float = STACK_POLL_INTERVAL_SECONDS
    initial_delay: float = STACK_INITIAL_DELAY_SECONDS
    query_timeout: float = STACK_QUERY_TIMEOUT_SECONDS


@dataclass(frozen=True)
class InstallTimings:
    """Helm install timeout and namespace deletion cadence (seconds)."""

    install_timeout: float = HELM_INSTALL_TIMEOUT_SECONDS
    namespace_delete_interval: float = NAMESPACE_DELETE_INTERVAL_SECONDS
    namespace_delete_timeout: float = NAMESPACE_DELETE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ReadinessTimings:
    """Readiness wait window, tick, settle delay and per-request timeout (seconds)."""

    window: float = READINESS_WINDOW_SECONDS
    tick: float = READINESS_TICK_SECONDS
    settle: float = READINESS_SETTLE_SECONDS
    request_timeout: float = READINESS_REQUEST_TIMEOUT_SECONDS


# ============================================================================
# Config resolution
# ============================================================================

def resolve_config(
    name: str | None = None,
    region: str | None = None,
    status_file: str | None = None,
    kubeconfig: str | None = None,
    cluster_role_name: str | None = None,
    cluster_role_arn: str | None = None,
    wordpress: bool | None = None,
) -> tuple[TesterConfig, ClusterRoleConfig, WordpressConfig]:
    """Merge CLI overrides, environment variables, and defaults into config objects.

    Resolution priority: CLI arguments > EKS_* environment variables > defaults.

    Returns:
        Tuple of (TesterConfig, ClusterRoleConfig, WordpressConfig).
    """
    tester_cfg = TesterConfig()
    role_cfg = ClusterRoleConfig()
    wp_cfg = WordpressConfig()

    overrides: dict = {}
    if name is not None:
        overrides["name"] = name
    if region is not None:
        overrides["region"] = region
    if status_file is not None:
        overrides["status_file"] = status_file
    if kubeconfig is not None:
        overrides["kubeconfig_path"] = kubeconfig
    if overrides:
        tester_cfg = tester_cfg.model_copy(update=overrides)

    if cluster_role_name is not None:
        role_cfg = role_cfg.model_copy(update={"name": cluster_role_name})
    if cluster_role_arn is not None:
        role_cfg = role_cfg.model_copy(update={"arn": cluster_role_arn})
    if not role_cfg.name:
        role_cfg = role_cfg.model_copy(update={"name": f"{tester_cfg.name}-role-cluster"})

    if wordpress is not None:
        wp_cfg = wp_cfg.model_copy(update={"enable": wordpress})

    return tester_cfg, role_cfg, wp_cfg


def validate_config(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    wp_cfg: WordpressConfig,
) -> None:
    """Reject configurations missing a required identifier.

    Raises:
        ConfigError: If a required identifier is empty.
    """
    if not tester_cfg.name:
        raise ConfigError("empty tester name")
    if not tester_cfg.region:
        raise ConfigError("empty region")
    if role_cfg.create and not role_cfg.arn and not role_cfg.name:
        raise ConfigError("empty cluster role name")
    if wp_cfg.enable:
        if not wp_cfg.namespace:
            raise ConfigError("empty WordPress namespace")
        if not wp_cfg.password:
            raise ConfigError("empty WordPress password")


# ============================================================================
# Display
# ============================================================================

def display_config(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    wp_cfg: WordpressConfig,
) -> None:
    """Print only config relevant to enabled testers.

    Args:
        tester_cfg: Environment-wide settings.
        role_cfg: Cluster role settings.
        wp_cfg: WordPress add-on settings.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))

    console.print("[yellow]Environment:[/yellow]")
    console.print(f"  name            : {tester_cfg.name}")
    console.print(f"  region          : {tester_cfg.region}")
    console.print(f"  status_file     : {tester_cfg.status_file}")
    console.print(f"  kubeconfig      : {tester_cfg.kubeconfig_path or '(default)'}")

    console.print("[yellow]Cluster role:[/yellow]")
    if role_cfg.arn:
        console.print(f"  arn             : {role_cfg.arn} (external)")
    elif role_cfg.create:
        console.print(f"  name            : {role_cfg.name}")
        console.print(f"  nlb policy      : {tester_cfg.nlb_hello_world}")
    else:
        console.print("  create          : False")

    if wp_cfg.enable:
        console.print("[yellow]WordPress:[/yellow]")
        console.print(f"  namespace       : {wp_cfg.namespace}")
        console.print(f"  release         : {wp_cfg.release_name}")
        console.print(f"  username        : {wp_cfg.username}")
        console.print(f"  password        : {len(wp_cfg.password)} characters")
        console.print(f"  verify_content  : {wp_cfg.verify_content}")
