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

"""Orchestration functions that compose the testers into workflows."""

from __future__ import annotations

from collections.abc import Callable

from rich.panel import Panel

from eks_tester import console, logger
from eks_tester.aws.cfn import StackClient
from eks_tester.cancel import Context
from eks_tester.cluster_role import ClusterRoleTester
from eks_tester.config import (
    ClusterRoleConfig,
    InstallTimings,
    ReadinessTimings,
    StackTimings,
    TesterConfig,
    WordpressConfig,
    validate_config,
)
from eks_tester.constants import RESOURCE_WORDPRESS
from eks_tester.errors import DeleteAggregateError
from eks_tester.helm import HelmInstaller
from eks_tester.k8s import KubeClient
from eks_tester.readiness import ReadinessProber
from eks_tester.stack import StackLifecycle
from eks_tester.state import EnvironmentStatus, StatusRecorder, YamlStatusStore
from eks_tester.utils import require_command
from eks_tester.wordpress import WordpressTester

# ============================================================================
# Internal helpers
# ============================================================================


def _recorder(tester_cfg: TesterConfig) -> StatusRecorder:
    return StatusRecorder(YamlStatusStore(tester_cfg.status_file))


def _check_prerequisites(wordpress: bool) -> None:
    """Check CLI tools needed by the requested testers."""
    if not wordpress:
        return
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    for cmd in ("helm", "kubectl"):
        require_command(cmd)
    console.print("[green]\u2705 All required tools are available[/green]")


def _cluster_role_tester(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    recorder: StatusRecorder,
    timings: StackTimings | None,
) -> ClusterRoleTester:
    stacks = StackLifecycle(StackClient(region=tester_cfg.region), recorder, timings)
    return ClusterRoleTester(tester_cfg, role_cfg, recorder, stacks)


def _wordpress_tester(
    tester_cfg: TesterConfig,
    wp_cfg: WordpressConfig,
    recorder: StatusRecorder,
    install_timings: InstallTimings | None,
    readiness_timings: ReadinessTimings | None,
) -> WordpressTester:
    kube = KubeClient(tester_cfg.kubeconfig_path, tester_cfg.kubectl_path)
    return WordpressTester(
        tester_cfg,
        wp_cfg,
        recorder,
        kube,
        HelmInstaller(tester_cfg.kubeconfig_path),
        ReadinessProber(kube, readiness_timings),
        install_timings,
    )


def _wordpress_installed(recorder: StatusRecorder) -> bool:
    """Whether the record still tracks a WordPress release."""
    res = recorder.status.resources.get(RESOURCE_WORDPRESS)
    return res is not None and res.create_enabled and (res.created or bool(res.handle))


def _run_all(steps: dict[str, Callable[[], object]]) -> None:
    """Run every step even if earlier ones fail.

    Raises:
        DeleteAggregateError: Naming each failed step.
    """
    errors: list[str] = []
    for name, step in steps.items():
        try:
            step()
        except Exception as err:
            logger.error("%s failed: %s", name, err)
            errors.append(f"{name}: {err}")
    if errors:
        raise DeleteAggregateError(errors)


# ============================================================================
# Public API
# ============================================================================


def load_status(tester_cfg: TesterConfig) -> EnvironmentStatus:
    """Read the persisted status record without modifying it."""
    return YamlStatusStore(tester_cfg.status_file).load()


def run_create_cluster_role(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    ctx: Context,
    *,
    stack_timings: StackTimings | None = None,
) -> bool:
    """Create the cluster role stack unless it already exists."""
    recorder = _recorder(tester_cfg)
    return _cluster_role_tester(tester_cfg, role_cfg, recorder, stack_timings).create(ctx)


def run_delete_cluster_role(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    *,
    stack_timings: StackTimings | None = None,
) -> bool:
    """Delete the cluster role stack if this tool created it."""
    recorder = _recorder(tester_cfg)
    return _cluster_role_tester(tester_cfg, role_cfg, recorder, stack_timings).delete()


def run_create_wordpress(
    tester_cfg: TesterConfig,
    wp_cfg: WordpressConfig,
    ctx: Context,
    *,
    install_timings: InstallTimings | None = None,
    readiness_timings: ReadinessTimings | None = None,
) -> bool:
    """Install WordPress and wait until it answers."""
    _check_prerequisites(wp_cfg.enable)
    recorder = _recorder(tester_cfg)
    return _wordpress_tester(tester_cfg, wp_cfg, recorder, install_timings, readiness_timings).create(ctx)


def run_delete_wordpress(
    tester_cfg: TesterConfig,
    wp_cfg: WordpressConfig,
    *,
    install_timings: InstallTimings | None = None,
) -> bool:
    """Uninstall WordPress and delete its namespace."""
    _check_prerequisites(True)
    recorder = _recorder(tester_cfg)
    wp_cfg = wp_cfg.model_copy(update={"enable": wp_cfg.enable or _wordpress_installed(recorder)})
    return _wordpress_tester(tester_cfg, wp_cfg, recorder, install_timings, None).delete()


def run_up(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    wp_cfg: WordpressConfig,
    ctx: Context,
    *,
    stack_timings: StackTimings | None = None,
    install_timings: InstallTimings | None = None,
    readiness_timings: ReadinessTimings | None = None,
) -> EnvironmentStatus:
    """Create the cluster role, then WordPress when enabled.

    Each step is skipped if the record shows it already done, so a failed
    run can simply be repeated.

    Raises:
        ConfigError: If a required identifier is missing.
        TesterError: If any step fails.
    """
    validate_config(tester_cfg, role_cfg, wp_cfg)
    _check_prerequisites(wp_cfg.enable)
    recorder = _recorder(tester_cfg)

    _cluster_role_tester(tester_cfg, role_cfg, recorder, stack_timings).create(ctx)
    if wp_cfg.enable:
        _wordpress_tester(tester_cfg, wp_cfg, recorder, install_timings, readiness_timings).create(ctx)

    console.print(Panel.fit(f"Environment {tester_cfg.name} is up", style="bold green"))
    return recorder.status


def run_down(
    tester_cfg: TesterConfig,
    role_cfg: ClusterRoleConfig,
    wp_cfg: WordpressConfig,
    *,
    stack_timings: StackTimings | None = None,
    install_timings: InstallTimings | None = None,
) -> EnvironmentStatus:
    """Delete everything in reverse creation order.

    Every tester is attempted even if an earlier delete fails.

    Raises:
        DeleteAggregateError: If any delete failed.
    """
    recorder = _recorder(tester_cfg)
    steps: dict[str, Callable[[], object]] = {}
    if wp_cfg.enable or _wordpress_installed(recorder):
        _check_prerequisites(True)
        wp_cfg = wp_cfg.model_copy(update={"enable": True})
        wordpress = _wordpress_tester(tester_cfg, wp_cfg, recorder, install_timings, None)
        steps["WordPress"] = wordpress.delete
    role = _cluster_role_tester(tester_cfg, role_cfg, recorder, stack_timings)
    steps["cluster role"] = role.delete

    _run_all(steps)
    console.print(Panel.fit(f"Environment {tester_cfg.name} is down", style="bold green"))
    return recorder.status
