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

"""WordPress add-on installed through helm and exposed by a load balancer."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from rich.panel import Panel

from eks_tester import console, logger
from eks_tester.aws.cfn import caller_account_id
from eks_tester.cancel import Context
from eks_tester.config import InstallTimings, TesterConfig, WordpressConfig
from eks_tester.constants import (
    AMI_TYPE_AL2_X86_64,
    ANNOTATION_AWS_LB_TYPE,
    AWS_LB_TYPE_NLB,
    NG_TYPE_CUSTOM,
    NG_TYPE_MANAGED,
    RESOURCE_WORDPRESS,
    dep_value,
)
from eks_tester.errors import DeleteAggregateError
from eks_tester.guard import StatusGuard
from eks_tester.helm import HelmInstaller
from eks_tester.k8s import KubeClient
from eks_tester.readiness import ReadinessProber
from eks_tester.state import ManagedResource, StatusRecorder

KIND = "WordPress"


def build_values(tester_cfg: TesterConfig, wp_cfg: WordpressConfig) -> dict[str, Any]:
    """Helm values for the Bitnami WordPress chart and its MariaDB sub-chart."""
    node_selector = {
        "AMIType": AMI_TYPE_AL2_X86_64,
        "NGType": NG_TYPE_MANAGED if tester_cfg.managed_node_groups else NG_TYPE_CUSTOM,
    }
    persistence = {"enabled": True, "storageClassName": wp_cfg.storage_class}
    return {
        "nodeSelector": node_selector,
        "wordpressUsername": wp_cfg.username,
        "wordpressPassword": wp_cfg.password,
        "persistence": persistence,
        "service": {"type": "LoadBalancer", "annotations": {ANNOTATION_AWS_LB_TYPE: AWS_LB_TYPE_NLB}},
        "mariadb": {
            "enabled": True,
            "rootUser": {"password": wp_cfg.password, "forcePassword": False},
            "db": {"name": "wordpress", "user": wp_cfg.username, "password": wp_cfg.password},
            "master": {"nodeSelector": node_selector, "persistence": persistence},
            "slave": {"nodeSelector": node_selector},
        },
    }


class WordpressTester:
    """Installs WordPress, waits for its endpoint, and tears it down again.

    Args:
        tester_cfg: Environment-wide settings.
        wp_cfg: WordPress add-on settings.
        recorder: Write-through sink for the status record.
        kube: Namespace and service access.
        helm: Chart installer.
        prober: Readiness prober for the WordPress service.
        timings: Install timeout and namespace deletion cadence.
        account_id_resolver: Resolves the account ID when none is configured.
    """

    def __init__(
        self,
        tester_cfg: TesterConfig,
        wp_cfg: WordpressConfig,
        recorder: StatusRecorder,
        kube: KubeClient,
        helm: HelmInstaller,
        prober: ReadinessProber,
        timings: InstallTimings | None = None,
        account_id_resolver: Callable[[str], str] = caller_account_id,
    ) -> None:
        self.tester_cfg = tester_cfg
        self.wp_cfg = wp_cfg
        self.recorder = recorder
        self.kube = kube
        self.helm = helm
        self.prober = prober
        self.timings = timings or InstallTimings()
        self.account_id_resolver = account_id_resolver

    @property
    def resource(self) -> ManagedResource:
        res = self.recorder.resource(RESOURCE_WORDPRESS, self.wp_cfg.release_name)
        res.create_enabled = self.wp_cfg.enable
        return res

    def _account_id(self) -> str:
        return self.tester_cfg.account_id or self.account_id_resolver(self.tester_cfg.region)

    def create(self, ctx: Context) -> bool:
        """Install the chart and wait until the site answers.

        Returns:
            True if WordPress was installed, False if the create was skipped.
        """
        res = self.resource
        return StatusGuard(self.recorder, res, KIND).create(lambda: self._create(res, ctx))

    def _create(self, res: ManagedResource, ctx: Context) -> None:
        cfg = self.wp_cfg
        console.print(Panel.fit(f"Installing {KIND} in namespace {cfg.namespace}", style="bold blue"))
        res.handle = cfg.release_name
        self.recorder.sync()

        self.kube.create_namespace(cfg.namespace)
        ctx.check()
        repo_name = dep_value("wordpress", "repo_name", default="bitnami")
        repo_url = dep_value("wordpress", "repo_url", default="")
        self.helm.repo_add(repo_name, repo_url)
        ctx.check()
        self.helm.install(
            cfg.release_name,
            f"{repo_name}/{dep_value('wordpress', 'chart', default='wordpress')}",
            cfg.namespace,
            build_values(self.tester_cfg, cfg),
            version=cfg.chart_version,
            timeout=self.timings.install_timeout,
        )
        res.status = "installed"
        self.recorder.sync()

        endpoint = self.prober.wait_ready(
            cfg.namespace,
            cfg.service_name,
            ctx,
            region=self.tester_cfg.region,
            account_id=self._account_id(),
            marker=dep_value("wordpress", "welcome_marker", default=""),
            require_marker=cfg.verify_content,
        )
        res.endpoint = endpoint
        res.status = "ready"
        res.created = True
        console.print(f"  user name       : {cfg.username}")
        console.print(f"  password        : {len(cfg.password)} characters")

    def delete(self) -> bool:
        """Uninstall the release and delete its namespace.

        Both steps are attempted even if the first fails; the record is
        marked not-created afterwards so a later create starts clean.

        Raises:
            DeleteAggregateError: If either step failed.
        """
        res = self.resource
        return StatusGuard(self.recorder, res, KIND).delete(lambda: self._delete(res))

    def _delete(self, res: ManagedResource) -> None:
        cfg = self.wp_cfg
        console.print(Panel.fit(f"Deleting {KIND} in namespace {cfg.namespace}", style="bold blue"))
        errors: list[str] = []
        try:
            self.helm.uninstall(cfg.release_name, cfg.namespace)
        except Exception as err:
            logger.warning("helm uninstall failed: %s", err)
            errors.append(str(err))
        try:
            self.kube.delete_namespace_and_wait(
                cfg.namespace,
                interval=self.timings.namespace_delete_interval,
                timeout=self.timings.namespace_delete_timeout,
            )
        except Exception as err:
            logger.warning("namespace deletion failed: %s", err)
            errors.append(f"failed to delete WordPress namespace ({err})")

        res.created = False
        res.handle = ""
        res.status = "deleted"
        res.endpoint = None
        self.recorder.sync()
        if errors:
            raise DeleteAggregateError(errors)
