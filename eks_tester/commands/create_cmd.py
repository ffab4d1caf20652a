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

"""Create subcommands (cluster-role, wordpress)."""

from __future__ import annotations

import typer

from eks_tester.commands.options import KUBECONFIG, NAME, REGION, STATUS_FILE, configs, interruptible_context
from eks_tester.config import display_config, validate_config
from eks_tester.orchestrator import run_create_cluster_role, run_create_wordpress

app = typer.Typer(help="Create test resources.")


@app.command("cluster-role")
def cluster_role(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
    role_name: str | None = typer.Option(None, "--role-name", help="Cluster role (and stack) name"),
    role_arn: str | None = typer.Option(None, "--role-arn", help="Use an existing role instead of creating one"),
) -> None:
    """Create the EKS cluster IAM role stack."""
    tester_cfg, role_cfg, wp_cfg = configs(
        name, region, status_file, cluster_role_name=role_name, cluster_role_arn=role_arn,
    )
    validate_config(tester_cfg, role_cfg, wp_cfg)
    display_config(tester_cfg, role_cfg, wp_cfg)
    run_create_cluster_role(tester_cfg, role_cfg, interruptible_context())


@app.command("wordpress")
def wordpress(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
    kubeconfig: str | None = KUBECONFIG,
    verify_content: bool | None = typer.Option(
        None, "--verify-content/--no-verify-content", help="Require the welcome page content to be served",
    ),
) -> None:
    """Install WordPress and wait for its load balancer endpoint."""
    tester_cfg, role_cfg, wp_cfg = configs(name, region, status_file, kubeconfig, wordpress=True)
    if verify_content is not None:
        wp_cfg = wp_cfg.model_copy(update={"verify_content": verify_content})
    validate_config(tester_cfg, role_cfg, wp_cfg)
    display_config(tester_cfg, role_cfg, wp_cfg)
    run_create_wordpress(tester_cfg, wp_cfg, interruptible_context())
