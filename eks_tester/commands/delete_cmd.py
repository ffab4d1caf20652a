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

"""Delete subcommands (cluster-role, wordpress)."""

from __future__ import annotations

import typer

from eks_tester.commands.options import KUBECONFIG, NAME, REGION, STATUS_FILE, configs, interruptible_context
from eks_tester.orchestrator import run_delete_cluster_role, run_delete_wordpress

app = typer.Typer(help="Delete test resources.")


@app.command("cluster-role")
def cluster_role(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
) -> None:
    """Delete the cluster IAM role stack if this tool created it."""
    tester_cfg, role_cfg, _ = configs(name, region, status_file)
    interruptible_context()  # SIGINT/SIGTERM no longer abort the process
    run_delete_cluster_role(tester_cfg, role_cfg)


@app.command("wordpress")
def wordpress(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
    kubeconfig: str | None = KUBECONFIG,
) -> None:
    """Uninstall WordPress and delete its namespace."""
    tester_cfg, _, wp_cfg = configs(name, region, status_file, kubeconfig)
    interruptible_context()  # SIGINT/SIGTERM no longer abort the process
    run_delete_wordpress(tester_cfg, wp_cfg)
