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

"""
cli.py - CLI for provisioning and tearing down EKS test resources.

Subcommands:
    up      Create the cluster role, then WordPress when enabled
    down    Delete everything in reverse order
    create  Create a single resource (cluster-role, wordpress)
    delete  Delete a single resource (cluster-role, wordpress)
    status  Inspect the persisted status record (show, history)

Examples:
    # Create the cluster role and install WordPress
    EKS_ADDON_WORDPRESS_PASSWORD=secret eks-tester up --wordpress

    # Use an existing cluster role
    eks-tester create cluster-role --role-arn arn:aws:iam::123456789012:role/eks

    # Tear everything down
    eks-tester down

Every operation is idempotent against the status file, so a failed run can
be repeated.
"""

from __future__ import annotations

import logging
import sys

import typer

from eks_tester import console
from eks_tester.commands import create_cmd, delete_cmd, status_cmd
from eks_tester.commands.options import KUBECONFIG, NAME, REGION, STATUS_FILE, configs, interruptible_context
from eks_tester.config import display_config, validate_config
from eks_tester.orchestrator import run_down, run_up

app = typer.Typer(
    help="Provision and tear down EKS test resources.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command("up")
def up(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
    kubeconfig: str | None = KUBECONFIG,
    role_arn: str | None = typer.Option(None, "--role-arn", help="Use an existing cluster role"),
    wordpress: bool | None = typer.Option(None, "--wordpress/--no-wordpress", help="Install the WordPress add-on"),
) -> None:
    """Create the cluster role, then WordPress when enabled."""
    tester_cfg, role_cfg, wp_cfg = configs(
        name, region, status_file, kubeconfig, cluster_role_arn=role_arn, wordpress=wordpress,
    )
    validate_config(tester_cfg, role_cfg, wp_cfg)
    display_config(tester_cfg, role_cfg, wp_cfg)
    run_up(tester_cfg, role_cfg, wp_cfg, interruptible_context())


@app.command("down")
def down(
    name: str | None = NAME,
    region: str | None = REGION,
    status_file: str | None = STATUS_FILE,
    kubeconfig: str | None = KUBECONFIG,
) -> None:
    """Delete everything this tool created; interrupts are ignored until done."""
    tester_cfg, role_cfg, wp_cfg = configs(name, region, status_file, kubeconfig)
    interruptible_context()  # SIGINT/SIGTERM no longer abort the process
    run_down(tester_cfg, role_cfg, wp_cfg)


app.add_typer(create_cmd.app, name="create")
app.add_typer(delete_cmd.app, name="delete")
app.add_typer(status_cmd.app, name="status")


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
