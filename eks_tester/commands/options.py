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

"""Options shared by every subcommand."""

from __future__ import annotations

import typer

from eks_tester.cancel import CancelToken, Context, install_signal_handlers
from eks_tester.config import ClusterRoleConfig, TesterConfig, WordpressConfig, resolve_config

NAME = typer.Option(None, "--name", help="Test environment name")
REGION = typer.Option(None, "--region", help="AWS region")
STATUS_FILE = typer.Option(None, "--status-file", help="Path of the persisted status record")
KUBECONFIG = typer.Option(None, "--kubeconfig", help="kubeconfig of the target cluster")


def configs(
    name: str | None = None,
    region: str | None = None,
    status_file: str | None = None,
    kubeconfig: str | None = None,
    **overrides,
) -> tuple[TesterConfig, ClusterRoleConfig, WordpressConfig]:
    return resolve_config(name=name, region=region, status_file=status_file, kubeconfig=kubeconfig, **overrides)


def interruptible_context() -> Context:
    """Context cancelled by SIGINT/SIGTERM."""
    token = CancelToken()
    install_signal_handlers(token)
    return Context(token)
