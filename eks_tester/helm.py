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

"""Helm release install/uninstall via the helm CLI."""

from __future__ import annotations

from typing import Any

import sh

from eks_tester import console, logger
from eks_tester.constants import HELM_INSTALL_TIMEOUT_SECONDS
from eks_tester.errors import SubmissionError
from eks_tester.utils import format_duration, values_file


def _stderr(err: sh.ErrorReturnCode) -> str:
    return err.stderr.decode(errors="replace").strip() if err.stderr else str(err)


class HelmInstaller:
    """Drives the helm CLI against one kubeconfig.

    Args:
        kubeconfig_path: kubeconfig passed to every helm call, or None for helm's default.
    """

    def __init__(self, kubeconfig_path: str | None = None) -> None:
        self.kubeconfig_path = kubeconfig_path

    def _global_args(self) -> list[str]:
        return [f"--kubeconfig={self.kubeconfig_path}"] if self.kubeconfig_path else []

    def repo_add(self, name: str, url: str) -> None:
        """Register (or refresh) a chart repository.

        Raises:
            SubmissionError: If helm exits non-zero.
        """
        try:
            sh.helm("repo", "add", name, url, "--force-update")
        except sh.ErrorReturnCode as err:
            raise SubmissionError(f"failed to add helm repo {name!r} ({_stderr(err)})") from err
        logger.info("added helm repo %s (%s)", name, url)

    def install(
        self,
        release: str,
        chart: str,
        namespace: str,
        values: dict[str, Any],
        *,
        repo_url: str = "",
        version: str = "",
        timeout: float = HELM_INSTALL_TIMEOUT_SECONDS,
    ) -> None:
        """Install *chart* as *release* and wait for its resources.

        Raises:
            SubmissionError: If helm exits non-zero.
        """
        console.print(f"[yellow]\u2139\ufe0f  Installing helm release {release} ({chart}) in {namespace}...[/yellow]")
        with values_file(values) as path:
            args = [
                "install", release, chart,
                "--namespace", namespace,
                "--values", str(path),
                "--timeout", format_duration(timeout),
                "--wait",
                *self._global_args(),
            ]
            if repo_url:
                args += ["--repo", repo_url]
            if version:
                args += ["--version", version]
            try:
                sh.helm(*args, _timeout=timeout + 60)
            except sh.ErrorReturnCode as err:
                raise SubmissionError(f"failed to install helm release {release!r} ({_stderr(err)})") from err
            except sh.TimeoutException as err:
                raise SubmissionError(f"helm install {release!r} did not finish within {timeout}s") from err
        console.print(f"[green]\u2705 Helm release {release} installed[/green]")

    def uninstall(self, release: str, namespace: str) -> None:
        """Uninstall *release*.

        Raises:
            SubmissionError: If helm exits non-zero.
        """
        try:
            sh.helm("uninstall", release, "--namespace", namespace, *self._global_args())
        except sh.ErrorReturnCode as err:
            raise SubmissionError(f"failed to uninstall helm release {release!r} ({_stderr(err)})") from err
        console.print(f"[green]\u2705 Helm release {release} uninstalled[/green]")
