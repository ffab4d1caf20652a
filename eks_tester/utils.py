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

"""Utility functions for kubectl, command checks, and helm value files."""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import sh
import yaml

from eks_tester.errors import ConfigError


def require_command(cmd: str) -> None:
    """Fail early when a CLI the testers shell out to is missing.

    Raises:
        ConfigError: If *cmd* is not on PATH.
    """
    try:
        found = sh.which(cmd)
    except sh.ErrorReturnCode:
        found = None
    if not found:
        raise ConfigError(f"required command {cmd!r} not found on PATH")


def run_kubectl(
    args: list[str],
    *,
    kubeconfig: str | None = None,
    kubectl: str = "kubectl",
    timeout: float = 30,
) -> tuple[bool, str, str]:
    """Run kubectl and return (success, stdout, stderr); never raises.

    Args:
        args: kubectl arguments (e.g. ``["describe", "svc", "wordpress"]``).
        kubeconfig: kubeconfig to pass as ``--kubeconfig``, or None.
        kubectl: kubectl binary.
        timeout: Seconds before the process is abandoned.
    """
    cmd = [kubectl, *args]
    if kubeconfig:
        cmd.insert(1, f"--kubeconfig={kubeconfig}")
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)
    return proc.returncode == 0, proc.stdout, proc.stderr


@contextmanager
def values_file(values: dict[str, Any]) -> Iterator[Path]:
    """Write *values* to a temporary YAML file, removed on exit.

    Yields:
        Path of the temporary file.
    """
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".yaml")
    try:
        tmp.write(yaml.safe_dump(values, default_flow_style=False).encode())
        tmp.flush()
        tmp.close()
        yield Path(tmp.name)
    finally:
        Path(tmp.name).unlink(missing_ok=True)


def format_duration(seconds: float) -> str:
    """Render seconds as a helm/kubectl duration (e.g. ``15m0s``)."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs}s"
