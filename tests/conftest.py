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

"""Shared fakes and fixtures. Nothing here touches a real account or cluster."""

from __future__ import annotations

import os
from typing import Any

import pytest
from kubernetes import client

from eks_tester.config import InstallTimings, ReadinessTimings, StackTimings
from eks_tester.constants import CFN_STATUS_CREATE_COMPLETE, CFN_TERMINAL_FAILURES
from eks_tester.errors import SubmissionError
from eks_tester.poller import ResourceSnapshot
from eks_tester.state import EnvironmentStatus, StatusRecorder

FAST_STACK = StackTimings(deadline=1.0, poll_interval=0.01, initial_delay=0, query_timeout=0.5)
FAST_INSTALL = InstallTimings(install_timeout=1, namespace_delete_interval=0.01, namespace_delete_timeout=0.2)
FAST_READINESS = ReadinessTimings(window=0.3, tick=0.01, settle=0, request_timeout=0.1)

ROLE_ARN = "arn:aws:iam::123456789012:role/eks-tester-role-cluster"


class MemoryStore:
    """Status store keeping a deep copy of every save."""

    def __init__(self, status: EnvironmentStatus | None = None) -> None:
        self.initial = status or EnvironmentStatus()
        self.saves: list[EnvironmentStatus] = []

    def load(self) -> EnvironmentStatus:
        return self.initial.model_copy(deep=True)

    def save(self, status: EnvironmentStatus) -> None:
        self.saves.append(status.model_copy(deep=True))


class FakeStackClient:
    """Stack client replaying scripted statuses.

    The last status of a script repeats forever.
    """

    def __init__(
        self,
        create_statuses: list[str] | None = None,
        delete_statuses: list[str] | None = None,
        outputs: dict[str, str] | None = None,
    ) -> None:
        self.create_statuses = create_statuses or ["CREATE_IN_PROGRESS", CFN_STATUS_CREATE_COMPLETE]
        self.delete_statuses = delete_statuses or ["DELETE_IN_PROGRESS", "DELETE_COMPLETE"]
        self.outputs = {"ClusterRoleARN": ROLE_ARN} if outputs is None else outputs
        self.create_calls: list[dict[str, Any]] = []
        self.delete_calls: list[str] = []
        self.describe_calls = 0
        self._script: list[str] = []

    def submit_create(self, name, template_body, parameters, tags, capabilities=()) -> str:
        self.create_calls.append(
            {"name": name, "template_body": template_body, "parameters": parameters, "tags": tags},
        )
        self._script = list(self.create_statuses)
        return f"arn:aws:cloudformation:us-west-2:123456789012:stack/{name}/1"

    def submit_delete(self, handle: str) -> None:
        self.delete_calls.append(handle)
        self._script = list(self.delete_statuses)

    def describe(self, handle: str) -> ResourceSnapshot:
        self.describe_calls += 1
        status = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        outputs = self.outputs if status == CFN_STATUS_CREATE_COMPLETE else {}
        return ResourceSnapshot(status, outputs=dict(outputs), failed=status in CFN_TERMINAL_FAILURES)


class FakeKube:
    """Namespace/service store with optional injected failures."""

    def __init__(self, hostname: str = "abcd1234-zone.elb.amazonaws.com", delete_error: str = "") -> None:
        self.hostname = hostname
        self.delete_error = delete_error
        self.namespaces: set[str] = set()
        self.deleted_namespaces: list[str] = []

    def create_namespace(self, name: str) -> None:
        self.namespaces.add(name)

    def delete_namespace_and_wait(self, name: str, interval: float = 0, timeout: float = 0) -> None:
        self.deleted_namespaces.append(name)
        if self.delete_error:
            raise SubmissionError(self.delete_error)
        self.namespaces.discard(name)

    def get_service(self, namespace: str, name: str) -> client.V1Service:
        ingress = [client.V1LoadBalancerIngress(hostname=self.hostname)] if self.hostname else None
        return client.V1Service(
            status=client.V1ServiceStatus(load_balancer=client.V1LoadBalancerStatus(ingress=ingress)),
        )

    def describe_service(self, namespace: str, name: str) -> str:
        return ""


class FakeHelm:
    """Helm installer recording calls, with optional injected failures."""

    def __init__(self, install_error: str = "", uninstall_error: str = "") -> None:
        self.install_error = install_error
        self.uninstall_error = uninstall_error
        self.repos: dict[str, str] = {}
        self.installs: list[dict[str, Any]] = []
        self.uninstalls: list[tuple[str, str]] = []

    def repo_add(self, name: str, url: str) -> None:
        self.repos[name] = url

    def install(self, release, chart, namespace, values, *, repo_url="", version="", timeout=0) -> None:
        self.installs.append(
            {"release": release, "chart": chart, "namespace": namespace, "values": values, "version": version},
        )
        if self.install_error:
            raise SubmissionError(self.install_error)

    def uninstall(self, release: str, namespace: str) -> None:
        self.uninstalls.append((release, namespace))
        if self.uninstall_error:
            raise SubmissionError(self.uninstall_error)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def recorder(store: MemoryStore) -> StatusRecorder:
    return StatusRecorder(store)


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep EKS_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("EKS_"):
            monkeypatch.delenv(key)
