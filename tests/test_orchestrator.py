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

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from urllib3.exceptions import MaxRetryError

from eks_tester import orchestrator
from eks_tester.cancel import Context
from eks_tester.config import ClusterRoleConfig, TesterConfig, WordpressConfig
from eks_tester.errors import ConfigError, DeleteAggregateError, SubmissionError
from tests.conftest import FAST_STACK, ROLE_ARN, FakeStackClient


@pytest.fixture
def configs(tmp_path):
    tester_cfg = TesterConfig(name="e2e", status_file=str(tmp_path / "status.yaml"))
    return tester_cfg, ClusterRoleConfig(name="e2e-role-cluster"), WordpressConfig()


@pytest.fixture
def stack_client(monkeypatch: pytest.MonkeyPatch) -> FakeStackClient:
    client = FakeStackClient()
    monkeypatch.setattr(orchestrator, "StackClient", lambda region: client)
    return client


def test_run_up_then_down(configs, stack_client) -> None:
    tester_cfg, role_cfg, wp_cfg = configs

    status = orchestrator.run_up(tester_cfg, role_cfg, wp_cfg, Context.background(), stack_timings=FAST_STACK)

    assert status.resources["cluster_role"].outputs["ClusterRoleARN"] == ROLE_ARN
    persisted = orchestrator.load_status(tester_cfg)
    assert persisted.resources["cluster_role"].created

    # a second run resumes from the status file and does nothing
    orchestrator.run_up(tester_cfg, role_cfg, wp_cfg, Context.background(), stack_timings=FAST_STACK)
    assert len(stack_client.create_calls) == 1

    orchestrator.run_down(tester_cfg, role_cfg, wp_cfg, stack_timings=FAST_STACK)
    assert not orchestrator.load_status(tester_cfg).resources["cluster_role"].created
    assert len(stack_client.delete_calls) == 1


def test_run_up_validates_config(configs, stack_client) -> None:
    tester_cfg, role_cfg, wp_cfg = configs

    with pytest.raises(ConfigError):
        orchestrator.run_up(tester_cfg, role_cfg, wp_cfg.model_copy(update={"enable": True}), Context.background())
    assert stack_client.create_calls == []


def test_run_down_attempts_every_tester(configs, stack_client, monkeypatch: pytest.MonkeyPatch) -> None:
    tester_cfg, role_cfg, wp_cfg = configs
    orchestrator.run_up(tester_cfg, role_cfg, wp_cfg, Context.background(), stack_timings=FAST_STACK)

    wordpress = MagicMock()
    wordpress.delete.side_effect = SubmissionError("uninstall failed")
    monkeypatch.setattr(orchestrator, "_wordpress_tester", lambda *args: wordpress)
    monkeypatch.setattr(orchestrator, "require_command", lambda cmd: None)

    with pytest.raises(DeleteAggregateError, match="WordPress: uninstall failed"):
        orchestrator.run_down(
            tester_cfg, role_cfg, wp_cfg.model_copy(update={"enable": True}), stack_timings=FAST_STACK,
        )

    assert len(stack_client.delete_calls) == 1
    assert not orchestrator.load_status(tester_cfg).resources["cluster_role"].created


def test_run_down_continues_after_unexpected_error(configs, stack_client, monkeypatch: pytest.MonkeyPatch) -> None:
    tester_cfg, role_cfg, wp_cfg = configs
    orchestrator.run_up(tester_cfg, role_cfg, wp_cfg, Context.background(), stack_timings=FAST_STACK)

    wordpress = MagicMock()
    wordpress.delete.side_effect = MaxRetryError(None, "/api/v1/namespaces/wordpress")
    monkeypatch.setattr(orchestrator, "_wordpress_tester", lambda *args: wordpress)
    monkeypatch.setattr(orchestrator, "require_command", lambda cmd: None)

    with pytest.raises(DeleteAggregateError, match="WordPress: "):
        orchestrator.run_down(
            tester_cfg, role_cfg, wp_cfg.model_copy(update={"enable": True}), stack_timings=FAST_STACK,
        )

    assert len(stack_client.delete_calls) == 1
    assert not orchestrator.load_status(tester_cfg).resources["cluster_role"].created
