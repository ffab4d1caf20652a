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

"""Persisted status record and the write-through persistence port."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel, Field

from eks_tester import logger
from eks_tester.constants import STATUS_HISTORY_LIMIT


# ============================================================================
# Records
# ============================================================================

class ServiceEndpoint(BaseModel):
    """Externally reachable endpoint derived from a load balancer hostname.

    Attributes:
        hostname: Ingress hostname reported by the service, or empty.
        url: ``http://<hostname>``, or empty.
        resource_name: Load balancer name (hostname prefix before the first ``-``).
        resource_id: Load balancer ARN reconstructed from the hostname.
    """

    hostname: str = ""
    url: str = ""
    resource_name: str = ""
    resource_id: str = ""


class ManagedResource(BaseModel):
    """One provisionable unit and its lifecycle state.

    Attributes:
        name: Identifier, unique within its kind.
        create_enabled: Whether this tool is responsible for creating the unit.
        external_ref: Pre-existing identifier; when set, creation is bypassed.
        handle: Identifier assigned once creation is submitted (e.g. stack ID).
        created: Single source of truth for idempotency.
        status: Last status observed from the external system.
        outputs: Outputs populated after a successful create.
        endpoint: Derived service endpoint, for service-backed units.
        create_took: Duration of the last create transition.
        delete_took: Duration of the last delete transition.
    """

    name: str
    create_enabled: bool = True
    external_ref: str = ""
    handle: str = ""
    created: bool = False
    status: str = ""
    outputs: dict[str, str] = Field(default_factory=dict)
    endpoint: ServiceEndpoint | None = None
    create_took: timedelta | None = None
    delete_took: timedelta | None = None


class StatusEntry(BaseModel):
    time: datetime
    message: str


class EnvironmentStatus(BaseModel):
    """Everything persisted for one test environment."""

    resources: dict[str, ManagedResource] = Field(default_factory=dict)
    history: list[StatusEntry] = Field(default_factory=list)


# ============================================================================
# Persistence port
# ============================================================================

class StatusStore(Protocol):
    def load(self) -> EnvironmentStatus: ...

    def save(self, status: EnvironmentStatus) -> None: ...


class YamlStatusStore:
    """Stores the environment status as a YAML document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> EnvironmentStatus:
        if not self.path.exists():
            return EnvironmentStatus()
        with open(self.path) as f:
            data = yaml.safe_load(f) or {}
        return EnvironmentStatus.model_validate(data)

    def save(self, status: EnvironmentStatus) -> None:
        """Write the record atomically (temp file in the same dir + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        body = yaml.safe_dump(status.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(body)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class StatusRecorder:
    """Binds a loaded status record to its store.

    A single writer per environment is assumed; callers must not run
    concurrent create/delete against the same record.
    """

    def __init__(self, store: StatusStore, status: EnvironmentStatus | None = None) -> None:
        self.store = store
        self.status = status if status is not None else store.load()

    def resource(self, key: str, name: str) -> ManagedResource:
        """Return the record stored under *key*, creating it if absent.

        A record that was never submitted takes the current *name*; once a
        handle exists the recorded name is kept so deletes target what was
        actually created.

        Args:
            key: Kind of unit (e.g. ``cluster_role``); one record per kind.
            name: Identifier of the unit.
        """
        res = self.status.resources.get(key)
        if res is None:
            res = ManagedResource(name=name)
            self.status.resources[key] = res
        elif res.name != name and not res.created and not res.handle:
            logger.info("renaming %s record %s -> %s", key, res.name, name)
            res.name = name
        elif res.name != name:
            logger.warning("%s record keeps %s; %s was requested", key, res.name, name)
        return res

    def record(self, message: str) -> None:
        """Append a timestamped message to the status history."""
        logger.debug("status: %s", message)
        self.status.history.append(StatusEntry(time=datetime.now(timezone.utc), message=message))
        del self.status.history[:-STATUS_HISTORY_LIMIT]

    def sync(self) -> None:
        self.store.save(self.status)
