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

"""Kubernetes object access: namespaces and services."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
import urllib3
from kubernetes.client.exceptions import ApiException
from tenacity import RetryError, retry, retry_if_result, stop_after_delay, wait_fixed

from eks_tester import logger
from eks_tester.constants import (
    KUBECTL_DESCRIBE_TIMEOUT_SECONDS,
    NAMESPACE_DELETE_INTERVAL_SECONDS,
    NAMESPACE_DELETE_TIMEOUT_SECONDS,
    SERVICE_GET_TIMEOUT_SECONDS,
)
from eks_tester.errors import PollTimeoutError, SubmissionError
from eks_tester.utils import run_kubectl


class KubeClient:
    """Namespace and service operations against the target cluster.

    Args:
        kubeconfig_path: Path to the kubeconfig file; ignored when *core_v1* is given.
        kubectl_path: kubectl binary used for diagnostics.
        core_v1: Pre-built ``CoreV1Api``.
    """

    def __init__(self, kubeconfig_path: str | None = None, kubectl_path: str = "kubectl", core_v1: Any = None) -> None:
        if core_v1 is None:
            api_client = config.new_client_from_config(config_file=kubeconfig_path)
            core_v1 = client.CoreV1Api(api_client)
        self.core_v1 = core_v1
        self.kubeconfig_path = kubeconfig_path
        self.kubectl_path = kubectl_path

    def create_namespace(self, name: str) -> None:
        """Create *name*; an existing namespace is not an error.

        Raises:
            SubmissionError: If the API server rejects the request or cannot be reached.
        """
        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        try:
            self.core_v1.create_namespace(body)
        except ApiException as err:
            if err.status == 409:
                logger.info("namespace %s already exists", name)
                return
            raise SubmissionError(f"failed to create namespace {name!r} ({err.reason})") from err
        except urllib3.exceptions.HTTPError as err:
            raise SubmissionError(f"failed to create namespace {name!r} ({err})") from err
        logger.info("created namespace %s", name)

    def _namespace_exists(self, name: str) -> bool:
        try:
            self.core_v1.read_namespace(name)
        except ApiException as err:
            if err.status == 404:
                return False
            logger.warning("failed to read namespace %s: %s", name, err.reason)
        except urllib3.exceptions.HTTPError as err:
            logger.warning("failed to read namespace %s: %s", name, err)
        return True

    def delete_namespace_and_wait(
        self,
        name: str,
        interval: float = NAMESPACE_DELETE_INTERVAL_SECONDS,
        timeout: float = NAMESPACE_DELETE_TIMEOUT_SECONDS,
    ) -> None:
        """Delete *name* and block until the API server no longer returns it.

        Raises:
            SubmissionError: If the delete request is rejected or the API server cannot be reached.
            PollTimeoutError: If the namespace still exists after *timeout*.
        """
        try:
            self.core_v1.delete_namespace(name, body=client.V1DeleteOptions(propagation_policy="Foreground"))
        except ApiException as err:
            if err.status == 404:
                logger.info("namespace %s already deleted", name)
                return
            raise SubmissionError(f"failed to delete namespace {name!r} ({err.reason})") from err
        except urllib3.exceptions.HTTPError as err:
            raise SubmissionError(f"failed to delete namespace {name!r} ({err})") from err

        @retry(
            stop=stop_after_delay(timeout),
            wait=wait_fixed(interval),
            retry=retry_if_result(lambda exists: exists),
        )
        def _wait_gone() -> bool:
            return self._namespace_exists(name)

        try:
            _wait_gone()
        except RetryError as err:
            raise PollTimeoutError(f"namespace {name!r} still exists after {timeout}s") from err
        logger.info("deleted namespace %s", name)

    def get_service(self, namespace: str, name: str) -> client.V1Service:
        """Fetch a service object. API errors propagate as ``ApiException``."""
        return self.core_v1.read_namespaced_service(name, namespace, _request_timeout=SERVICE_GET_TIMEOUT_SECONDS)

    def describe_service(self, namespace: str, name: str) -> str:
        """``kubectl describe svc`` output, for diagnostics only. Empty on failure."""
        args = ["describe", "svc", name, f"--namespace={namespace}"]
        ok, stdout, stderr = run_kubectl(
            args,
            kubeconfig=self.kubeconfig_path,
            kubectl=self.kubectl_path,
            timeout=KUBECTL_DESCRIBE_TIMEOUT_SECONDS,
        )
        if not ok:
            logger.warning("'kubectl %s' failed: %s", " ".join(args), stderr.strip())
            return ""
        return stdout


def load_balancer_hostname(service: client.V1Service) -> str:
    """First non-empty load balancer ingress hostname of *service*, or empty."""
    status = service.status
    if not status or not status.load_balancer or not status.load_balancer.ingress:
        return ""
    for ingress in status.load_balancer.ingress:
        if ingress.hostname:
            return ingress.hostname
    return ""
