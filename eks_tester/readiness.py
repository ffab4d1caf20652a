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

"""Readiness probing for load-balancer backed services.

Two phases, each bounded by the same wait window: discover the ingress
hostname of the service, then probe the derived URL over HTTP until it
answers.
"""

from __future__ import annotations

import re

import requests
import urllib3
from kubernetes.client.exceptions import ApiException
from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from eks_tester import console, logger
from eks_tester.cancel import Context
from eks_tester.config import ReadinessTimings
from eks_tester.constants import NLB_ARN_FORMAT
from eks_tester.errors import EndpointFormatError, PollTimeoutError, ReadinessError
from eks_tester.k8s import KubeClient, load_balancer_hostname
from eks_tester.state import ServiceEndpoint

# <name>-<id>.elb[.<region>].amazonaws.com[.cn]
ELB_HOSTNAME_RE = re.compile(
    r"^[a-z0-9]+-[a-z0-9]+\.elb\.(?:[a-z0-9-]+\.)?amazonaws\.com(?:\.cn)?$",
    re.IGNORECASE,
)


def derive_endpoint(hostname: str, region: str, account_id: str) -> ServiceEndpoint:
    """Derive URL, load balancer name and ARN from an ELB ingress hostname.

    ``abcd1234-zone.elb.amazonaws.com`` in ``us-west-2`` for account
    ``123456789012`` yields name ``abcd1234`` and ARN
    ``arn:aws:elasticloadbalancing:us-west-2:123456789012:loadbalancer/net/abcd1234/zone``.

    Args:
        hostname: Ingress hostname; empty while no ingress is assigned.
        region: AWS region of the load balancer.
        account_id: AWS account owning the load balancer.

    Returns:
        The derived endpoint; all fields empty when *hostname* is empty.

    Raises:
        EndpointFormatError: If *hostname* is not an ELB hostname.
    """
    if not hostname:
        return ServiceEndpoint()
    if not ELB_HOSTNAME_RE.match(hostname):
        raise EndpointFormatError(f"unexpected load balancer hostname format {hostname!r}")
    first_label = hostname.split(".")[0]
    return ServiceEndpoint(
        hostname=hostname,
        url=f"http://{hostname}",
        resource_name=hostname.split("-")[0],
        resource_id=NLB_ARN_FORMAT.format(
            region=region,
            account_id=account_id,
            path=first_label.replace("-", "/"),
        ),
    )


class ReadinessProber:
    """Waits for a service endpoint to be assigned and to answer HTTP.

    Args:
        kube: Cluster object access.
        timings: Wait window, tick, settle delay and request timeout.
        session: HTTP session used for probes.
    """

    def __init__(
        self,
        kube: KubeClient,
        timings: ReadinessTimings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.kube = kube
        self.timings = timings or ReadinessTimings()
        self.session = session or requests.Session()

    def _retrying(self, ctx: Context) -> Retrying:
        return Retrying(
            stop=stop_after_delay(self.timings.window),
            wait=wait_fixed(self.timings.tick),
            retry=retry_if_result(lambda ok: not ok),
            sleep=ctx.with_timeout(self.timings.window).sleep,
        )

    # ------------------------------------------------------------------
    # Endpoint discovery
    # ------------------------------------------------------------------

    def _fetch_hostname(self, namespace: str, service: str) -> str:
        described = self.kube.describe_service(namespace, service)
        if described:
            logger.debug("'kubectl describe svc %s' output:\n%s", service, described)

        logger.info("querying service %s/%s for load balancer ingress", namespace, service)
        try:
            svc = self.kube.get_service(namespace, service)
        except (ApiException, urllib3.exceptions.HTTPError) as err:
            logger.warning("failed to get service %s/%s; retrying (%s)", namespace, service, err)
            return ""
        hostname = load_balancer_hostname(svc)
        if hostname:
            logger.info("found host name %s", hostname)
        return hostname

    def discover_hostname(self, namespace: str, service: str, ctx: Context) -> str:
        """Poll the service until a load balancer ingress hostname appears.

        Raises:
            ReadinessError: If no hostname appears within the window.
            CancellationError: If *ctx* is cancelled while waiting.
        """
        console.print(f"[yellow]\u2139\ufe0f  Waiting for service {namespace}/{service} load balancer...[/yellow]")
        try:
            return self._retrying(ctx)(self._fetch_hostname, namespace, service)
        except (RetryError, PollTimeoutError) as err:
            raise ReadinessError(f"failed to find host name for service {namespace}/{service}") from err

    # ------------------------------------------------------------------
    # Health probe
    # ------------------------------------------------------------------

    def _read(self, url: str) -> str | None:
        """GET *url* without certificate validation; None unless 2xx/3xx."""
        logger.info("reading %s", url)
        try:
            resp = self.session.get(url, timeout=self.timings.request_timeout, verify=False)
        except requests.RequestException as err:
            logger.warning("failed to read %s; retrying (%s)", url, err)
            return None
        if resp.status_code >= 400:
            logger.warning("%s returned %d; retrying", url, resp.status_code)
            return None
        return resp.text

    def probe(self, url: str, ctx: Context, marker: str = "", require_marker: bool = False) -> str:
        """Probe *url* until it answers with a successful response.

        A response containing *marker* is logged. Unless *require_marker* is
        set, any 2xx/3xx response counts as ready.

        Returns:
            The body of the accepted response.

        Raises:
            ReadinessError: If no acceptable response arrives within the window.
            CancellationError: If *ctx* is cancelled while waiting.
        """
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        body: str | None = None

        def _attempt() -> bool:
            nonlocal body
            body = self._read(url)
            if body is None:
                return False
            if marker and marker in body:
                logger.info("read %s: expected content found", url)
            elif marker:
                logger.warning("unexpected output from %s (content marker missing)", url)
                return not require_marker
            return True

        try:
            self._retrying(ctx)(_attempt)
        except (RetryError, PollTimeoutError) as err:
            raise ReadinessError(f"no successful response from {url}") from err
        return body or ""

    def wait_ready(
        self,
        namespace: str,
        service: str,
        ctx: Context,
        *,
        region: str,
        account_id: str,
        marker: str = "",
        require_marker: bool = False,
    ) -> ServiceEndpoint:
        """Discover the endpoint, let DNS settle, then probe it.

        Returns:
            The derived endpoint of the ready service.
        """
        hostname = self.discover_hostname(namespace, service, ctx)
        endpoint = derive_endpoint(hostname, region, account_id)
        console.print(f"  NLB ARN  : {endpoint.resource_id}")
        console.print(f"  NLB name : {endpoint.resource_name}")
        console.print(f"  NLB URL  : {endpoint.url}")

        logger.info("waiting %ss before probing %s", self.timings.settle, endpoint.url)
        ctx.sleep(self.timings.settle)
        self.probe(endpoint.url, ctx, marker=marker, require_marker=require_marker)
        console.print(f"[green]\u2705 Service {namespace}/{service} is ready at {endpoint.url}[/green]")
        return endpoint
