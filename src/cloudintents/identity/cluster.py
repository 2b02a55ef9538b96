"""
Kubernetes read access used by the identity resolver.

The resolver only needs two operations: read one owner object by kind and
name, and list pods by label selector. ClusterReader describes them so
tests can substitute a fake; KubernetesClusterReader implements them with
the official kubernetes client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

import structlog
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from cloudintents.config.settings import Settings
from cloudintents.core.errors import (
    ClusterReadError,
    ConfigurationError,
    ForbiddenError,
    NotFoundError,
)
from cloudintents.identity.models import OwnerKind

logger = structlog.get_logger()


class ClusterReader(Protocol):
    """Read-only view of the cluster."""

    def get(self, kind: OwnerKind, name: str, namespace: str) -> Any:
        """
        Read a single owner object.

        Raises:
            ForbiddenError: RBAC denies the read
            NotFoundError: Object does not exist
            ClusterReadError: Any other API failure
        """

    def list_pods(self, namespace: str, label_selector: str) -> list[Any]:
        """List pods in a namespace matching a label selector."""


@dataclass
class KubernetesClusterReader:
    """
    ClusterReader backed by the Kubernetes API.

    Configuration:
        kubeconfig: Path to kubeconfig file (optional)
        context: Kubeconfig context to use (optional)
        timeout: API request timeout in seconds

    Environment variables:
        KUBECONFIG: Standard kubeconfig path
    """

    kubeconfig: str | None = field(default_factory=lambda: os.environ.get("KUBECONFIG"))
    context: str | None = None
    timeout: float = 30.0

    # Internal state
    _api_client: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> KubernetesClusterReader:
        return cls(
            kubeconfig=settings.kubeconfig or os.environ.get("KUBECONFIG"),
            context=settings.kube_context,
            timeout=settings.kube_timeout,
        )

    def _ensure_initialized(self) -> None:
        """Initialize Kubernetes client if not already done."""
        if self._api_client is not None:
            return

        # Try in-cluster config first, then kubeconfig
        try:
            config.load_incluster_config()
        except config.ConfigException:
            try:
                config.load_kube_config(
                    config_file=self.kubeconfig,
                    context=self.context,
                )
            except config.ConfigException as e:
                raise ConfigurationError(f"Failed to load Kubernetes config: {e}") from e

        self._api_client = client.ApiClient()

    def _apps_api(self) -> Any:
        self._ensure_initialized()
        return client.AppsV1Api(self._api_client)

    def _batch_api(self) -> Any:
        self._ensure_initialized()
        return client.BatchV1Api(self._api_client)

    def _core_api(self) -> Any:
        self._ensure_initialized()
        return client.CoreV1Api(self._api_client)

    def _reader_for(self, kind: OwnerKind) -> Callable[..., Any]:
        """Typed read call for each supported owner kind."""
        if kind is OwnerKind.REPLICA_SET:
            return self._apps_api().read_namespaced_replica_set
        if kind is OwnerKind.DEPLOYMENT:
            return self._apps_api().read_namespaced_deployment
        if kind is OwnerKind.STATEFUL_SET:
            return self._apps_api().read_namespaced_stateful_set
        if kind is OwnerKind.DAEMON_SET:
            return self._apps_api().read_namespaced_daemon_set
        if kind is OwnerKind.JOB:
            return self._batch_api().read_namespaced_job
        if kind is OwnerKind.CRON_JOB:
            return self._batch_api().read_namespaced_cron_job
        raise ValueError(f"Unsupported owner kind: {kind}")

    def get(self, kind: OwnerKind, name: str, namespace: str) -> Any:
        read = self._reader_for(kind)
        try:
            return read(name, namespace, _request_timeout=self.timeout)
        except ApiException as e:
            raise _translate_api_exception(e, kind=kind.value, name=name, namespace=namespace) from e

    def list_pods(self, namespace: str, label_selector: str) -> list[Any]:
        core_api = self._core_api()
        try:
            pods = core_api.list_namespaced_pod(
                namespace,
                label_selector=label_selector,
                timeout_seconds=int(self.timeout),
            )
        except ApiException as e:
            raise _translate_api_exception(
                e, kind="Pod", label_selector=label_selector, namespace=namespace
            ) from e

        logger.debug(
            "pods_listed",
            namespace=namespace,
            label_selector=label_selector,
            count=len(pods.items),
        )
        return list(pods.items)


def _translate_api_exception(exc: ApiException, **details: Any) -> ClusterReadError:
    """Map an ApiException status to the matching ClusterReadError subclass."""
    details["status"] = exc.status
    if exc.status == 403:
        return ForbiddenError(f"Forbidden reading {details.get('kind')}", details)
    if exc.status == 404:
        return NotFoundError(f"{details.get('kind')} not found", details)
    return ClusterReadError(f"Failed to read {details.get('kind')}: {exc.reason}", details)
