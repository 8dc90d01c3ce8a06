import json
import logging
from collections.abc import Callable
from typing import Any

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from kubectl_openclaw.model import nested_list

logger = logging.getLogger(__name__)

# ----------------------------
# OpenClawInstance resource identity
# ----------------------------

GROUP = "openclaw.openclaw.io"
VERSION = "v1alpha1"
PLURAL = "openclawinstances"
KIND = "OpenClawInstance"

OPERATOR_NAMESPACES = ["openclaw-operator-system", "openclaw-system"]
OPERATOR_SELECTOR = "control-plane=controller-manager"


def instance_selector(name: str) -> str:
    return f"app.kubernetes.io/name=openclaw,app.kubernetes.io/instance={name}"


# ----------------------------
# Errors
# ----------------------------


class OpenClawError(Exception):
    """
    Base class for errors that abort a command with a readable message.
    """


class ConfigError(OpenClawError):
    pass


class KubeError(OpenClawError):
    """
    A failed orchestrator call. `detail` is the bare API error,
    the message adds the operation and subject.
    """

    def __init__(self, operation: str, detail: str, status: int | None = None):
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


def api_error_message(exc: Exception) -> str:
    if isinstance(exc, ApiException):
        body = exc.body
        if body:
            try:
                decoded = json.loads(body)
            except (TypeError, ValueError):
                decoded = None
            if isinstance(decoded, dict) and decoded.get("message"):
                return str(decoded["message"])
        return f"{exc.reason or 'request failed'} ({exc.status})"
    return str(exc)


# ----------------------------
# Client construction
# ----------------------------


def load_api_client(kubeconfig: str | None = None) -> client.ApiClient:
    """
    Build an API client from kubeconfig, falling back to in-cluster
    service account credentials when no kubeconfig is available.
    """
    try:
        return config.new_client_from_config(config_file=kubeconfig)
    except (ConfigException, OSError, yaml.YAMLError) as kube_err:
        if kubeconfig:
            raise ConfigError(f"failed to load kubeconfig: {kube_err}") from kube_err
        logger.debug("no usable kubeconfig (%s), trying in-cluster config", kube_err)
        try:
            config.load_incluster_config()
        except ConfigException as incluster_err:
            raise ConfigError(
                f"failed to load kubeconfig: {kube_err}"
            ) from incluster_err
        return client.ApiClient()


class KubeClients:
    """
    The orchestrator queries the plugin needs, returning plain
    dictionaries shaped like `kubectl get -o json` output.
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        request_timeout: float | None = None,
    ):
        self.api_client = api_client
        self.core = client.CoreV1Api(api_client)
        self.custom = client.CustomObjectsApi(api_client)
        self.request_timeout = request_timeout

    @classmethod
    def from_config(
        cls,
        kubeconfig: str | None = None,
        request_timeout: float | None = None,
    ) -> "KubeClients":
        return cls(load_api_client(kubeconfig), request_timeout=request_timeout)

    def _call(
        self,
        operation: str,
        fn: Callable[..., Any],
        *args: Any,
        deadline: bool = True,
        **kwargs: Any,
    ) -> Any:
        if deadline and self.request_timeout:
            kwargs["_request_timeout"] = self.request_timeout
        try:
            return fn(*args, **kwargs)
        except (ApiException, HTTPError) as e:
            raise KubeError(
                operation, api_error_message(e), status=getattr(e, "status", None)
            ) from e

    def list_instances(
        self, namespace: str | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """
        List OpenClawInstances in one namespace, or cluster-wide when
        namespace is None.
        """
        kwargs: dict[str, Any] = {}
        if limit:
            kwargs["limit"] = limit

        if namespace:
            logger.debug("listing %s in namespace %s", PLURAL, namespace)
            result = self._call(
                f"failed to list {KIND}s",
                self.custom.list_namespaced_custom_object,
                GROUP,
                VERSION,
                namespace,
                PLURAL,
                **kwargs,
            )
        else:
            logger.debug("listing %s in all namespaces", PLURAL)
            result = self._call(
                f"failed to list {KIND}s",
                self.custom.list_cluster_custom_object,
                GROUP,
                VERSION,
                PLURAL,
                **kwargs,
            )

        return [item for item in nested_list(result, "items") if isinstance(item, dict)]

    def get_instance(self, namespace: str, name: str) -> dict[str, Any]:
        logger.debug("getting %s %s/%s", KIND, namespace, name)
        return self._call(
            f'failed to get {KIND} "{name}"',
            self.custom.get_namespaced_custom_object,
            GROUP,
            VERSION,
            namespace,
            PLURAL,
            name,
        )

    def list_pods(self, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        logger.debug("listing pods in %s with selector %s", namespace, label_selector)
        pods = self._call(
            "failed to list pods",
            self.core.list_namespaced_pod,
            namespace,
            label_selector=label_selector,
        )
        return [self.api_client.sanitize_for_serialization(p) for p in pods.items or []]

    def stream_pod_logs(
        self,
        namespace: str,
        pod: str,
        container: str | None = None,
        follow: bool = False,
        previous: bool = False,
        tail_lines: int | None = None,
    ) -> Any:
        """
        Open a raw log stream. The caller owns the returned response
        and must release it.
        """
        kwargs: dict[str, Any] = {
            "follow": follow,
            "previous": previous,
            "_preload_content": False,
        }
        if container:
            kwargs["container"] = container
        if tail_lines and tail_lines > 0:
            kwargs["tail_lines"] = tail_lines

        logger.debug("streaming logs from %s/%s (%s)", namespace, pod, kwargs)
        # A follow stream stays open indefinitely, so no deadline applies
        return self._call(
            f"failed to stream logs from pod {pod}",
            self.core.read_namespaced_pod_log,
            pod,
            namespace,
            deadline=not follow,
            **kwargs,
        )
