import logging
import os
from dataclasses import dataclass

import yaml
from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from kubectl_openclaw.model import nested_string

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
DEFAULT_NAMESPACE = "default"
OUTPUT_FORMATS = ("text", "json", "yaml")


def resolve_namespace(kubeconfig: str | None = None) -> str:
    """
    Namespace of the active kubeconfig context, then the in-cluster
    service account namespace, then "default".
    """
    try:
        _, active = config.list_kube_config_contexts(config_file=kubeconfig)
    except (ConfigException, OSError, yaml.YAMLError) as e:
        logger.debug("cannot read kubeconfig contexts: %s", e)
        active = None

    namespace = nested_string(active, "context", "namespace")
    if namespace:
        return namespace

    if os.path.exists(SERVICE_ACCOUNT_NAMESPACE_FILE):
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, encoding="utf-8") as f:
            namespace = f.read().strip()
        if namespace:
            return namespace

    return DEFAULT_NAMESPACE


@dataclass(frozen=True)
class CliConfig:
    """
    Settings shared by every subcommand, built once from the command line.
    """

    kubeconfig: str | None = None
    namespace: str | None = None
    all_namespaces: bool = False
    output: str = "text"
    verbose: bool = False
    request_timeout: float | None = None

    def target_namespace(self) -> str:
        if self.namespace:
            return self.namespace
        namespace = resolve_namespace(self.kubeconfig)
        logger.debug("resolved namespace %s", namespace)
        return namespace


def build_config(args) -> CliConfig:
    output = getattr(args, "output", None) or "text"
    if output not in OUTPUT_FORMATS:
        raise ValueError(f"unsupported output format {output!r}")

    return CliConfig(
        kubeconfig=getattr(args, "kubeconfig", None) or None,
        namespace=getattr(args, "namespace", None) or None,
        all_namespaces=bool(getattr(args, "all_namespaces", False)),
        output=output,
        verbose=bool(getattr(args, "verbose", False)),
        request_timeout=getattr(args, "request_timeout", None),
    )
