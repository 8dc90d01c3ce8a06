import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kubectl_openclaw.model import (
    get_creation_timestamp,
    get_name,
    get_namespace,
    nested_bool,
    nested_int,
    nested_list,
    nested_map,
    nested_string,
)
from kubectl_openclaw.timeline import format_age

logger = logging.getLogger(__name__)

DEFAULT_PHASE = "Pending"
DEFAULT_IMAGE_REPOSITORY = "ghcr.io/openclaw/openclaw"
DEFAULT_IMAGE_TAG = "latest"
UNKNOWN_STATUS = "Unknown"

PHASE_INDICATORS = {
    "Running": "ok",
    "Degraded": "warning",
    "Failed": "error",
    "Provisioning": "provisioning",
}

# (label, status field)
ENDPOINT_FIELDS = [
    ("Gateway (WebSocket)", "gatewayEndpoint"),
    ("Canvas (HTTP)", "canvasEndpoint"),
]

# (label, key under status.managedResources)
MANAGED_RESOURCE_KINDS = [
    ("Deployment", "deployment"),
    ("Service", "service"),
    ("ConfigMap", "configMap"),
    ("PVC", "pvc"),
    ("NetworkPolicy", "networkPolicy"),
    ("PDB", "podDisruptionBudget"),
    ("ServiceAccount", "serviceAccount"),
    ("Role", "role"),
    ("RoleBinding", "roleBinding"),
]


@dataclass
class Condition:
    type: str
    status: str
    reason: str = ""
    message: str = ""

    @property
    def indicator(self) -> str:
        if self.status == "True":
            return "+"
        if self.status == "False":
            return "-"
        return " "


@dataclass
class ContainerSummary:
    name: str
    ready: bool
    state: str
    reason: str = ""
    restart_count: int = 0

    @property
    def state_display(self) -> str:
        if self.state in ("Waiting", "Terminated"):
            return f"{self.state}: {self.reason}"
        return self.state


@dataclass
class PodSummary:
    name: str
    phase: str
    restart_count: int
    created: str
    containers: list[ContainerSummary] = field(default_factory=list)


@dataclass
class InstanceView:
    """
    Normalized, read-only view of one instance and its runtime pods.
    Rebuilt from live documents on every query.
    """

    namespace: str
    name: str
    created: str
    phase: str
    image: str
    endpoints: dict[str, str] = field(default_factory=dict)
    conditions: list[Condition] = field(default_factory=list)
    managed_resources: dict[str, str] | None = None
    pods: list[PodSummary] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def primary_pod(self) -> PodSummary | None:
        return self.pods[0] if self.pods else None

    @property
    def phase_indicator(self) -> str:
        return phase_with_indicator(self.phase)

    def age(self, now: datetime | None = None) -> str:
        return format_age(self.created, now=now)


# ----------------------------
# Field resolution
# ----------------------------


def resolve_phase(instance: dict[str, Any]) -> str:
    return nested_string(instance, "status", "phase") or DEFAULT_PHASE


def phase_with_indicator(phase: str) -> str:
    indicator = PHASE_INDICATORS.get(phase)
    if indicator is None:
        return phase
    return f"{phase}  [{indicator}]"


def resolve_image(spec: dict[str, Any] | None) -> str:
    """
    Render the image reference, digest taking precedence over tag.
    """
    repository = nested_string(spec, "image", "repository") or DEFAULT_IMAGE_REPOSITORY
    digest = nested_string(spec, "image", "digest")
    if digest:
        return f"{repository}@{digest}"

    tag = nested_string(spec, "image", "tag") or DEFAULT_IMAGE_TAG
    return f"{repository}:{tag}"


def get_conditions(status: dict[str, Any] | None) -> list[Condition]:
    conditions = []
    # Malformed entries are skipped, same as an absent list
    for c in nested_list(status, "conditions"):
        if not isinstance(c, dict):
            continue
        conditions.append(
            Condition(
                type=nested_string(c, "type"),
                status=nested_string(c, "status"),
                reason=nested_string(c, "reason"),
                message=nested_string(c, "message"),
            )
        )
    return conditions


def condition_status(status: dict[str, Any] | None, cond_type: str) -> str:
    """
    First condition whose type matches wins. "Unknown" if none match.
    """
    for c in get_conditions(status):
        if c.type == cond_type:
            return c.status
    return UNKNOWN_STATUS


def get_endpoints(status: dict[str, Any] | None) -> dict[str, str]:
    endpoints = {}
    for label, key in ENDPOINT_FIELDS:
        value = nested_string(status, key)
        if value:
            endpoints[label] = value
    return endpoints


def get_managed_resources(status: dict[str, Any] | None) -> dict[str, str] | None:
    """
    Known managed resource names in kind order. None when the status
    carries no managedResources map at all.
    """
    managed = nested_map(status, "managedResources")
    if managed is None:
        return None

    resources = {}
    for label, key in MANAGED_RESOURCE_KINDS:
        value = nested_string(managed, key)
        if value:
            resources[label] = value
    return resources


# ----------------------------
# Pod / container summaries
# ----------------------------


def classify_container_state(state: dict[str, Any] | None) -> tuple[str, str]:
    """
    Return (state, reason). First populated field wins in the order
    running, waiting, terminated.
    """
    if nested_map(state, "running") is not None:
        return "Running", ""
    if nested_map(state, "waiting") is not None:
        return "Waiting", nested_string(state, "waiting", "reason")
    if nested_map(state, "terminated") is not None:
        return "Terminated", nested_string(state, "terminated", "reason")
    return UNKNOWN_STATUS, ""


def summarize_container(cs: dict[str, Any]) -> ContainerSummary:
    state, reason = classify_container_state(nested_map(cs, "state"))
    return ContainerSummary(
        name=nested_string(cs, "name"),
        ready=nested_bool(cs, "ready"),
        state=state,
        reason=reason,
        restart_count=nested_int(cs, "restartCount"),
    )


def summarize_pod(pod: dict[str, Any]) -> PodSummary:
    containers = [
        summarize_container(cs)
        for cs in nested_list(pod, "status", "containerStatuses")
        if isinstance(cs, dict)
    ]
    return PodSummary(
        name=get_name(pod),
        phase=nested_string(pod, "status", "phase"),
        restart_count=sum(c.restart_count for c in containers),
        created=get_creation_timestamp(pod),
        containers=containers,
    )


def multiple_pods_warning(pods: list[dict[str, Any]]) -> str | None:
    if len(pods) > 1:
        return f"multiple pods found, using {get_name(pods[0])}"
    return None


# ----------------------------
# Projection
# ----------------------------


def build_instance_view(
    instance: dict[str, Any],
    pods: list[dict[str, Any]] | None = None,
) -> InstanceView:
    """
    Project a raw OpenClawInstance document and its correlated pods
    into an InstanceView.

    - Missing status.phase resolves to "Pending"
    - Malformed or absent fields degrade to empty values
    - The first pod is the primary one; more than one pod adds a warning
    """
    spec = nested_map(instance, "spec")
    status = nested_map(instance, "status")
    pods = pods or []

    view = InstanceView(
        namespace=get_namespace(instance),
        name=get_name(instance),
        created=get_creation_timestamp(instance),
        phase=resolve_phase(instance),
        image=resolve_image(spec),
        endpoints=get_endpoints(status),
        conditions=get_conditions(status),
        managed_resources=get_managed_resources(status),
        pods=[summarize_pod(p) for p in pods],
    )

    warning = multiple_pods_warning(pods)
    if warning:
        logger.debug("instance %s/%s: %s", view.namespace, view.name, warning)
        view.warnings.append(warning)

    return view
