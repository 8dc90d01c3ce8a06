from kubectl_openclaw.snapshot import (
    DEFAULT_IMAGE_REPOSITORY,
    build_instance_view,
    classify_container_state,
    condition_status,
    get_conditions,
    get_endpoints,
    get_managed_resources,
    phase_with_indicator,
    resolve_image,
    resolve_phase,
    summarize_pod,
)
from kubectl_openclaw.tests.fakes import make_container, make_instance, make_pod

# ----------------------------
# Phase
# ----------------------------


def test_phase_defaults_to_pending_without_status():
    assert resolve_phase(make_instance()) == "Pending"


def test_phase_defaults_to_pending_with_empty_phase():
    assert resolve_phase(make_instance(status={"phase": ""})) == "Pending"


def test_phase_passthrough_for_unrecognized_values():
    assert resolve_phase(make_instance(status={"phase": "Hibernating"})) == "Hibernating"


def test_phase_indicator():
    assert phase_with_indicator("Running") == "Running  [ok]"
    assert phase_with_indicator("Degraded") == "Degraded  [warning]"
    assert phase_with_indicator("Failed") == "Failed  [error]"
    assert phase_with_indicator("Provisioning") == "Provisioning  [provisioning]"
    assert phase_with_indicator("Pending") == "Pending"
    assert phase_with_indicator("Hibernating") == "Hibernating"


# ----------------------------
# Conditions
# ----------------------------


class TestConditionStatus:
    def test_first_match_wins(self):
        status = {
            "conditions": [
                {"type": "Ready", "status": "False"},
                {"type": "Ready", "status": "True"},
            ]
        }
        assert condition_status(status, "Ready") == "False"

    def test_no_match_is_unknown(self):
        status = {"conditions": [{"type": "Available", "status": "True"}]}
        assert condition_status(status, "Ready") == "Unknown"

    def test_absent_conditions_is_unknown(self):
        assert condition_status({}, "Ready") == "Unknown"
        assert condition_status(None, "Ready") == "Unknown"

    def test_malformed_conditions_is_unknown(self):
        assert condition_status({"conditions": "Ready=True"}, "Ready") == "Unknown"
        assert condition_status({"conditions": {"Ready": "True"}}, "Ready") == "Unknown"

    def test_malformed_entries_are_skipped(self):
        status = {"conditions": ["junk", 7, {"type": "Ready", "status": "True"}]}
        assert condition_status(status, "Ready") == "True"


def test_get_conditions_keeps_order_and_fields():
    status = {
        "conditions": [
            {"type": "Ready", "status": "False", "reason": "PodNotReady", "message": "waiting"},
            {"type": "ConfigValid", "status": "True"},
        ]
    }
    conditions = get_conditions(status)
    assert [c.type for c in conditions] == ["Ready", "ConfigValid"]
    assert conditions[0].reason == "PodNotReady"
    assert conditions[0].indicator == "-"
    assert conditions[1].message == ""
    assert conditions[1].indicator == "+"


# ----------------------------
# Image
# ----------------------------


class TestResolveImage:
    def test_digest_takes_precedence_over_tag(self):
        spec = {"image": {"repository": "repo/app", "tag": "v1", "digest": "sha256:abc"}}
        assert resolve_image(spec) == "repo/app@sha256:abc"

    def test_tag_defaults_to_latest(self):
        assert resolve_image({"image": {"repository": "repo/app"}}) == "repo/app:latest"

    def test_explicit_tag(self):
        assert resolve_image({"image": {"repository": "repo/app", "tag": "v2"}}) == "repo/app:v2"

    def test_repository_default(self):
        assert resolve_image({}) == f"{DEFAULT_IMAGE_REPOSITORY}:latest"
        assert resolve_image(None) == f"{DEFAULT_IMAGE_REPOSITORY}:latest"
        assert resolve_image({"image": {"digest": "sha256:def"}}) == (
            f"{DEFAULT_IMAGE_REPOSITORY}@sha256:def"
        )


# ----------------------------
# Endpoints / managed resources
# ----------------------------


def test_endpoints_omit_empty():
    status = {"gatewayEndpoint": "ws://my-agent:18789", "canvasEndpoint": ""}
    assert get_endpoints(status) == {"Gateway (WebSocket)": "ws://my-agent:18789"}
    assert get_endpoints({}) == {}


def test_managed_resources_are_sparse_and_ordered():
    status = {
        "managedResources": {
            "roleBinding": "my-agent-rb",
            "deployment": "my-agent",
            "pvc": "",
            "service": 5,
        }
    }
    resources = get_managed_resources(status)
    assert list(resources.items()) == [
        ("Deployment", "my-agent"),
        ("RoleBinding", "my-agent-rb"),
    ]


def test_managed_resources_absent():
    assert get_managed_resources({}) is None
    assert get_managed_resources(None) is None
    assert get_managed_resources({"managedResources": ["deployment"]}) is None


def test_managed_resources_present_without_known_kinds():
    assert get_managed_resources({"managedResources": {"cronJob": "x"}}) == {}


# ----------------------------
# Pods / containers
# ----------------------------


class TestContainerState:
    def test_running_wins(self):
        state = {"running": {}, "waiting": {"reason": "X"}, "terminated": {"reason": "Y"}}
        assert classify_container_state(state) == ("Running", "")

    def test_waiting_before_terminated(self):
        state = {"waiting": {"reason": "CrashLoopBackOff"}, "terminated": {"reason": "Error"}}
        assert classify_container_state(state) == ("Waiting", "CrashLoopBackOff")

    def test_terminated(self):
        assert classify_container_state({"terminated": {"reason": "Completed"}}) == (
            "Terminated",
            "Completed",
        )

    def test_unknown(self):
        assert classify_container_state({}) == ("Unknown", "")
        assert classify_container_state(None) == ("Unknown", "")
        assert classify_container_state({"running": None}) == ("Unknown", "")


def test_summarize_pod_sums_restarts():
    pod = make_pod(
        containers=[
            make_container("openclaw", restarts=2),
            make_container(
                "chromium",
                ready=False,
                restarts=3,
                state={"waiting": {"reason": "CrashLoopBackOff"}},
            ),
        ]
    )
    summary = summarize_pod(pod)

    assert summary.name == "my-agent-0"
    assert summary.phase == "Running"
    assert summary.restart_count == 5
    assert [c.name for c in summary.containers] == ["openclaw", "chromium"]
    assert summary.containers[1].ready is False
    assert summary.containers[1].state_display == "Waiting: CrashLoopBackOff"
    assert summary.containers[0].state_display == "Running"


def test_summarize_pod_without_statuses():
    pod = {"metadata": {"name": "p"}, "status": {"phase": "Pending"}}
    summary = summarize_pod(pod)
    assert summary.restart_count == 0
    assert summary.containers == []


# ----------------------------
# Full projection
# ----------------------------


def test_build_instance_view():
    instance = make_instance(
        spec={"image": {"repository": "ghcr.io/acme/claw", "tag": "1.2.3"}},
        status={
            "phase": "Running",
            "gatewayEndpoint": "ws://my-agent.default:18789",
            "canvasEndpoint": "http://my-agent.default:18793",
            "conditions": [{"type": "Ready", "status": "True"}],
            "managedResources": {"deployment": "my-agent", "service": "my-agent"},
        },
    )
    view = build_instance_view(instance, [make_pod()])

    assert view.namespace == "default"
    assert view.name == "my-agent"
    assert view.phase == "Running"
    assert view.image == "ghcr.io/acme/claw:1.2.3"
    assert list(view.endpoints) == ["Gateway (WebSocket)", "Canvas (HTTP)"]
    assert view.managed_resources == {"Deployment": "my-agent", "Service": "my-agent"}
    assert view.primary_pod.name == "my-agent-0"
    assert view.warnings == []


def test_multiple_pods_selects_first_and_warns():
    pods = [make_pod("my-agent-new"), make_pod("my-agent-old")]
    view = build_instance_view(make_instance(), pods)

    assert view.primary_pod.name == "my-agent-new"
    assert len(view.pods) == 2
    assert view.warnings == ["multiple pods found, using my-agent-new"]


def test_view_of_empty_document_does_not_fail():
    view = build_instance_view({})
    assert view.phase == "Pending"
    assert view.name == ""
    assert view.conditions == []
    assert view.primary_pod is None
