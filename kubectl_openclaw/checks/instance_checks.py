from kubectl_openclaw.checks.base_check import DiagnosticCheck, DoctorContext
from kubectl_openclaw.kube import KubeError, instance_selector
from kubectl_openclaw.model import nested_map
from kubectl_openclaw.report import CheckResult
from kubectl_openclaw.snapshot import (
    PodSummary,
    get_conditions,
    resolve_phase,
    summarize_pod,
)

RESTART_THRESHOLD = 5


class InstanceExistsCheck(DiagnosticCheck):
    name = "InstanceExists"
    tier = "instance"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        title = f'Instance "{ctx.instance_name}" exists'
        try:
            ctx.clients.get_instance(ctx.namespace, ctx.instance_name)
        except KubeError as e:
            return [CheckResult(name=title, passed=False, message=e.detail)]
        return [CheckResult(name=title, passed=True)]


class InstancePhaseCheck(DiagnosticCheck):
    name = "InstancePhase"
    tier = "instance"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        title = f'Instance "{ctx.instance_name}" phase is Running'
        try:
            instance = ctx.clients.get_instance(ctx.namespace, ctx.instance_name)
        except KubeError as e:
            return [CheckResult(name=title, passed=False, message=e.detail)]

        phase = resolve_phase(instance)
        if phase == "Running":
            return [CheckResult(name=title, passed=True)]
        return [CheckResult(name=title, passed=False, message=f"Current phase: {phase}")]


def pod_health_problem(pod: PodSummary) -> str | None:
    """
    Return the first problem found with the pod, or None if healthy.
    """
    if pod.phase != "Running":
        return f"Pod {pod.name} is in phase {pod.phase}"

    for c in pod.containers:
        if not c.ready:
            return f"Container {c.name} is not ready"
        if c.restart_count > RESTART_THRESHOLD:
            return (
                f"Container {c.name} has {c.restart_count} restarts "
                "(possible crash loop)"
            )
    return None


class PodHealthCheck(DiagnosticCheck):
    name = "PodHealth"
    tier = "instance"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        name = ctx.instance_name
        title = f'Pod for "{name}" is healthy'
        try:
            pods = ctx.clients.list_pods(ctx.namespace, instance_selector(name))
        except KubeError as e:
            return [CheckResult(name=title, passed=False, message=e.detail)]

        if not pods:
            return [
                CheckResult(
                    name=title,
                    passed=False,
                    message=f"No pods found. Check events: kubectl describe openclawinstance {name}",
                )
            ]

        problem = pod_health_problem(summarize_pod(pods[0]))
        if problem:
            return [CheckResult(name=title, passed=False, message=problem)]
        return [CheckResult(name=title, passed=True)]


class ConditionsCheck(DiagnosticCheck):
    """
    One result per status condition. Passes only for status "True".
    """

    name = "Conditions"
    tier = "instance"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        try:
            instance = ctx.clients.get_instance(ctx.namespace, ctx.instance_name)
        except KubeError:
            # already reported by InstanceExistsCheck
            return []

        results = []
        for cond in get_conditions(nested_map(instance, "status")):
            passed = cond.status == "True"
            results.append(
                CheckResult(
                    name=f"Condition {cond.type}",
                    passed=passed,
                    message="" if passed else cond.message,
                )
            )
        return results
