import logging

from kubectl_openclaw.checks.base_check import DiagnosticCheck, DoctorContext
from kubectl_openclaw.kube import (
    KIND,
    OPERATOR_NAMESPACES,
    OPERATOR_SELECTOR,
    KubeError,
)
from kubectl_openclaw.model import get_name, nested_string
from kubectl_openclaw.report import CheckResult

logger = logging.getLogger(__name__)

OPERATOR_INSTALL_HINT = (
    "helm install openclaw-operator "
    "oci://ghcr.io/openclaw-rocks/charts/openclaw-operator"
)


class CRDInstalledCheck(DiagnosticCheck):
    name = "CRDInstalled"
    tier = "cluster"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        title = f"{KIND} CRD installed"
        try:
            ctx.clients.list_instances(None, limit=1)
        except KubeError as e:
            return [
                CheckResult(
                    name=title,
                    passed=False,
                    message=f"CRD not found: {e.detail}. Install with: {OPERATOR_INSTALL_HINT}",
                )
            ]
        return [CheckResult(name=title, passed=True)]


class OperatorRunningCheck(DiagnosticCheck):
    name = "OperatorRunning"
    tier = "cluster"

    namespaces = OPERATOR_NAMESPACES

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        title = "OpenClaw operator running"

        for namespace in self.namespaces:
            try:
                pods = ctx.clients.list_pods(namespace, OPERATOR_SELECTOR)
            except KubeError as e:
                logger.debug("skipping operator namespace %s: %s", namespace, e)
                continue

            for pod in pods:
                if nested_string(pod, "status", "phase") == "Running":
                    return [
                        CheckResult(
                            name=title,
                            passed=True,
                            message=f"Found in {namespace}/{get_name(pod)}",
                        )
                    ]

        searched = " or ".join(self.namespaces)
        return [
            CheckResult(
                name=title,
                passed=False,
                message=f"No running operator pod found in {searched}",
            )
        ]
