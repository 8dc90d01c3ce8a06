import logging
from typing import Any

from kubectl_openclaw.checks.base_check import DiagnosticCheck, DoctorContext
from kubectl_openclaw.checks.cluster_checks import (
    CRDInstalledCheck,
    OperatorRunningCheck,
)
from kubectl_openclaw.checks.instance_checks import (
    ConditionsCheck,
    InstanceExistsCheck,
    InstancePhaseCheck,
    PodHealthCheck,
)
from kubectl_openclaw.report import CheckResult, DoctorReport

logger = logging.getLogger(__name__)

ALLOWED_TIERS = {"cluster", "instance"}


def get_default_checks() -> list[DiagnosticCheck]:
    # Order is part of the report contract: installation first,
    # then the specific instance from coarse to fine
    return [
        CRDInstalledCheck(),
        OperatorRunningCheck(),
        InstanceExistsCheck(),
        InstancePhaseCheck(),
        PodHealthCheck(),
        ConditionsCheck(),
    ]


def validate_check(check: DiagnosticCheck) -> None:
    if not isinstance(check.name, str) or not check.name:
        raise ValueError(f"Check {check!r} must have a non-empty name")
    if check.tier not in ALLOWED_TIERS:
        raise ValueError(f"Check {check.name}.tier must be one of {sorted(ALLOWED_TIERS)}")


# ----------------------------
# Diagnostic engine
# ----------------------------


def run_doctor(
    clients: Any,
    namespace: str,
    instance_name: str | None = None,
    checks: list[DiagnosticCheck] | None = None,
) -> DoctorReport:
    """
    Run every check in order and collect the results.

    - No check result decides whether a later check runs
    - Instance-tier checks only run when an instance name is given
    - Report order is check order, then result order within a check
    """
    ctx = DoctorContext(clients=clients, namespace=namespace, instance_name=instance_name)
    checks = checks if checks is not None else get_default_checks()
    report = DoctorReport()

    for check in checks:
        validate_check(check)

        if check.tier == "instance" and not instance_name:
            logger.debug("skipping %s (no instance name)", check.name)
            continue

        try:
            results = check.run(ctx)
        except Exception as e:
            # Checks convert orchestrator errors themselves; anything else
            # fails this check and the battery carries on.
            logger.debug("check %s raised", check.name, exc_info=True)
            results = [
                CheckResult(
                    name=check.name,
                    passed=False,
                    message=f"check failed unexpectedly: {type(e).__name__}: {e}",
                )
            ]

        # ---- run() contract enforcement ----
        if not isinstance(results, list):
            raise TypeError(f"{check.name}.run() must return a list")
        for r in results:
            if not isinstance(r, CheckResult):
                raise TypeError(f"{check.name}.run() must return CheckResult items")

        logger.debug(
            "check %s: %d passed, %d failed",
            check.name,
            sum(1 for r in results if r.passed),
            sum(1 for r in results if not r.passed),
        )
        report.extend(results)

    return report
