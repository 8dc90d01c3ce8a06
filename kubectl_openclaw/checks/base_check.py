from dataclasses import dataclass
from typing import Any, Literal

from kubectl_openclaw.report import CheckResult


@dataclass(frozen=True)
class DoctorContext:
    """
    Shared query context handed to every check.
    """

    clients: Any
    namespace: str
    instance_name: str | None = None


class DiagnosticCheck:
    """
    Base class for all doctor checks.
    """

    # ---- Metadata (mandatory) ----
    name: str = "BaseCheck"
    tier: Literal["cluster", "instance"] = "cluster"

    def run(self, ctx: DoctorContext) -> list[CheckResult]:
        """
        Must return one or more CheckResult. API failures are reported as
        failed results, never raised.
        """
        raise NotImplementedError
