from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of one diagnostic check.
    """

    name: str
    passed: bool
    message: str = ""


@dataclass
class DoctorReport:
    """
    Ordered, append-only sequence of check results.
    """

    results: list[CheckResult] = field(default_factory=list)

    def extend(self, results: list[CheckResult]) -> None:
        self.results.extend(results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [asdict(r) for r in self.results],
            "passed": self.passed,
            "failed": self.failed,
        }
