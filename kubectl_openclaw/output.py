import json
from dataclasses import asdict
from datetime import datetime
from typing import Any

import yaml

from kubectl_openclaw.kube import KIND
from kubectl_openclaw.model import get_name, get_namespace, nested_map, nested_string
from kubectl_openclaw.report import DoctorReport
from kubectl_openclaw.snapshot import (
    InstanceView,
    condition_status,
    phase_with_indicator,
    resolve_phase,
)
from kubectl_openclaw.timeline import format_age

# ----------------------------
# Helpers
# ----------------------------


def format_table(rows: list[list[str]], padding: int = 2) -> list[str]:
    """
    Align cells into columns. Every column except the last is padded to
    its widest cell plus `padding` spaces.
    """
    if not rows:
        return []

    columns = max(len(r) for r in rows)
    widths = [0] * columns
    for row in rows:
        for i, cell in enumerate(row[:-1]):
            widths[i] = max(widths[i], len(cell))

    lines = []
    for row in rows:
        cells = [cell.ljust(widths[i] + padding) for i, cell in enumerate(row[:-1])]
        cells.append(row[-1])
        lines.append("".join(cells).rstrip())
    return lines


def dump_structured(data: Any, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(data, indent=2))
    elif fmt == "yaml":
        print(yaml.safe_dump(data, sort_keys=False), end="")
    else:
        raise ValueError(f"unsupported structured format {fmt!r}")


# ----------------------------
# list
# ----------------------------


def instance_row(item: dict[str, Any], now: datetime | None = None) -> dict[str, str]:
    status = nested_map(item, "status")
    return {
        "namespace": get_namespace(item),
        "name": get_name(item),
        "phase": resolve_phase(item),
        "ready": condition_status(status, "Ready"),
        "gateway": nested_string(status, "gatewayEndpoint"),
        "age": format_age(nested_string(item, "metadata", "creationTimestamp"), now=now),
    }


def output_list(
    items: list[dict[str, Any]],
    namespace: str | None,
    fmt: str = "text",
    now: datetime | None = None,
) -> None:
    """
    Print OpenClawInstances as a table. namespace=None means the listing
    spans all namespaces and adds a NAMESPACE column.
    """
    rows = [instance_row(item, now=now) for item in items]
    all_namespaces = namespace is None

    if fmt != "text":
        dump_structured(rows, fmt)
        return

    if not rows:
        if all_namespaces:
            print("No OpenClaw instances found in any namespace.")
        else:
            print(f'No OpenClaw instances found in namespace "{namespace}".')
        return

    header = ["NAME", "PHASE", "READY", "GATEWAY", "AGE"]
    table = []
    for r in rows:
        table.append([r["name"], r["phase"], r["ready"], r["gateway"], r["age"]])
    if all_namespaces:
        header.insert(0, "NAMESPACE")
        table = [[r["namespace"]] + line for r, line in zip(rows, table)]

    for line in format_table([header] + table):
        print(line)


# ----------------------------
# status
# ----------------------------


def view_to_dict(view: InstanceView, now: datetime | None = None) -> dict[str, Any]:
    data = asdict(view)
    data["age"] = view.age(now=now)
    data["primaryPod"] = view.primary_pod.name if view.primary_pod else None
    return data


def output_status(
    view: InstanceView,
    fmt: str = "text",
    now: datetime | None = None,
    pods_error: str | None = None,
) -> None:
    if fmt != "text":
        data = view_to_dict(view, now=now)
        if pods_error:
            data["podsError"] = pods_error
        dump_structured(data, fmt)
        return

    # Header
    print(f"{KIND}: {view.namespace}/{view.name}")
    print(f"Phase:           {phase_with_indicator(view.phase)}")
    print(f"Age:             {view.age(now=now)}")
    print()

    print(f"Image:    {view.image}")
    print()

    if view.endpoints:
        width = max(len(label) for label in view.endpoints) + 2
        print("Endpoints:")
        for label, url in view.endpoints.items():
            print(f"  {(label + ':').ljust(width)}{url}")
        print()

    if view.conditions:
        print("Conditions:")
        rows = [["  TYPE", "STATUS", "REASON", "MESSAGE"]]
        for c in view.conditions:
            rows.append([f"  {c.indicator} {c.type}", c.status, c.reason, c.message])
        for line in format_table(rows):
            print(line)
        print()

    if view.managed_resources is not None:
        print("Managed Resources:")
        for label, name in view.managed_resources.items():
            print(f"  {(label + ':'):<16} {name}")
        print()

    output_pods(view, now=now, pods_error=pods_error)


def output_pods(
    view: InstanceView,
    now: datetime | None = None,
    pods_error: str | None = None,
) -> None:
    if pods_error:
        print(f"Pod Status: {pods_error}")
        return

    if not view.pods:
        print("Pods: none found")
        return

    print("Pods:")
    rows = [["  NAME", "STATUS", "RESTARTS", "AGE"]]
    for p in view.pods:
        rows.append([f"  {p.name}", p.phase, str(p.restart_count), format_age(p.created, now=now)])
    for line in format_table(rows):
        print(line)
    print()

    # Container details for the primary pod only
    pod = view.primary_pod
    if pod and pod.containers:
        print("Containers:")
        rows = [["  NAME", "READY", "STATE", "RESTARTS"]]
        for c in pod.containers:
            rows.append(
                [f"  {c.name}", "true" if c.ready else "false", c.state_display, str(c.restart_count)]
            )
        for line in format_table(rows):
            print(line)


# ----------------------------
# doctor
# ----------------------------


def output_report(report: DoctorReport, fmt: str = "text") -> None:
    if fmt != "text":
        dump_structured(report.to_dict(), fmt)
        return

    for r in report.results:
        marker = "PASS" if r.passed else "FAIL"
        print(f"  [{marker}]  {r.name}")
        if r.message:
            print(f"          {r.message}")

    print()
    print(f"Results: {report.passed} passed, {report.failed} failed")
