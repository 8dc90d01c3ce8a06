import logging
import sys
from collections.abc import Iterable
from datetime import datetime
from typing import Any, TextIO

from urllib3.exceptions import HTTPError

from kubectl_openclaw.context import CliConfig
from kubectl_openclaw.engine import run_doctor
from kubectl_openclaw.kube import KIND, KubeError, OpenClawError, instance_selector
from kubectl_openclaw.model import get_name
from kubectl_openclaw.output import output_list, output_report, output_status
from kubectl_openclaw.snapshot import build_instance_view, multiple_pods_warning

logger = logging.getLogger(__name__)

LOG_CHUNK_SIZE = 64 * 1024
MAX_LINE_BYTES = 1024 * 1024


def warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


# ----------------------------
# list
# ----------------------------


def run_list(cfg: CliConfig, clients: Any, now: datetime | None = None) -> int:
    namespace = None if cfg.all_namespaces else cfg.target_namespace()
    items = clients.list_instances(namespace)
    output_list(items, namespace, fmt=cfg.output, now=now)
    return 0


# ----------------------------
# status
# ----------------------------


def run_status(cfg: CliConfig, clients: Any, name: str, now: datetime | None = None) -> int:
    namespace = cfg.target_namespace()
    instance = clients.get_instance(namespace, name)

    # Pod listing failures degrade the pod section only
    pods_error = None
    try:
        pods = clients.list_pods(namespace, instance_selector(name))
    except KubeError as e:
        pods, pods_error = [], str(e)

    view = build_instance_view(instance, pods)
    for warning in view.warnings:
        warn(warning)

    output_status(view, fmt=cfg.output, now=now, pods_error=pods_error)
    return 0


# ----------------------------
# logs
# ----------------------------


def echo_lines(
    chunks: Iterable[bytes], out: TextIO, max_line: int = MAX_LINE_BYTES
) -> None:
    """
    Write complete lines as they arrive. A line longer than `max_line`
    bytes is written in `max_line` pieces. A trailing partial line is
    written once the stream ends.
    """
    pending = bytearray()
    for chunk in chunks:
        pending += chunk
        start = 0
        while True:
            end = pending.find(b"\n", start, start + max_line + 1)
            if end != -1:
                _write_line(out, pending[start:end])
                start = end + 1
            elif len(pending) - start > max_line:
                _write_line(out, pending[start:start + max_line])
                start += max_line
            else:
                break
        if start:
            del pending[:start]
            out.flush()

    if pending:
        _write_line(out, pending)
        out.flush()


def _write_line(out: TextIO, line: bytes | bytearray) -> None:
    out.write(line.decode("utf-8", errors="replace") + "\n")


def run_logs(
    cfg: CliConfig,
    clients: Any,
    name: str,
    follow: bool = False,
    container: str | None = None,
    tail: int = 0,
    previous: bool = False,
    out: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    namespace = cfg.target_namespace()

    pods = clients.list_pods(namespace, instance_selector(name))
    if not pods:
        raise OpenClawError(
            f'no pods found for {KIND} "{name}" in namespace "{namespace}"'
        )

    pod_name = get_name(pods[0])
    warning = multiple_pods_warning(pods)
    if warning:
        warn(warning)

    stream = clients.stream_pod_logs(
        namespace,
        pod_name,
        container=container,
        follow=follow,
        previous=previous,
        tail_lines=tail if tail > 0 else None,
    )
    try:
        echo_lines(stream.stream(LOG_CHUNK_SIZE), out)
    except HTTPError as e:
        raise KubeError("error reading logs", str(e)) from e
    finally:
        stream.close()
        stream.release_conn()
        logger.debug("log stream from %s/%s released", namespace, pod_name)

    return 0


# ----------------------------
# doctor
# ----------------------------


def run_doctor_command(cfg: CliConfig, clients: Any, name: str | None = None) -> int:
    namespace = cfg.target_namespace()
    report = run_doctor(clients, namespace, instance_name=name)

    # Full report first, failure afterwards
    output_report(report, fmt=cfg.output)
    if not report.ok:
        raise OpenClawError(f"{report.failed} check(s) failed")
    return 0
