import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from kubectl_openclaw.commands import (
    run_doctor_command,
    run_list,
    run_logs,
    run_status,
)
from kubectl_openclaw.context import OUTPUT_FORMATS, build_config
from kubectl_openclaw.kube import KubeClients, OpenClawError

PROG = "kubectl-openclaw"

DESCRIPTION = """\
kubectl-openclaw is a kubectl plugin for managing OpenClaw AI agent instances.

It provides commands for listing, inspecting, debugging, and diagnosing
OpenClawInstance custom resources and their managed child resources.
"""

EPILOG = """\
examples:
  kubectl openclaw list
  kubectl openclaw status my-agent
  kubectl openclaw logs my-agent -f
  kubectl openclaw doctor my-agent
"""


def get_version() -> str:
    try:
        return version(PROG)
    except PackageNotFoundError:
        return "dev"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool = False) -> None:
    # Subcommands repeat the global flags without overriding values
    # given before the subcommand name
    default = argparse.SUPPRESS if suppress else None
    parser.add_argument("--kubeconfig", default=default, help="path to kubeconfig file")
    parser.add_argument(
        "-n",
        "--namespace",
        default=default,
        help="kubernetes namespace (defaults to current context namespace)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="print debug logging to stderr",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=default,
        help="seconds to wait for each API request",
    )


def _add_output_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (text, json, yaml)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_options(parser)

    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_list = sub.add_parser(
        "list", aliases=["ls"], parents=[common], help="List OpenClaw instances"
    )
    p_list.add_argument(
        "-A",
        "--all-namespaces",
        action="store_true",
        help="list instances across all namespaces",
    )
    _add_output_option(p_list)

    p_status = sub.add_parser(
        "status", parents=[common], help="Show detailed status of an OpenClaw instance"
    )
    p_status.add_argument("name", metavar="NAME")
    _add_output_option(p_status)

    p_logs = sub.add_parser(
        "logs", parents=[common], help="Tail logs from an OpenClaw instance"
    )
    p_logs.add_argument("name", metavar="NAME")
    p_logs.add_argument("-f", "--follow", action="store_true", help="follow log output")
    p_logs.add_argument(
        "-c", "--container", help="container name (default: openclaw main container)"
    )
    p_logs.add_argument(
        "--tail",
        type=int,
        default=0,
        help="number of lines from the end of the logs to show",
    )
    p_logs.add_argument(
        "--previous",
        action="store_true",
        help="show logs from previous terminated container",
    )

    p_doctor = sub.add_parser(
        "doctor", parents=[common], help="Run diagnostics on the OpenClaw setup"
    )
    p_doctor.add_argument("name", metavar="NAME", nargs="?")
    _add_output_option(p_doctor)

    sub.add_parser("version", parents=[common], help="Print the plugin version")

    return parser


def dispatch(args: argparse.Namespace, clients: Any) -> int:
    cfg = build_config(args)

    if args.command in ("list", "ls"):
        return run_list(cfg, clients)
    if args.command == "status":
        return run_status(cfg, clients, args.name)
    if args.command == "logs":
        return run_logs(
            cfg,
            clients,
            args.name,
            follow=args.follow,
            container=args.container,
            tail=args.tail,
            previous=args.previous,
        )
    if args.command == "doctor":
        return run_doctor_command(cfg, clients, args.name)
    raise ValueError(f"unknown command {args.command!r}")


def main(argv: list[str] | None = None, clients: Any = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    if args.command == "version":
        print(f"{PROG} {get_version()}")
        return 0

    try:
        if clients is None:
            clients = KubeClients.from_config(args.kubeconfig, args.request_timeout)
        return dispatch(args, clients)
    except OpenClawError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
