"""
Command-line interface for the trace verification harness.

Provides commands for:
- Waiting for the backend to go quiet and summarizing what it received
- Clearing the backend between manual runs
- Inspecting a saved payload offline
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import requests

from .config import HarnessConfig, load_config
from .decoding.export_decoder import DecodeReport, decode_report
from .errors import DecodeError, ResetFailure
from .harness.backend import BackendClient
from .harness.environment import HarnessEnvironment
from .inspection.trace_graph import TraceGraph

# Cap on span names and trace ids printed in a summary
_MAX_ITEMS_IN_SUMMARY = 10


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tracecheck",
        description="Wait for, decode and inspect traces collected by a fake OTLP backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Wait until the backend stops receiving exports and summarize them
  tracecheck wait --backend-url http://localhost:8080

  # Save the stable payload for later inspection
  tracecheck wait --output traces.json

  # Clear the backend
  tracecheck reset

  # List service.name of every exported resource
  tracecheck inspect traces.json --resource-attribute service.name
        """,
    )
    parser.add_argument(
        "--backend-url",
        type=str,
        default=None,
        help="Fake backend base URL (default: from config, else http://localhost:8080)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: TRACECHECK_CONFIG)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log poll progress",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    wait_parser = subparsers.add_parser("wait", help="Poll the backend until exports stop arriving")
    wait_parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Seconds to keep polling (default: from config, else 30)",
    )
    wait_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between polls (default: from config, else 0.5)",
    )
    wait_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the raw stable payload to this file",
    )

    subparsers.add_parser("reset", help="Clear everything the backend has received")

    inspect_parser = subparsers.add_parser("inspect", help="Decode and summarize a saved payload")
    inspect_parser.add_argument(
        "file", type=str, help="Payload file (JSON array of export requests)"
    )
    inspect_parser.add_argument(
        "--resource-attribute",
        type=str,
        default=None,
        metavar="KEY",
        help="Print the value of this resource attribute for every resource that has it",
    )

    return parser


def _resolve_config(args: argparse.Namespace) -> HarnessConfig:
    """Build the config from file, env and flags; exit 1 on invalid values."""
    try:
        config = load_config(args.config)
        if args.backend_url:
            config = replace(config, backend_url=args.backend_url)
        if getattr(args, "deadline", None) is not None:
            config = replace(config, poll_deadline=args.deadline)
        if getattr(args, "interval", None) is not None:
            config = replace(config, poll_interval=args.interval)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)
    return config


def _print_summary(report: DecodeReport) -> None:
    graph = TraceGraph(report.records)
    trace_ids = sorted(graph.trace_ids())
    names = graph.span_names()

    print(f"Export requests: {len(report.records)}")
    print(f"Spans: {len(names)}")
    print(f"Traces: {len(trace_ids)}")
    if trace_ids:
        for trace_id in trace_ids[:_MAX_ITEMS_IN_SUMMARY]:
            print(f"   {trace_id}")
        if len(trace_ids) > _MAX_ITEMS_IN_SUMMARY:
            print(f"   ..+{len(trace_ids) - _MAX_ITEMS_IN_SUMMARY}")
    if names:
        distinct = sorted(set(names))
        shown = ",".join(distinct[:_MAX_ITEMS_IN_SUMMARY])
        if len(distinct) > _MAX_ITEMS_IN_SUMMARY:
            shown += f",..+{len(distinct) - _MAX_ITEMS_IN_SUMMARY}"
        print(f"Span names: {shown}")
    if report.failures:
        print(f"Undecodable export requests ({len(report.failures)}):")
        for failure in report.failures:
            print(f"  - {failure}")


def cmd_wait(args: argparse.Namespace):
    """Poll the backend until stable and print a summary."""
    config = _resolve_config(args)
    print(f"Waiting for exports at {config.backend_url}")
    print(f"   Deadline: {config.poll_deadline}s, interval: {config.poll_interval}s")
    print()

    try:
        with HarnessEnvironment.from_config(config) as env:
            content = env.wait_for_content()
        if args.output:
            Path(args.output).write_bytes(content)
            print(f"Payload written to {args.output} ({len(content)} bytes)")
        _print_summary(decode_report(content))
    except KeyboardInterrupt:
        print("\nWait interrupted")
        sys.exit(0)
    except (DecodeError, requests.RequestException) as e:
        print(f"\nError: {e}")
        sys.exit(1)


def cmd_reset(args: argparse.Namespace):
    """Clear the backend store."""
    config = _resolve_config(args)
    client = BackendClient(config.backend_url, timeout=config.request_timeout)
    try:
        client.clear_requests()
    except (ResetFailure, requests.RequestException) as e:
        print(f"Reset failed: {e}")
        sys.exit(1)
    finally:
        client.close()
    print(f"Backend at {config.backend_url} cleared")


def cmd_inspect(args: argparse.Namespace):
    """Decode a saved payload and print a summary or one resource attribute."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Payload file not found: {path}")
        sys.exit(1)

    try:
        report = decode_report(path.read_bytes())
    except DecodeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.resource_attribute:
        graph = TraceGraph(report.records)
        values = graph.find_resource_attributes(args.resource_attribute).to_list()
        if not values:
            print(f"No resource carries {args.resource_attribute}")
            return
        for value in values:
            print(value)
        return

    _print_summary(report)


def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "wait":
        cmd_wait(args)
    elif args.command == "reset":
        cmd_reset(args)
    elif args.command == "inspect":
        cmd_inspect(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
