"""Command-line interface for resume-match.

Provides subcommands for simulating a full workflow, listing the result
catalog, and showing the active configuration.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    resume-match = "resume_match.cli:main"

Usage examples::

    resume-match run --file resume.pdf:245760:application/pdf --message "match me"
    resume-match run --realtime --trace
    resume-match run --events run.jsonl --format json
    resume-match catalog --format json
    resume-match info --config workflow.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from resume_match.domain.events import StageChanged, WorkflowReset
from resume_match.domain.values import FileDescriptor

_DEFAULT_FILE = "resume.pdf:245760:application/pdf"
_DEFAULT_MESSAGE = "match me"


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="resume-match",
        description=(
            "resume-match -- simulate the resume upload, job reveal and "
            "assistant chat workflow."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show version and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- run ---------------------------------------------------------------
    run_parser = subparsers.add_parser(
        "run",
        help="Simulate one workflow end to end.",
        description=(
            "Submit file descriptors, wait for the uploads and the job reveal, "
            "then send chat messages and print the final state."
        ),
    )
    run_parser.add_argument(
        "--file",
        dest="files",
        action="append",
        default=None,
        help=(
            "File descriptor as NAME:SIZE:MEDIA_TYPE.  Repeatable. "
            f"(default: {_DEFAULT_FILE})"
        ),
    )
    run_parser.add_argument(
        "--message",
        dest="messages",
        action="append",
        default=None,
        help=f"Chat message to send once conversing.  Repeatable. (default: {_DEFAULT_MESSAGE!r})",
    )
    run_parser.add_argument(
        "--realtime",
        action="store_true",
        default=False,
        help="Run on an asyncio loop in real time instead of a virtual clock.",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        default=False,
        help="Print stage transitions as they happen.",
    )
    run_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON or YAML file with a 'workflow' section.",
    )
    run_parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="JSON file with an array of result records.",
    )
    run_parser.add_argument(
        "--events",
        type=str,
        default=None,
        metavar="PATH",
        help="Write every domain event of the run to PATH as JSON Lines.",
    )
    run_parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "json", "yaml"],
        help="Output format for the final state. (default: table)",
    )

    # -- catalog -----------------------------------------------------------
    catalog_parser = subparsers.add_parser(
        "catalog",
        help="List the result records that would be revealed.",
    )
    catalog_parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="JSON file with an array of result records.",
    )
    catalog_parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "json"],
        help="Display format. (default: table)",
    )

    # -- info --------------------------------------------------------------
    info_parser = subparsers.add_parser(
        "info",
        help="Show version and the effective workflow configuration.",
    )
    info_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON or YAML file with a 'workflow' section.",
    )

    return parser


# =========================================================================
# Helpers
# =========================================================================

def parse_file_spec(text: str) -> FileDescriptor:
    """Parse ``NAME:SIZE:MEDIA_TYPE`` into a descriptor."""
    parts = text.rsplit(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise ValueError(f"Expected NAME:SIZE:MEDIA_TYPE, got {text!r}")
    name, size, media_type = parts
    try:
        size_bytes = int(size)
    except ValueError:
        raise ValueError(f"Invalid size {size!r} in {text!r}") from None
    return FileDescriptor(name=name, size=size_bytes, media_type=media_type)


def _load_workflow_config(path: str | None) -> Any:
    from resume_match.infrastructure.config import (
        WorkflowConfig,
        load_config_from_json,
        load_config_from_yaml,
    )

    if path is None:
        return WorkflowConfig()
    text = Path(path).read_text(encoding="utf-8")
    if path.endswith((".yaml", ".yml")):
        sections = load_config_from_yaml(text)
    else:
        sections = load_config_from_json(text)
    return sections.get("workflow", WorkflowConfig())


def _load_source(path: str | None) -> Any:
    from resume_match.infrastructure.catalog import StaticResultSource
    from resume_match.infrastructure.serialization import load_records_json

    if path is None:
        return StaticResultSource()
    text = Path(path).read_text(encoding="utf-8")
    return StaticResultSource(load_records_json(text))


def _emit_snapshot(snapshot: Any, fmt: str) -> None:
    from resume_match.infrastructure.serialization import to_json, to_yaml
    from resume_match.presentation.console import WorkflowDashboard

    if fmt == "json":
        print(to_json(snapshot))
    elif fmt == "yaml":
        print(to_yaml(snapshot), end="")
    else:
        WorkflowDashboard().print_snapshot(snapshot)


# =========================================================================
# Subcommand handlers
# =========================================================================

def _cmd_run(args: argparse.Namespace) -> int:
    """Handle the ``run`` subcommand."""
    from resume_match.infrastructure.event_bus import EventBus, EventStore

    descriptors = [parse_file_spec(s) for s in (args.files or [_DEFAULT_FILE])]
    messages = args.messages if args.messages is not None else [_DEFAULT_MESSAGE]
    config = _load_workflow_config(args.config)
    source = _load_source(args.catalog)

    bus = EventBus()
    store = EventStore()
    bus.subscribe_all(store.append)
    if args.trace:
        def _trace(event: Any) -> None:
            if isinstance(event, StageChanged):
                print(f"[stage] {event.previous_stage.value} -> {event.new_stage.value}")
            elif isinstance(event, WorkflowReset):
                print(f"[reset] from {event.previous_stage.value}")
        bus.subscribe_all(_trace)

    if args.realtime:
        import asyncio

        snapshot = asyncio.run(_run_realtime(descriptors, messages, config, source, bus))
    else:
        snapshot = _run_virtual(descriptors, messages, config, source, bus)

    if args.events:
        from resume_match.infrastructure.serialization import events_to_jsonl

        Path(args.events).write_text(events_to_jsonl(store), encoding="utf-8")

    if snapshot is None:
        print("Error: none of the files has a supported media type.", file=sys.stderr)
        return 1
    _emit_snapshot(snapshot, args.format)
    return 0


def _run_virtual(
    descriptors: list[FileDescriptor],
    messages: list[str],
    config: Any,
    source: Any,
    bus: Any,
) -> Any:
    from resume_match.infrastructure.scheduling import VirtualScheduler
    from resume_match.services.orchestrator import WorkflowOrchestrator

    clock = VirtualScheduler()
    workflow = WorkflowOrchestrator(clock, source, config=config, event_bus=bus)
    if not workflow.add_files(descriptors):
        return None
    clock.run_until_idle()
    for text in messages:
        workflow.submit_message(text)
        clock.run_until_idle()
    return workflow.snapshot()


async def _run_realtime(
    descriptors: list[FileDescriptor],
    messages: list[str],
    config: Any,
    source: Any,
    bus: Any,
) -> Any:
    from resume_match.infrastructure.scheduling import AsyncioScheduler
    from resume_match.services.orchestrator import WorkflowOrchestrator

    scheduler = AsyncioScheduler()
    workflow = WorkflowOrchestrator(scheduler, source, config=config, event_bus=bus)
    if not workflow.add_files(descriptors):
        return None
    await scheduler.wait_until_idle()
    for text in messages:
        workflow.submit_message(text)
        await scheduler.wait_until_idle()
    return workflow.snapshot()


def _cmd_catalog(args: argparse.Namespace) -> int:
    """Handle the ``catalog`` subcommand."""
    from resume_match.infrastructure.serialization import record_to_dict
    from resume_match.presentation.console import WorkflowDashboard

    records = _load_source(args.catalog).records()
    if args.format == "json":
        print(json.dumps([record_to_dict(r) for r in records], indent=2))
    else:
        WorkflowDashboard().print_records(records)
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from resume_match import __version__

    config = _load_workflow_config(args.config)
    print(f"resume-match v{__version__}")
    print()
    print("Workflow configuration:")
    for key, value in config.to_dict().items():
        if key == "accepted_media_types":
            continue
        print(f"  {key}: {value}")
    print()
    print("Accepted media types:")
    for media_type in config.accepted_media_types:
        print(f"  - {media_type}")
    return 0


# =========================================================================
# Main entry point
# =========================================================================

def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        from resume_match import __version__
        print(f"resume-match {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    handlers: dict[str, Any] = {
        "run": _cmd_run,
        "catalog": _cmd_catalog,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)
