#!/usr/bin/env python3
"""Entry point for the brick CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path
from textwrap import dedent
from typing import Any

from brickctl import __version__
from brickctl.app.install import AddBrickService, ConsoleProgressReporter
from brickctl.app.workspace import Scope, WorkspaceContext
from brickctl.domain.brick import BrickNotFoundError, BrickParseError
from brickctl.domain.location import (
    ANY_VERSION,
    Brick,
    GitLocation,
    PathLocation,
    VersionLocation,
    describe_location,
)
from brickctl.domain.manifest import (
    MANIFEST_FILE,
    BricksManifest,
    ManifestNotFoundError,
    ManifestParseError,
    write_manifest,
)
from brickctl.ports.brick_cache import BrickFetchError, BrickResolutionError
from brickctl.settings import SETTINGS
from brickctl.utils.telemetry import clear as telemetry_clear
from brickctl.utils.telemetry import iter_events as telemetry_iter
from brickctl.utils.telemetry import record_structured_event, summarize as telemetry_summarize

EXIT_USAGE = 2

HELP_OVERVIEW = dedent(
    """
    Quick start:
      - brick init                       - create bricks.yaml in the current directory
      - brick add greeting               - add a brick from the registry (any version)
      - brick add widget --path ../widget
      - brick add api --git-url https://example.com/bricks.git --git-path api

    Bricks added with --global are registered for the current user instead of the project.
    """
)

_COMMAND_ERRORS = (
    ManifestNotFoundError,
    ManifestParseError,
    BrickNotFoundError,
    BrickParseError,
    BrickFetchError,
    BrickResolutionError,
    OSError,
    ValueError,
)


class UsageError(ValueError):
    """Raised for malformed command-line invocations."""


def _workspace() -> WorkspaceContext:
    return WorkspaceContext(SETTINGS, Path(os.getcwd()))


def _scope(args: argparse.Namespace) -> Scope:
    return Scope.USER if getattr(args, "global_scope", False) else Scope.PROJECT


def _build_brick_request(args: argparse.Namespace) -> Brick:
    name = args.name
    version = getattr(args, "version", None)
    path = getattr(args, "source_path", None)
    git_url = getattr(args, "git_url", None)
    git_ref = getattr(args, "git_ref", None)
    git_path = getattr(args, "git_path", None)

    if path and git_url:
        raise UsageError("--path and --git-url are mutually exclusive")
    if (git_ref or git_path) and not git_url:
        raise UsageError("--git-ref and --git-path require --git-url")
    if version is not None and (path or git_url):
        raise UsageError("a version cannot be combined with --path or --git-url")

    if path:
        return Brick(name=name, location=PathLocation(path))
    if git_url:
        return Brick(name=name, location=GitLocation(url=git_url, ref=git_ref, path=git_path))
    try:
        return Brick(name=name, location=VersionLocation(version or ANY_VERSION))
    except ValueError as exc:
        raise UsageError(str(exc)) from exc


def _emit_event(event: str, status: str, start: float, payload: dict[str, Any], *, error: str | None = None) -> None:
    if error is not None:
        payload = payload | {"error": error}
    record_structured_event(
        SETTINGS,
        event,
        status=status,
        level="error" if status == "error" else "info",
        component="cli",
        duration_ms=(time.perf_counter() - start) * 1000,
        payload=payload,
    )


def _init_cmd(args: argparse.Namespace) -> int:
    target = Path(os.getcwd()) / MANIFEST_FILE
    if target.exists():
        print(f"{MANIFEST_FILE} already exists at {target}", file=sys.stderr)
        return 1
    write_manifest(target, BricksManifest())
    record_structured_event(SETTINGS, "init", status="success", component="cli", payload={"path": str(target)})
    print(f"Created {target}")
    return 0


def _add_cmd(args: argparse.Namespace) -> int:
    try:
        brick = _build_brick_request(args)
    except UsageError as exc:
        print(f"add: {exc}", file=sys.stderr)
        return EXIT_USAGE

    scope = _scope(args)
    event_context = {
        "name": brick.name,
        "scope": scope.value,
        "source": describe_location(brick.location),
    }
    record_structured_event(SETTINGS, "add", status="start", component="cli", payload=event_context)
    start = time.perf_counter()

    service = AddBrickService(_workspace(), progress=ConsoleProgressReporter(SETTINGS))
    try:
        result = service.add(brick, scope)
    except _COMMAND_ERRORS as exc:
        _emit_event("add", "error", start, event_context, error=str(exc))
        print(f"add failed: {exc}", file=sys.stderr)
        return 1

    _emit_event("add", "success", start, event_context | {"written": result.written})
    if getattr(args, "json", False):
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif result.written:
        print(f"Added {result.name} {result.version} to {result.manifest_file}")
        for dep_name in result.dependencies:
            print(f"  + {dep_name}")
    else:
        print(f"{result.name} is already registered in {result.manifest_file}")
    return 0


def _list_cmd(args: argparse.Namespace) -> int:
    workspace = _workspace()
    try:
        if getattr(args, "global_scope", False):
            bricks = workspace.registered_bricks(Scope.USER)
        else:
            bricks = workspace.all_registered_bricks()
    except _COMMAND_ERRORS as exc:
        print(f"list failed: {exc}", file=sys.stderr)
        return 1

    if args.json:
        payload = [
            {**brick.to_dict(), "path": str(brick.directory) if brick.directory else None}
            for brick in bricks
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    elif not bricks:
        print("No bricks installed")
    else:
        for brick in bricks:
            suffix = f" :: {brick.description}" if brick.description else ""
            print(f"- {brick.name} {brick.version}{suffix}")
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        summary = telemetry_summarize(telemetry_iter(SETTINGS))
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return 0
    if telemetry_clear(SETTINGS):
        print("Telemetry log removed")
    else:
        print("No telemetry log found")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brick",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"brick {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    init_cmd = sub.add_parser("init", help=f"Create an empty {MANIFEST_FILE} in the current directory")
    init_cmd.set_defaults(func=_init_cmd)

    add_cmd = sub.add_parser("add", help="Add a brick from the registry, a local path or a git repository")
    add_cmd.add_argument("name", help="Brick name")
    add_cmd.add_argument("version", nargs="?", default=None, help="Version constraint (default: any)")
    add_cmd.add_argument("--path", dest="source_path", help="Local path of the brick")
    add_cmd.add_argument("--git-url", dest="git_url", help="Git URL of the brick")
    add_cmd.add_argument("--git-ref", dest="git_ref", help="Git branch or commit to be used")
    add_cmd.add_argument("--git-path", dest="git_path", help="Path of the brick in the git repository")
    add_cmd.add_argument("-g", "--global", dest="global_scope", action="store_true", help="Add the brick globally")
    add_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON result")
    add_cmd.set_defaults(func=_add_cmd)

    list_cmd = sub.add_parser("list", help="List installed bricks")
    list_cmd.add_argument("-g", "--global", dest="global_scope", action="store_true", help="Only list global bricks")
    list_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    list_cmd.set_defaults(func=_list_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.set_defaults(func=_telemetry_cmd)
    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
