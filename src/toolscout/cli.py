"""Command-line interface for inspecting tool and runtime resolution.

Results go to stdout; logs and errors go to stderr.

Examples:
    toolscout find
    toolscout list
    toolscout runtime --no-download
    toolscout env /usr/local/bin/claude
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .errors import ToolscoutError, format_error_with_suggestion
from .host import HostContext
from .locator import ToolLocator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolscout",
        description="Locate the Claude CLI and the Node.js runtime it needs",
    )
    parser.add_argument("--config", type=Path, help="Path to toolscout.toml")
    parser.add_argument("--app-data-dir", type=Path, help="Application data directory")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("find", help="Print the path of the tool to launch")
    sub.add_parser("list", help="List every installation found, best first")

    runtime = sub.add_parser("runtime", help="Resolve the Node.js runtime")
    runtime.add_argument("--no-download", action="store_true", help="Never download a runtime")

    env = sub.add_parser("env", help="Print the launch environment for a program")
    env.add_argument("program", nargs="?", help="Program to launch (defaults to the resolved tool)")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _cmd_find(locator: ToolLocator) -> int:
    print(locator.find_tool_binary())
    return 0


def _cmd_list(locator: ToolLocator) -> int:
    installations = locator.discover_installations()
    if not installations:
        print("No installations found", file=sys.stderr)
        return 1
    for installation in installations:
        version = installation.version or "unknown"
        print(f"{installation.path}\t{version}\t{installation.source}")
    return 0


def _cmd_runtime(locator: ToolLocator, no_download: bool) -> int:
    allow_download = locator.config.runtime.auto_download and not no_download
    runtime = locator.resolver.blocking().ensure_runtime(allow_download=allow_download)
    version = runtime.version or "unknown"
    print(f"{runtime.path}\t{version}\t{runtime.source.value}")
    return 0


def _cmd_env(locator: ToolLocator, program: Optional[str]) -> int:
    launch = locator.launch_environment(program)
    for key in sorted(launch.env):
        print(f"{key}={launch.env[key]}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``toolscout`` console script."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = load_config(config_path=args.config)
    if args.app_data_dir:
        config.paths.app_data_dir = args.app_data_dir
    host = HostContext.from_process(app_data_dir=config.paths.app_data_dir)
    locator = ToolLocator(config=config, host=host)

    try:
        if args.command == "find":
            return _cmd_find(locator)
        if args.command == "list":
            return _cmd_list(locator)
        if args.command == "runtime":
            return _cmd_runtime(locator, args.no_download)
        return _cmd_env(locator, args.program)
    except ToolscoutError as e:
        print(f"❌ {format_error_with_suggestion(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
