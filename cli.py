#!/usr/bin/env python3
"""
Agent Readiness - Command Line Interface

Commands:
- report:   score a repository and print markdown, JSON or a terminal table
- validate: check a previously written JSON report against the schema

`report` is the default when no command is given.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from readiness import __version__
from readiness.config import (
    DEFAULT_REPORT_PATH,
    SIGNAL_PROVIDERS,
    load_config_file,
    resolve_options,
    resolve_output_path,
)
from readiness.engine import build_report
from readiness.errors import ConfigError, ReadinessError
from readiness.git_info import detect_repo_root
from readiness.render import render_console, render_markdown
from readiness.validate import load_report, validate_report

# Fix Windows console encoding for box-drawing characters
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

logger = logging.getLogger(__name__)

COMMANDS = ("report", "validate")
LOG_LEVEL_ENV = "AGENT_READINESS_LOG_LEVEL"


def configure_logging(verbose: bool = False):
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-readiness",
        description="Score how ready a repository is for autonomous coding agents.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command")

    report = subparsers.add_parser("report", help="Score the repository (default)")
    report.add_argument("--format", choices=["markdown", "json", "table"], default="markdown",
                        help="Output format (default: markdown)")
    report.add_argument("--out", help="Write the JSON report to this path (relative to repo root)")
    report.add_argument("--root", help="Start path for repo discovery (default: cwd)")
    report.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    report.add_argument("--telemetry-scan", action="store_true", default=None,
                        help="Scan sources for tracing/metrics setup")
    report.add_argument("--run-integration", action="store_true", default=None,
                        help="Execute the integration test command (90s timeout)")
    report.add_argument("--ci-provider", choices=SIGNAL_PROVIDERS,
                        help="CI provider for signal-gated checks")
    report.add_argument("--signals", choices=SIGNAL_PROVIDERS,
                        help="Enable signal-gated checks")
    report.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    validate = subparsers.add_parser("validate", help="Validate a JSON report against the schema")
    validate.add_argument("--in", "--input", dest="input", default=DEFAULT_REPORT_PATH,
                          help=f"Report to validate (default: {DEFAULT_REPORT_PATH})")
    validate.add_argument("--root", help="Start path for repo discovery (default: cwd)")
    validate.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return parser


def with_default_command(argv: list[str]) -> list[str]:
    """Insert `report` unless a command (or a top-level flag) leads"""
    if argv and (argv[0] in COMMANDS or argv[0] in ("-h", "--help", "--version")):
        return argv
    return ["report", *argv]


def resolve_root(root: Optional[str]) -> Path:
    start = Path(root).expanduser() if root else Path.cwd()
    if not start.is_dir():
        raise ConfigError(f"Root path is not a directory: {start}")
    return detect_repo_root(start)


# ════════════════════════════════════════════════════════════
# COMMANDS
# ════════════════════════════════════════════════════════════

def run_report(args) -> int:
    repo_root = resolve_root(args.root)
    file_config = load_config_file(repo_root)
    options = resolve_options(
        file_config,
        telemetry_scan=args.telemetry_scan,
        run_integration=args.run_integration,
        ci_provider=args.ci_provider,
        signals=args.signals,
    )
    logger.debug("Scoring %s with %s", repo_root, options)

    report = build_report(repo_root, __version__, options)
    data = report.to_dict()

    out = resolve_output_path(file_config, args.out)
    if out:
        out_path = repo_root / out
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.debug("Wrote report to %s", out_path)

    if args.format == "json":
        sys.stdout.write(json.dumps(data, indent=2 if args.pretty else None) + "\n")
    elif args.format == "table":
        render_console(data, Console())
    else:
        sys.stdout.write(render_markdown(data) + "\n")
    return 0


def run_validate(args, err_console: Console) -> int:
    repo_root = resolve_root(args.root)
    report = load_report(repo_root / args.input)
    result = validate_report(report)

    if result.valid:
        sys.stdout.write("Report is valid.\n")
        return 0

    err_console.print("[red]Report failed validation:[/red]")
    for error in result.errors:
        err_console.print(f"- {escape(error)}", soft_wrap=True)
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point"""
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(with_default_command(argv))
    configure_logging(args.verbose)

    err_console = Console(stderr=True)
    try:
        if args.command == "validate":
            return run_validate(args, err_console)
        return run_report(args)
    except ReadinessError as e:
        err_console.print(f"[red]agent-readiness failed:[/red] {escape(str(e))}", soft_wrap=True)
        return 1
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        err_console.print(f"[red]agent-readiness failed:[/red] {escape(str(e))}", soft_wrap=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
