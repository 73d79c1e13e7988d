"""
Main module for linefix.

Contains the main function and argument parsing for the linefix command-line interface.
"""

import argparse
import logging
import os
import sys
from contextlib import contextmanager

import shtab
from argparse_formatter import FlexiFormatter
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from ._version import __version__
from .constants import NO_COLOR_ENV, VERBOSE_ENV
from .core import EnumerationError, ReportError, env_flag
from .report import REPORT_FORMATS, render_json, render_summary, write_report
from .scanner import Mode, run
from .schemas import render_report_schema_markdown, render_report_schema_pretty

_RED = "\033[91m"
_RESET = "\033[0m"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FIX_FAILED = 2
EXIT_INTERRUPTED = 130


def build_logger(verbose, stream=None):
    """Create the logger used for a single invocation.

    The logger is not registered with :mod:`logging`, so configuring it never
    touches the root logger or any other process-wide state.
    """
    logger = logging.Logger("linefix", logging.DEBUG if verbose else logging.WARNING)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    return logger


@contextmanager
def _progress_bar(enabled, description):
    """Yield ``(on_start, on_progress)`` callbacks driving an optional rich bar."""
    if not enabled:
        yield None, None
        return

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    )
    task = progress.add_task(description, total=None)
    with progress:
        yield (
            lambda total: progress.update(task, total=total),
            lambda _outcome: progress.advance(task),
        )


def _colour_enabled(args):
    return not args.no_color and not os.environ.get(NO_COLOR_ENV)


def _print_error(message, color):
    label = f"{_RED}ERROR:{_RESET}" if color else "ERROR:"
    print(f"\n{label} {message}\n")


def _configure_run_parser(parser: argparse.ArgumentParser, *, mode: Mode) -> None:
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to process, including all subdirectories (default: current directory)",
    ).complete = shtab.DIRECTORY

    out_group = parser.add_argument_group("Output options")
    out_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=env_flag(VERBOSE_ENV),
        help=f"Log every file checked at the debug level (default: ${VERBOSE_ENV})",
    )
    out_group.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Format of the summary printed to stdout (default: text)",
    )
    out_group.add_argument(
        "--report",
        action="store",
        default=None,
        help="Write the status of every file to this path (CSV, TSV or JSON by suffix)",
    ).complete = shtab.FILE
    out_group.add_argument(
        "--report-format",
        choices=list(REPORT_FORMATS),
        default=None,
        help="Override the report format inferred from the --report suffix",
    )
    out_group.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable coloured output (also disabled when $NO_COLOR is set)",
    )
    out_group.add_argument(
        "--no-progress",
        action="store_true",
        default=False,
        help="Do not draw a progress bar",
    )
    if mode is Mode.SCAN:
        out_group.add_argument(
            "--exit-code",
            action="store_true",
            default=False,
            help="Exit with status 1 when any file is missing a trailing newline",
        )


def _add_scan_subparser(subparsers):
    scan_parser = subparsers.add_parser(
        "scan",
        help="Report files without a trailing newline",
        description="Report files without a trailing newline in the given directory and all subdirectories.",
        formatter_class=FlexiFormatter,
    )
    _configure_run_parser(scan_parser, mode=Mode.SCAN)
    scan_parser.set_defaults(handler=_run_command, mode=Mode.SCAN)


def _add_fix_subparser(subparsers):
    fix_parser = subparsers.add_parser(
        "fix",
        help="Append a newline to files without one",
        description="Fixes newlines in the given directory and all subdirectories.",
        formatter_class=FlexiFormatter,
        epilog="""
Each file whose last byte is neither a carriage return nor a line feed gets a
single carriage return appended. Files that already end with either byte are
left untouched, so running fix twice is safe.
""",
    )
    _configure_run_parser(fix_parser, mode=Mode.FIX)
    fix_parser.set_defaults(handler=_run_command, mode=Mode.FIX)


def _add_schema_subparser(subparsers):
    schema_parser = subparsers.add_parser(
        "schema",
        help="Describe the columns written by --report",
        description="Describe the columns written by --report.",
        formatter_class=FlexiFormatter,
    )
    schema_parser.add_argument(
        "--format",
        choices=["text", "markdown"],
        default="text",
        help="Render the schema as a text table or markdown (default: text)",
    )
    schema_parser.set_defaults(handler=_run_schema_command)


def _add_completion_subparser(subparsers):
    completion_parser = subparsers.add_parser(
        "completion",
        help="Generate shell completion scripts",
        description="Generate shell completion scripts.",
        formatter_class=FlexiFormatter,
        epilog="""
To install completion scripts run:

linefix completion > /usr/local/etc/bash_completion.d/linefix
""",
    )
    completion_parser.add_argument(
        "--shell",
        choices=list(shtab.SUPPORTED_SHELLS),
        default="bash",
        help="Shell to generate the script for (default: bash)",
    )
    completion_parser.set_defaults(handler=_run_completion_command)


def _add_version_subparser(subparsers):
    version_parser = subparsers.add_parser(
        "version",
        help="Print the version",
        description="Print the version",
    )
    version_parser.set_defaults(handler=_run_version_command)


def create_parser():
    """Create and return the top-level argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="linefix",
        description="linefix: find and fix files that do not end with a newline",
        formatter_class=FlexiFormatter,
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")
    _add_scan_subparser(subparsers)
    _add_fix_subparser(subparsers)
    _add_schema_subparser(subparsers)
    _add_version_subparser(subparsers)
    _add_completion_subparser(subparsers)

    return parser


def main(sysargs=None):
    """Entry point for the linefix CLI."""
    if sysargs is None:
        sysargs = sys.argv[1:]

    parser = create_parser()

    try:
        args = parser.parse_args(sysargs)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 0
        return code

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


def _exit_code(args, result):
    if result.failed:
        return EXIT_FIX_FAILED
    if getattr(args, "exit_code", False) and result.affected:
        return EXIT_ERROR
    return EXIT_OK


def _run_command(args):
    mode = args.mode
    color = _colour_enabled(args)
    logger = build_logger(args.verbose)
    text_output = args.output == "text"
    show_progress = (
        text_output
        and not args.no_progress
        and not args.verbose
        and sys.stderr.isatty()
    )

    logger.debug(
        "Running %s on %s (output=%s, report=%s)",
        mode.value,
        args.directory,
        args.output,
        args.report,
    )

    if text_output and mode is Mode.FIX:
        print("Scanning for files with no newlines")

    try:
        with _progress_bar(show_progress, "Scanning") as (on_start, on_progress):
            result = run(
                mode,
                args.directory,
                logger=logger,
                on_start=on_start,
                on_progress=on_progress,
            )
    except EnumerationError as e:
        _print_error(str(e), color)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted: files fixed so far have been kept.\n")
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"\nUnexpected error: {str(e)}\n")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return EXIT_ERROR

    if text_output:
        print("")
        print(render_summary(result, color=color))
    else:
        print(render_json(result))

    if args.report:
        try:
            written = write_report(result, args.report, args.report_format)
        except ReportError as e:
            _print_error(str(e), color)
            return EXIT_ERROR
        logger.debug("Wrote report to %s", written)
        if text_output:
            print(f"\nPer-file report written to {written}")

    return _exit_code(args, result)


def _run_schema_command(args):
    if args.format == "markdown":
        print(render_report_schema_markdown())
    else:
        print(render_report_schema_pretty())
    return 0


def _run_completion_command(args):
    print(shtab.complete(create_parser(), shell=args.shell))
    return 0


def _run_version_command(_args):
    print(f"Version: {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
