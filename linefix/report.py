"""
Reporting helpers for linefix.

Turns a :class:`~linefix.scanner.RunResult` into the coloured terminal
summary, a JSON summary, or a per-file status table.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .core import ReportError
from .scanner import STATUS_FIX_FAILED, Mode, RunResult
from .schemas import REPORT_SCHEMA_VERSION, report_columns

_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[91m"
_RESET = "\033[0m"

REPORT_FORMATS = ("csv", "tsv", "json")


def _paint(text: Any, colour: str, enabled: bool) -> str:
    if not enabled:
        return str(text)
    return f"{colour}{text}{_RESET}"


def render_summary(result: RunResult, color: bool = True) -> str:
    """Render the human readable summary printed at the end of a run."""
    lines = []
    if result.mode is Mode.FIX:
        colour = _GREEN
        listed = result.fixed
        lines.append(
            f"{_paint(len(listed), colour, color)} files fixed newline issues in "
            f"{_paint(result.root, colour, color)} and subdirectories: "
        )
        lines.extend(_paint(path, colour, color) for path in listed)
    else:
        colour = _YELLOW
        unreadable = set(result.unreadable)
        listed = result.affected
        lines.append(
            f"{_paint(len(listed), colour, color)} files affected by newline issues in "
            f"{_paint(result.root, colour, color)} and subdirectories: "
        )
        for path in listed:
            suffix = " (unreadable)" if path in unreadable else ""
            lines.append(_paint(path, colour, color) + suffix)

    failures = [o for o in result.outcomes if o.status == STATUS_FIX_FAILED]
    if failures:
        lines.append("")
        lines.append(f"{_paint(len(failures), _RED, color)} files could not be fixed:")
        for outcome in failures:
            lines.append(f"{_paint(outcome.path, _RED, color)} ({outcome.error})")

    if result.cancelled:
        lines.append("")
        lines.append(
            f"Interrupted after {result.processed} of {result.total} files; "
            "remaining files were not checked."
        )

    return "\n".join(lines)


def summary_payload(result: RunResult) -> dict[str, Any]:
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "mode": result.mode.value,
        "root": result.root,
        "total": result.total,
        "processed": result.processed,
        "affected_count": len(result.affected),
        "affected": result.affected,
        "fixed": result.fixed,
        "failed": result.failed,
        "unreadable": result.unreadable,
        "cancelled": result.cancelled,
    }


def render_json(result: RunResult) -> str:
    return json.dumps(summary_payload(result), indent=2)


def outcomes_frame(result: RunResult) -> pd.DataFrame:
    """Return one row per checked file, in enumeration order."""
    return pd.DataFrame(
        [outcome.as_row() for outcome in result.outcomes],
        columns=report_columns(),
    )


def infer_report_format(destination: str | Path) -> str:
    suffix = Path(destination).suffix.lower().lstrip(".")
    return suffix if suffix in REPORT_FORMATS else "csv"


def write_report(
    result: RunResult, destination: str | Path, fmt: Optional[str] = None
) -> Path:
    """
    Write the per-file status table.

    Args:
        result (RunResult): Finished run
        destination (str | Path): Output file
        fmt (str, optional): One of csv, tsv or json; inferred from the suffix
            when omitted

    Returns:
        Path: The file that was written

    Raises:
        ReportError: If the format is unknown or the file cannot be written
    """
    fmt = fmt or infer_report_format(destination)
    if fmt not in REPORT_FORMATS:
        raise ReportError(f"Unknown report format: {fmt}")

    path = Path(destination).expanduser()
    table = outcomes_frame(result)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "json":
            table.to_json(path, orient="records", indent=2)
        else:
            table.to_csv(path, index=False, sep="\t" if fmt == "tsv" else ",")
    except OSError as exc:
        raise ReportError(f"Could not write report to {path}: {exc}") from exc
    return path
