"""Output schemas for linefix reports."""

from __future__ import annotations

import shutil
import textwrap
from typing import Iterable, Sequence

REPORT_SCHEMA_VERSION = "1.0"

REPORT_SCHEMA: list[dict[str, str]] = [
    {
        "name": "path",
        "type": "string",
        "description": "File path, prefixed with the directory that was scanned.",
        "values": "",
    },
    {
        "name": "status",
        "type": "string",
        "description": "Outcome of the newline check (and of the fix in fix mode).",
        "values": "ok, missing, unreadable, fixed, fix_failed",
    },
    {
        "name": "error",
        "type": "string",
        "description": "Reason the file could not be checked or fixed; empty otherwise.",
        "values": "",
    },
]


def get_report_schema() -> Sequence[dict[str, str]]:
    return REPORT_SCHEMA


def report_columns() -> list[str]:
    return [entry["name"] for entry in REPORT_SCHEMA]


def render_report_schema_markdown(
    schema: Iterable[dict[str, str]] | None = None,
) -> str:
    schema = list(schema or REPORT_SCHEMA)
    lines = [
        "# Report schema",
        "",
        f"Schema version: `{REPORT_SCHEMA_VERSION}`",
        "",
        "Generated from `linefix.schemas.REPORT_SCHEMA`.",
        "",
        "This document describes the columns written by `--report`, one row per file.",
        "",
        "| Column | Type | Description | Values |",
        "| --- | --- | --- | --- |",
    ]

    for entry in schema:
        lines.append(
            "| {name} | {type} | {description} | {values} |".format(
                name=entry["name"],
                type=entry["type"],
                description=entry["description"],
                values=entry.get("values", ""),
            )
        )

    lines.append("")
    return "\n".join(lines)


def _wrap_cell(text: str, width: int) -> list[str]:
    if width <= 0:
        return [text]
    return textwrap.wrap(text, width=width) or [""]


def render_report_schema_pretty(
    schema: Iterable[dict[str, str]] | None = None, *, width: int | None = None
) -> str:
    schema = list(schema or REPORT_SCHEMA)
    term_width = width or shutil.get_terminal_size((100, 20)).columns

    columns = [
        ("Column", "name", 8),
        ("Type", "type", 8),
        ("Values", "values", 24),
        ("Description", "description", None),
    ]

    fixed = sum(col_width for *_rest, col_width in columns if col_width is not None)
    separators = 3 * (len(columns) - 1)
    description_width = max(30, term_width - fixed - separators)
    computed_widths = [
        description_width if col_width is None else col_width
        for *_rest, col_width in columns
    ]

    header_line = " | ".join(
        header.ljust(width) for (header, _key, _), width in zip(columns, computed_widths)
    )
    divider_line = "-+-".join("-" * width for width in computed_widths)

    lines = [
        "Report schema",
        f"Schema version: {REPORT_SCHEMA_VERSION}",
        "Generated from linefix.schemas.REPORT_SCHEMA.",
        "",
        header_line,
        divider_line,
    ]

    for entry in schema:
        wrapped_cells = [
            _wrap_cell(str(entry.get(key) or ""), col_width)
            for (_header, key, _), col_width in zip(columns, computed_widths)
        ]
        row_height = max(len(cell) for cell in wrapped_cells)
        for idx in range(row_height):
            row_parts = []
            for cell, col_width in zip(wrapped_cells, computed_widths):
                text = cell[idx] if idx < len(cell) else ""
                row_parts.append(text.ljust(col_width))
            lines.append(" | ".join(row_parts).rstrip())

    return "\n".join(lines)


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "REPORT_SCHEMA",
    "get_report_schema",
    "report_columns",
    "render_report_schema_markdown",
    "render_report_schema_pretty",
]
