#!/usr/bin/env python3
"""Keep docs/REPORT_SCHEMA.md in step with linefix.schemas.REPORT_SCHEMA.

Run without arguments to check the document, or with ``--write`` to
regenerate it.
"""

from __future__ import annotations

import argparse
import difflib
import importlib.util
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SCHEMA_PATH = REPO_ROOT / "linefix" / "schemas.py"
DOC_PATH = REPO_ROOT / "docs" / "REPORT_SCHEMA.md"


def render_expected() -> str:
    # Load schemas.py on its own so the check works without installing linefix
    spec = importlib.util.spec_from_file_location("schemas", SCHEMA_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.render_report_schema_markdown()


def stale_lines(doc: Path, expected: str) -> list[str]:
    actual = doc.read_text(encoding="utf-8") if doc.exists() else ""
    if actual.strip() == expected.strip():
        return []
    return list(
        difflib.unified_diff(
            actual.strip().splitlines(),
            expected.strip().splitlines(),
            fromfile=str(doc),
            tofile="linefix.schemas",
            lineterm="",
        )
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--write",
        action="store_true",
        help="Regenerate the document instead of checking it",
    )
    parser.add_argument(
        "--doc",
        type=Path,
        default=DOC_PATH,
        help=f"Schema document to check (default: {DOC_PATH.relative_to(REPO_ROOT)})",
    )
    args = parser.parse_args(argv)

    expected = render_expected()
    diff = stale_lines(args.doc, expected)

    if not diff:
        print(f"{args.doc.name} is up to date.")
        return 0

    if args.write:
        args.doc.parent.mkdir(parents=True, exist_ok=True)
        args.doc.write_text(expected, encoding="utf-8")
        print(f"Rewrote {args.doc}")
        return 0

    print(f"{args.doc.name} is out of date; rerun with --write to regenerate.\n")
    print("\n".join(diff))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
