"""Scan and fix directory trees for files missing a trailing newline."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .constants import TERMINATORS
from .core import (
    CheckError,
    FixError,
    append_terminator,
    enumerate_files,
    read_last_byte,
)

_logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_MISSING = "missing"
STATUS_UNREADABLE = "unreadable"
STATUS_FIXED = "fixed"
STATUS_FIX_FAILED = "fix_failed"

STATUSES = (
    STATUS_OK,
    STATUS_MISSING,
    STATUS_UNREADABLE,
    STATUS_FIXED,
    STATUS_FIX_FAILED,
)


class Mode(str, Enum):
    SCAN = "scan"
    FIX = "fix"


@dataclass
class FileOutcome:
    path: str
    status: str
    error: str = ""

    @property
    def affected(self) -> bool:
        return self.status != STATUS_OK

    def as_row(self) -> List[str]:
        return [self.path, self.status, self.error]


@dataclass
class RunResult:
    mode: Mode
    root: str
    total: int = 0
    outcomes: List[FileOutcome] = field(default_factory=list)
    cancelled: bool = False

    def _paths(self, *statuses: str) -> List[str]:
        return [o.path for o in self.outcomes if o.status in statuses]

    @property
    def affected(self) -> List[str]:
        return [o.path for o in self.outcomes if o.affected]

    @property
    def fixed(self) -> List[str]:
        return self._paths(STATUS_FIXED)

    @property
    def failed(self) -> List[str]:
        return self._paths(STATUS_FIX_FAILED)

    @property
    def unreadable(self) -> List[str]:
        return self._paths(STATUS_UNREADABLE)

    @property
    def processed(self) -> int:
        return len(self.outcomes)


def check_file(path: str, log: logging.Logger) -> FileOutcome:
    """Inspect one file without modifying it."""
    try:
        last = read_last_byte(path)
    except CheckError as exc:
        log.debug("%s", exc)
        return FileOutcome(path, STATUS_UNREADABLE, str(exc))

    if last in TERMINATORS:
        return FileOutcome(path, STATUS_OK)
    return FileOutcome(path, STATUS_MISSING)


def fix_file(outcome: FileOutcome, log: logging.Logger) -> FileOutcome:
    """Append a terminator to a file already found to be missing one."""
    try:
        append_terminator(outcome.path)
    except FixError as exc:
        log.warning("%s", exc)
        return FileOutcome(outcome.path, STATUS_FIX_FAILED, str(exc))
    return FileOutcome(outcome.path, STATUS_FIXED)


def run(
    mode: Mode | str,
    root: str | os.PathLike = ".",
    *,
    logger: Optional[logging.Logger] = None,
    on_start: Optional[Callable[[int], None]] = None,
    on_progress: Optional[Callable[[FileOutcome], None]] = None,
    cancel: Optional[threading.Event] = None,
) -> RunResult:
    """Walk ``root`` once and check (and in fix mode repair) every file.

    Files are handled one at a time in enumeration order. Per-file check and
    fix failures are recorded in the returned outcomes; an
    :class:`~linefix.core.EnumerationError` aborts the run before any file is
    touched.
    """
    mode = Mode(mode)
    log = logger or _logger
    root = os.fspath(root)

    files = enumerate_files(root)
    log.debug("Found %d files under %s", len(files), root)
    if on_start is not None:
        on_start(len(files))

    result = RunResult(mode=mode, root=root, total=len(files))
    for path in files:
        if cancel is not None and cancel.is_set():
            log.debug("Cancelled after %d of %d files", result.processed, result.total)
            result.cancelled = True
            break

        outcome = check_file(path, log)
        if outcome.affected and mode is Mode.FIX:
            outcome = fix_file(outcome, log)

        log.debug("%s: %s", outcome.status, path)
        result.outcomes.append(outcome)
        if on_progress is not None:
            on_progress(outcome)

    return result


def scan(root: str | os.PathLike = ".", **kwargs) -> RunResult:
    return run(Mode.SCAN, root, **kwargs)


def fix(root: str | os.PathLike = ".", **kwargs) -> RunResult:
    return run(Mode.FIX, root, **kwargs)
