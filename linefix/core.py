"""
Core routines for linefix.

Contains the file enumerator, the trailing newline checker and fixer, and the
exception hierarchy shared by the rest of the package.
"""

import os
import stat

from .constants import FIX_TERMINATOR, RESERVED_DIR, TERMINATORS, TRUTHY


class LinefixError(Exception):
    """Base exception class for linefix."""

    pass


class _PathError(LinefixError):
    """Error tied to a single filesystem path."""

    action = "process"

    def __init__(self, path, cause):
        self.path = os.fspath(path)
        self.cause = cause
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(f"Could not {self.action} {self.path}: {reason}")


class EnumerationError(_PathError):
    """Raised when the directory tree cannot be walked."""

    action = "enumerate"


class CheckError(_PathError):
    """Raised when the last byte of a file cannot be read."""

    action = "check"


class FixError(_PathError):
    """Raised when a terminator cannot be appended to a file."""

    action = "fix"


class ReportError(LinefixError):
    """Raised when a report cannot be written."""

    pass


def env_flag(name, environ=None):
    """Return True if the environment variable ``name`` holds a truthy value."""
    environ = os.environ if environ is None else environ
    return environ.get(name, "").strip().lower() in TRUTHY


def _walk(directory, files):
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        raise EnumerationError(directory, exc) from exc

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            raise EnumerationError(entry.path, exc) from exc

        if not is_dir:
            files.append(entry.path)
        elif entry.name != RESERVED_DIR:
            _walk(entry.path, files)


def enumerate_files(root):
    """
    List every non-directory entry below ``root``.

    Entries are visited depth first in lexicographic order of name. Directories
    named ``.git`` are skipped along with everything inside them, and symbolic
    links are listed rather than followed.

    Args:
        root (str | os.PathLike): Directory to walk, or a single file

    Returns:
        list[str]: File paths prefixed with ``root``

    Raises:
        EnumerationError: If ``root`` is missing or any directory in the tree
            cannot be listed
    """
    top = os.path.normpath(os.fspath(root))
    try:
        is_dir = stat.S_ISDIR(os.stat(top).st_mode)
    except OSError as exc:
        raise EnumerationError(top, exc) from exc

    if not is_dir:
        return [top]
    if os.path.basename(os.path.abspath(top)) == RESERVED_DIR:
        return []

    files = []
    _walk(top, files)
    return files


def read_last_byte(path):
    """
    Return the final byte of ``path``, or ``b""`` for an empty file.

    Raises:
        CheckError: If the path is not a regular file or cannot be read
    """
    try:
        mode = os.stat(path).st_mode
        if not stat.S_ISREG(mode):
            raise OSError("not a regular file")
        with open(path, "rb") as handle:
            size = os.fstat(handle.fileno()).st_size
            if size == 0:
                return b""
            handle.seek(size - 1)
            last = handle.read(1)
    except OSError as exc:
        raise CheckError(path, exc) from exc

    if not last:
        raise CheckError(path, OSError("file shrank while reading"))
    return last


def has_trailing_newline(path):
    """
    Check whether ``path`` ends with a CR or LF byte.

    Empty and unreadable files both count as missing the terminator.
    """
    try:
        return read_last_byte(path) in TERMINATORS
    except CheckError:
        return False


def append_terminator(path):
    """
    Append a single carriage return to an existing file.

    The file is never created. Calling this twice appends two bytes; callers
    are expected to check the file first. Pipes, sockets and devices are
    refused without blocking or writing.

    Raises:
        FixError: If the path is not a regular file, or cannot be opened for
            appending or written
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_NONBLOCK)
    except OSError as exc:
        raise FixError(path, exc) from exc

    try:
        if not stat.S_ISREG(os.fstat(fd).st_mode):
            raise OSError("not a regular file")
        os.set_blocking(fd, True)
    except OSError as exc:
        os.close(fd)
        raise FixError(path, exc) from exc

    try:
        with os.fdopen(fd, "ab") as handle:
            handle.write(FIX_TERMINATOR)
    except OSError as exc:
        raise FixError(path, exc) from exc
