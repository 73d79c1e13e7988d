"""
linefix: find and fix files that do not end with a newline.

Walks a directory tree, skipping ``.git`` directories, and reports (or repairs)
every file whose last byte is neither a carriage return nor a line feed.
"""

from ._version import __version__

from .scanner import Mode, RunResult, fix, run, scan  # noqa: F401
from .main import main  # noqa: F401

__all__ = ["__version__", "Mode", "RunResult", "fix", "main", "run", "scan"]
