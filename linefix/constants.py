"""
Constants for linefix.

Reserved names, terminator bytes and the environment variables read by the CLI.
"""

# Directory names that are never descended into
RESERVED_DIR = ".git"

# Bytes accepted as evidence that a file ends with a newline
TERMINATORS = (b"\r", b"\n")

# Byte appended by the fixer
FIX_TERMINATOR = b"\r"

# Environment variables
VERBOSE_ENV = "LINEFIX_VERBOSE"
NO_COLOR_ENV = "NO_COLOR"

TRUTHY = {"1", "true", "yes", "on"}
