"""Standardized CLI exit codes for autoreview.

Exit code scheme:

    0  SUCCESS        -- every submission was analysed (approved or referred)
    1  GENERAL_ERROR  -- unexpected failure, crash, unhandled exception
    2  USAGE_ERROR    -- invalid arguments, unknown language, bad config
    3  PARSE_FAILURE  -- a submission could not be parsed, no verdict produced
    5  DISAPPROVED    -- at least one submission was disapproved

CI tools can differentiate between:
  - "the student has work to do" (5 = disapproved)
  - "the submission is not valid source" (3 = parse failure)
  - "tool crashed" (1 = general error)
"""

from __future__ import annotations

import sys

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_PARSE_FAILURE: int = 3
EXIT_DISAPPROVED: int = 5

DESCRIPTIONS: dict[int, str] = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "invalid usage (bad arguments, language or config)",
    EXIT_PARSE_FAILURE: "submission could not be parsed",
    EXIT_DISAPPROVED: "submission disapproved",
}

# ---------------------------------------------------------------------------
# Custom exceptions (caught by CLI error handler)
# ---------------------------------------------------------------------------


class AutoreviewError(click.ClickException):
    """Base class for autoreview errors with exit codes."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


class ParseFailureError(AutoreviewError):
    """Raised when a submission does not parse.

    Carries the syntax errors found in the tree so callers can report them.
    A parse failure is never encoded as a verdict.
    """

    def __init__(self, path: str, errors: list[dict] | None = None):
        self.path = path
        self.errors = list(errors or [])
        if self.errors:
            first = self.errors[0]
            detail = f" at line {first['line']}, column {first['column']}: {first['text']}"
        else:
            detail = ""
        super().__init__(f"Could not parse {path}{detail}", EXIT_PARSE_FAILURE)


class UnsupportedLanguageError(AutoreviewError):
    """Raised when no grammar is known for a submission."""

    def __init__(self, path: str):
        super().__init__(f"Unsupported file type: {path}", EXIT_USAGE)


class ConfigError(AutoreviewError):
    """Raised when an .autoreview.yml file is malformed."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_USAGE)


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------


def exit_with(code: int, message: str | None = None) -> None:
    """Print an optional message to stderr and exit with the given code."""
    if message:
        click.echo(f"Error: {message}", err=True)
    sys.exit(code)
