"""Exceptions raised by alfredwf."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .output import OutputFormatter


class AlfredWfError(Exception):
    """Base exception for all alfredwf errors."""


class ReportableError(AlfredWfError):
    """An expected failure that is reported without a traceback.

    The CLI prints the message and every detail line, then exits with code 1.
    """

    def __init__(
        self,
        message: str,
        details: Optional[list[str]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def report(self, out: "OutputFormatter") -> None:
        """Print this error and its details.

        Args:
            out: Output formatter to print through
        """
        out.error(self.message)
        for detail in self.details:
            out.print(detail)
        if self.cause is not None:
            out.print(f"Cause: {self.cause}")


def reportable_error(message: str, *details: str) -> ReportableError:
    """Build a ReportableError from a message and detail lines."""
    return ReportableError(message, list(details))


class ConfigError(ReportableError):
    """Configuration could not be read or is invalid."""


class SyncFailedError(ReportableError):
    """A sync produced one or more failing outcomes."""


class UncommittedChangesError(ReportableError):
    """Files about to be overwritten or deleted are not safely in git."""

    def __init__(self, message: str, details: list[str], status):
        super().__init__(message, details)
        self.status = status


class WorkflowDirMissingError(ReportableError):
    """The workflow directory does not exist."""

    def __init__(self, path):
        super().__init__(f"No workflow directory at '{path}'")
        self.path = path


class NotASymlinkError(ReportableError):
    """A path expected to be a symlink is something else."""

    def __init__(self, path, mode: int):
        super().__init__(
            f"Expected {path} to be a symlink, but it's not (mode = octal {mode:o})"
        )
        self.path = path
        self.mode = mode


class InfoPlistMissingError(ReportableError):
    """The workflow directory has no info.plist."""

    def __init__(self, path):
        super().__init__(f"No info.plist found at '{path}'")
        self.path = path


class InfoPlistCorruptError(ReportableError):
    """The info.plist could not be parsed."""

    def __init__(self, path, cause: BaseException):
        super().__init__(f"Corrupt XML in info.plist found at '{path}'", cause=cause)
        self.path = path


class InfoPlistFieldError(ReportableError):
    """A required field is missing from info.plist."""

    def __init__(self, path, field: str):
        super().__init__(f"Missing field '{field}' in info.plist at '{path}'")
        self.path = path
        self.field = field


class ProcessError(AlfredWfError):
    """A child process could not be run or did not succeed."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.returncode = returncode


@contextmanager
def report_as(
    message: str, details: Optional[list[str]] = None
) -> Iterator[None]:
    """Re-raise any ReportableError in the block under a new message.

    The original error is kept as the cause, so its message is still shown.
    """
    try:
        yield
    except ReportableError as e:
        raise ReportableError(message, details, cause=e) from e
