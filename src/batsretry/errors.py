"""Exception hierarchy for bats-retry."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence


class RetryError(Exception):
    """Base class for all bats-retry errors."""


class ConfigError(RetryError, ValueError):
    """Settings file or environment value is invalid."""


class MalformedReport(RetryError, ValueError):
    """Report document cannot be parsed, even after normalization."""


class UnresolvableSource(RetryError, ValueError):
    """Report lacks the base-directory property needed to locate its test file."""


class DuplicateCaseName(RetryError, ValueError):
    """More than one case in a report shares the requested name."""


class ReportProcessingError(RetryError):
    """A report in the test directory could not be turned into retry commands."""

    def __init__(self, filename: str, cause: BaseException) -> None:
        super().__init__(f"Error processing file {filename}: {cause}")
        self.filename = filename
        self.cause = cause


class SubprocessFailure(RetryError):
    """Re-run command exited non-zero or could not be started."""

    def __init__(
        self,
        argv: Sequence[str],
        *,
        returncode: Optional[int] = None,
        reason: str = "",
    ) -> None:
        command = " ".join(argv)
        if returncode is not None:
            message = f"command '{command}' failed (code {returncode})"
        else:
            message = f"command '{command}' could not be started: {reason}"
        super().__init__(message)
        self.argv = tuple(argv)
        self.returncode = returncode


class RewriteFailure(RetryError):
    """Report could not be updated after a successful re-run."""

    def __init__(self, report_path: Path, case_name: str, cause: BaseException) -> None:
        super().__init__(f"failed to update '{case_name}' in {report_path}: {cause}")
        self.report_path = report_path
        self.case_name = case_name
        self.cause = cause


class AggregateRetryError(RetryError):
    """Collection of every per-case failure from a direct-mode run."""

    def __init__(self, errors: Iterable[RetryError]) -> None:
        self.errors: List[RetryError] = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        count = len(self.errors)
        lines = [f"{count} error{'s' if count != 1 else ''} occurred:"]
        lines.extend(f"\t* {error}" for error in self.errors)
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.errors)
