"""Re-run the cases of a retry plan and reconcile their reports."""
from __future__ import annotations

import subprocess
import time
from typing import Callable, List, Optional, Sequence

from batsretry.config import Settings
from batsretry.errors import AggregateRetryError, RetryError, RewriteFailure, SubprocessFailure
from batsretry.log import ContextLogger, get_logger
from batsretry.plan import ReportEntry, RetryCommand, RetryPlan, build_command

from .reconciler import reconcile_case
from .results import RetryResult

CommandRunner = Callable[[Sequence[str]], int]


def run_command(argv: Sequence[str]) -> int:
    """Run ``argv`` to completion, inheriting stdout/stderr; returns the exit code."""

    return subprocess.run(list(argv)).returncode


class RetryExecutor:
    """Executes retry commands sequentially, collecting per-case failures."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        logger: Optional[ContextLogger] = None,
        command_runner: Optional[CommandRunner] = None,
        on_result: Optional[Callable[[RetryResult], None]] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._logger = logger or get_logger()
        self._command_runner = command_runner or run_command
        self._on_result = on_result
        self.results: List[RetryResult] = []

    def run(self, plan: RetryPlan) -> Optional[AggregateRetryError]:
        """Retry every case in ``plan``; return the aggregated errors, if any."""

        self.results = []
        errors: List[RetryError] = []
        for entry in plan:
            entry_log = self._logger.bind(testfile=entry.filename)
            for command in entry.commands:
                result = self._retry_case(entry, command, entry_log)
                self.results.append(result)
                if result.error is not None:
                    errors.append(result.error)
                if self._on_result:
                    self._on_result(result)
        if errors:
            return AggregateRetryError(errors)
        return None

    def _retry_case(
        self, entry: ReportEntry, command: RetryCommand, logger: ContextLogger
    ) -> RetryResult:
        argv = build_command(command, self._settings)
        log = logger.bind(testcase=command.case_name)
        log.bind(command=" ".join(argv)).info("Executing bats command")
        start = time.perf_counter()
        try:
            returncode = self._command_runner(argv)
        except OSError as exc:
            return self._failed(entry, command, time.perf_counter() - start, SubprocessFailure(argv, reason=str(exc)), log)
        duration = time.perf_counter() - start
        if returncode != 0:
            return self._failed(entry, command, duration, SubprocessFailure(argv, returncode=returncode), log)
        try:
            reconcile_case(
                entry.report_path,
                command.case_name,
                duration,
                strict=self._settings.strict_lookup,
                logger=log,
            )
        except RewriteFailure as exc:
            return RetryResult(entry.filename, command.case_name, "error", duration, exc)
        return RetryResult(entry.filename, command.case_name, "passed", duration)

    def _failed(
        self,
        entry: ReportEntry,
        command: RetryCommand,
        duration: float,
        error: SubprocessFailure,
        logger: ContextLogger,
    ) -> RetryResult:
        logger.bind(error=str(error)).warning("Bats command failed")
        return RetryResult(entry.filename, command.case_name, "failed", duration, error)
