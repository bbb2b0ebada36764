"""Terminal reporter for direct-mode retries."""
from __future__ import annotations

from typing import Sequence

import click
from colorama import Fore, Style, just_fix_windows_console

from batsretry.core.results import RetryResult

STATUS_LABELS = {
    "passed": ("PASS", Fore.GREEN),
    "failed": ("FAIL", Fore.RED),
    "error": ("ERROR", Fore.YELLOW),
}


class TerminalReporter:
    """Prints one line per retried case and a closing summary."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        if use_color:
            just_fix_windows_console()

    def on_result(self, result: RetryResult) -> None:
        label, color = STATUS_LABELS.get(result.status, (result.status.upper(), ""))
        click.echo(f"{self._styled(f'{label:<6}', color)} {result.identifier()} ({result.duration_s:.2f}s)")
        if result.error is not None:
            click.echo(f"    detail: {result.error}")

    def on_complete(self, results: Sequence[RetryResult]) -> None:
        total = len(results)
        passed = sum(1 for r in results if r.status == "passed")
        failed = sum(1 for r in results if r.status == "failed")
        errors = sum(1 for r in results if r.status == "error")
        color = Fore.GREEN if passed == total else Fore.RED
        click.echo(
            f"{self._styled('Summary', color)}: total={total} passed={passed} "
            f"failed={failed} errors={errors}"
        )

    def _styled(self, text: str, color: str) -> str:
        if not self._use_color or not color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"
