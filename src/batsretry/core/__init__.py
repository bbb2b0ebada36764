"""Retry execution and report reconciliation."""
from .executor import CommandRunner, RetryExecutor, run_command
from .reconciler import reconcile_case
from .results import RetryResult

__all__ = [
    "CommandRunner",
    "RetryExecutor",
    "RetryResult",
    "reconcile_case",
    "run_command",
]
