"""Result data structures produced by the retry executor."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from batsretry.errors import RetryError


@dataclass
class RetryResult:
    """Outcome of re-running a single case."""

    report: str
    case_name: str
    status: str
    duration_s: float
    error: Optional[RetryError] = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    def identifier(self) -> str:
        return f"{self.report}::{self.case_name}"
