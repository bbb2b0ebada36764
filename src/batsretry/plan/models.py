"""Data models for retry plans."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence, Tuple


@dataclass(frozen=True)
class Selection:
    """Non-passing cases of one report and the test file they came from."""

    source_file: Path
    case_names: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class RetryCommand:
    case_name: str
    source_file: Path


@dataclass(frozen=True)
class ReportEntry:
    report_path: Path
    commands: Sequence[RetryCommand] = field(default_factory=tuple)

    @property
    def filename(self) -> str:
        return self.report_path.name


@dataclass(frozen=True)
class RetryPlan:
    """Reports in discovery order, each with its cases in declaration order."""

    entries: Sequence[ReportEntry] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def commands(self) -> Iterator[Tuple[ReportEntry, RetryCommand]]:
        for entry in self.entries:
            for command in entry.commands:
                yield entry, command

    @property
    def case_count(self) -> int:
        return sum(len(entry.commands) for entry in self.entries)
