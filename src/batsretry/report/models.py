"""Typed representation of a JUnit test-report document."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from xml.etree import ElementTree as ET

from batsretry.errors import DuplicateCaseName


@dataclass
class Failure:
    """Failure marker attached to a case; its presence alone marks the case failed."""

    type: str = ""
    message: str = ""
    text: str = ""


@dataclass
class Case:
    """One ``<testcase>`` entry."""

    name: str
    classname: str = ""
    duration: float = 0.0
    failure: Optional[Failure] = None
    skipped: Optional[str] = None
    duration_changed: bool = field(default=False, compare=False, repr=False)

    @property
    def failed(self) -> bool:
        return self.failure is not None

    @property
    def is_skipped(self) -> bool:
        return self.skipped is not None

    @property
    def passed(self) -> bool:
        return not self.failed and not self.is_skipped

    @property
    def status(self) -> str:
        if self.failed:
            return "failed"
        if self.is_skipped:
            return "skipped"
        return "passed"

    def mark_passed(self, duration_s: float) -> None:
        """Clear both markers and record the duration of the passing re-run."""

        self.failure = None
        self.skipped = None
        self.duration = max(0.0, duration_s)
        self.duration_changed = True


@dataclass
class Report:
    """One decoded ``<testsuite>`` document.

    ``attributes`` holds the suite-level attributes verbatim. ``element`` is the
    parsed document root kept by the codec so that fields the model does not
    describe survive a rewrite.
    """

    name: str
    properties: Dict[str, str] = field(default_factory=dict)
    cases: List[Case] = field(default_factory=list)
    attributes: Mapping[str, str] = field(default_factory=dict)
    element: Optional[ET.Element] = field(default=None, repr=False, compare=False)

    def property(self, key: str) -> Optional[str]:
        return self.properties.get(key)

    def non_passing(self) -> List[Case]:
        return [case for case in self.cases if not case.passed]

    def find_case(self, name: str, *, strict: bool = False) -> Optional[Case]:
        """Return the first case called ``name``.

        With ``strict`` a duplicated name raises :class:`DuplicateCaseName`.
        """

        matches = [case for case in self.cases if case.name == name]
        if not matches:
            return None
        if strict and len(matches) > 1:
            raise DuplicateCaseName(
                f"Case '{name}' appears {len(matches)} times in report '{self.name}'"
            )
        return matches[0]
