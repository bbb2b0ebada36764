from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple
from xml.sax.saxutils import quoteattr

import pytest

from batsretry.log import LOGGER_NAME

CaseSpec = Tuple[str, str]  # (name, "passed" | "failed" | "skipped")


def junit_document(
    suite_name: str,
    cases: Sequence[CaseSpec],
    *,
    base_dir: Optional[str] = "/src/tests",
    time: str = "1.5",
) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<testsuite name={quoteattr(suite_name)} tests="{len(cases)}" failures="0" errors="0" '
        'skipped="0" time="7" timestamp="2024-03-01T10:00:00" hostname="ci-runner">',
    ]
    if base_dir is not None:
        lines += [
            "    <properties>",
            f"        <property name=\"BATS_CWD\" value={quoteattr(base_dir)}/>",
            "    </properties>",
        ]
    for name, status in cases:
        lines.append(f"    <testcase classname={quoteattr(suite_name)} name={quoteattr(name)} time=\"{time}\">")
        if status == "failed":
            lines.append('        <failure type="failure">(in test file, line 12)\n  `[ "$status" -eq 0 ]\' failed</failure>')
        elif status == "skipped":
            lines.append("        <skipped>not ready</skipped>")
        lines.append("    </testcase>")
    lines += ["    <system-out>run output</system-out>", "</testsuite>"]
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_report() -> Callable[..., Path]:
    """Write a JUnit report into a directory and return its path."""

    def _make(
        directory: Path,
        filename: str,
        suite_name: str,
        cases: Sequence[CaseSpec],
        **kwargs,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(junit_document(suite_name, cases, **kwargs), encoding="utf-8")
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
