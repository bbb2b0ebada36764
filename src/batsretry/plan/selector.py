"""Select the non-passing cases of a decoded report."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from batsretry.errors import UnresolvableSource
from batsretry.log import ContextLogger, get_logger
from batsretry.report import Report

from .models import Selection

DEFAULT_BASE_DIR_PROPERTY = "BATS_CWD"


def resolve_source_file(report: Report, base_dir_property: str = DEFAULT_BASE_DIR_PROPERTY) -> Path:
    base_dir = report.property(base_dir_property)
    if not base_dir:
        raise UnresolvableSource(
            f"Unable to generate testfile path: report '{report.name}' "
            f"has no '{base_dir_property}' property"
        )
    # An absolute suite name is still joined under the base directory.
    return Path(base_dir) / report.name.lstrip("/")


def select_cases(
    report: Report,
    *,
    base_dir_property: str = DEFAULT_BASE_DIR_PROPERTY,
    logger: Optional[ContextLogger] = None,
) -> Selection:
    """Return the report's source file and its failed or skipped case names, in order."""

    log = logger or get_logger()
    source_file = resolve_source_file(report, base_dir_property)
    names: List[str] = []
    for case in report.cases:
        if case.passed:
            continue
        log.bind(testcase=case.name, status=case.status).info(f"Adding {case.status} testcase")
        names.append(case.name)
    return Selection(source_file=source_file, case_names=tuple(names))
