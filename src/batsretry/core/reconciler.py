"""Rewrite a report so a case that now passes looks like it always did."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from batsretry.errors import RewriteFailure
from batsretry.log import ContextLogger, get_logger
from batsretry.report import Case, read_report, write_report


def reconcile_case(
    report_path: Union[str, Path],
    case_name: str,
    duration_s: float,
    *,
    strict: bool = False,
    logger: Optional[ContextLogger] = None,
) -> Case:
    """Clear the markers of ``case_name`` in the report at ``report_path``.

    The report is re-read from disk, the first case with a matching name (or
    the only one, with ``strict``) is marked passed with ``duration_s``, and the
    document is overwritten. Every failure is raised as :class:`RewriteFailure`.
    """

    path = Path(report_path)
    log = (logger or get_logger()).bind(testcase=case_name)
    log.info("Updating testfile for testcase")
    try:
        report = read_report(path)
        case = report.find_case(case_name, strict=strict)
        if case is None:
            raise LookupError(f"testcase '{case_name}' not found in report '{report.name}'")
        log.debug(f"Clearing {case.status} markers")
        case.mark_passed(duration_s)
        write_report(path, report)
    except (OSError, LookupError, ValueError) as exc:
        log.bind(error=str(exc)).warning("Failed to update testfile")
        raise RewriteFailure(path, case_name, exc) from exc
    return case
