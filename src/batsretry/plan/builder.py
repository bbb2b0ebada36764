"""Build retry plans from a directory of reports and render them as shell scripts."""
from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import List, Optional, Union

from batsretry.config import Settings
from batsretry.errors import MalformedReport, ReportProcessingError, UnresolvableSource
from batsretry.log import ContextLogger, get_logger
from batsretry.report import read_report

from .models import ReportEntry, RetryCommand, RetryPlan
from .selector import select_cases

PathLike = Union[str, Path]

SCRIPT_MODE = 0o700


def escape_case_name(name: str) -> str:
    """Escape the characters the runner's ``--filter`` regex treats as groups."""

    return name.replace("(", "\\(").replace(")", "\\)")


def discover_reports(directory: PathLike, suffix: str = ".xml") -> List[Path]:
    """List report files in ``directory`` sorted by name; OSError if unreadable."""

    root = Path(directory)
    return sorted(
        (path for path in root.iterdir() if path.name.endswith(suffix) and path.is_file()),
        key=lambda path: path.name,
    )


def build_plan(
    directory: PathLike,
    settings: Optional[Settings] = None,
    *,
    logger: Optional[ContextLogger] = None,
) -> RetryPlan:
    """Decode every report in ``directory`` and collect its non-passing cases.

    An empty plan means no report files were found. Any report that cannot be
    read, parsed or resolved aborts the whole build with
    :class:`ReportProcessingError`.
    """

    settings = settings or Settings()
    log = (logger or get_logger()).bind(**{"test-directory": str(directory)})
    entries: List[ReportEntry] = []
    for report_path in discover_reports(directory, settings.report_suffix):
        file_log = log.bind(file=report_path.name)
        file_log.info("Processing")
        try:
            report = read_report(report_path)
            selection = select_cases(
                report,
                base_dir_property=settings.base_dir_property,
                logger=file_log,
            )
        except (OSError, MalformedReport, UnresolvableSource) as exc:
            file_log.bind(error=str(exc)).warning("Error processing file")
            raise ReportProcessingError(report_path.name, exc) from exc
        commands = tuple(
            RetryCommand(case_name=name, source_file=selection.source_file)
            for name in selection.case_names
        )
        entries.append(ReportEntry(report_path=report_path, commands=commands))
    return RetryPlan(entries=tuple(entries))


def build_command(command: RetryCommand, settings: Settings) -> List[str]:
    return [
        *settings.runner,
        settings.filter_flag,
        escape_case_name(command.case_name),
        str(command.source_file),
    ]


def render_script(plan: RetryPlan, settings: Optional[Settings] = None) -> str:
    settings = settings or Settings()
    runner = " ".join(shlex.quote(part) for part in settings.runner)
    lines = [settings.shebang, settings.strict_mode, ""]
    for _, command in plan.commands():
        lines.append(
            f"{runner} {settings.filter_flag} {_single_quote(escape_case_name(command.case_name))} "
            f"{shlex.quote(str(command.source_file))}"
        )
    return "".join(f"{line}\n" for line in lines)


def write_script(path: PathLike, text: str) -> Path:
    """Write ``text`` to ``path`` and make it executable by its owner."""

    target = Path(path)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(text)
    os.chmod(target, SCRIPT_MODE)
    return target


def _single_quote(value: str) -> str:
    return "'" + value.replace("'", "'\\''") + "'"
