"""Case selection and retry-plan construction."""

from .builder import (
    build_command,
    build_plan,
    discover_reports,
    escape_case_name,
    render_script,
    write_script,
)
from .models import ReportEntry, RetryCommand, RetryPlan, Selection
from .selector import resolve_source_file, select_cases

__all__ = [
    "ReportEntry",
    "RetryCommand",
    "RetryPlan",
    "Selection",
    "build_command",
    "build_plan",
    "discover_reports",
    "escape_case_name",
    "render_script",
    "resolve_source_file",
    "select_cases",
    "write_script",
]
