"""Report model and codec exports."""
from .codec import decode, encode, format_seconds, read_report, write_report
from .models import Case, Failure, Report

__all__ = [
    "Case",
    "Failure",
    "Report",
    "decode",
    "encode",
    "format_seconds",
    "read_report",
    "write_report",
]
