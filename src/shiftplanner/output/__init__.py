"""Output generation for schedule results."""

from shiftplanner.output.report_generator import ReportGenerator

__all__ = [
    "ReportGenerator",
]
