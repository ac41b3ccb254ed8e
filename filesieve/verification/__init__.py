"""Filesieve verification: truth scoring and report rendering."""

from .report import render_report
from .service import (
    ConfigurationSummary,
    FilterVerificationService,
    ReportSummary,
    VerificationMetrics,
    VerificationReport,
)

__all__ = [
    "FilterVerificationService",
    "VerificationReport",
    "VerificationMetrics",
    "ReportSummary",
    "ConfigurationSummary",
    "render_report",
]
