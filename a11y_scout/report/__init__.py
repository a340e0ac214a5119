"""a11y_scout.report: markdown-отчёты по страницам и их хранилище."""

from a11y_scout.report.markdown_report import NO_VIOLATIONS, format_report
from a11y_scout.report.store import ReportStore, report_slug

__all__ = ["NO_VIOLATIONS", "format_report", "ReportStore", "report_slug"]
