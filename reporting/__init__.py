"""
Reporting Package.

This package generates epoch reports.
Reports are written to files, optionally persisted to a
database and optionally published to chat channels.

Modules:
- types: EpochReport and ReportSummary
- generator: JSON/text files, summary and CSV export
- models / repository: SQLAlchemy persistence
- publisher: Discord and Telegram summaries
"""

from .types import EpochReport, ReportSummary
from .generator import (
    SUMMARY_REPORT_LIMIT,
    CSV_HEADER,
    iso_timestamp,
    report_basename,
    format_report_as_text,
    ReportGenerator,
)
from .models import Base, EpochReportRecord
from .repository import EpochReportRepository
from .publisher import TELEGRAM_BASE_URL, format_report_summary, ReportPublisher


__all__ = [
    # Types
    "EpochReport",
    "ReportSummary",
    # Files
    "SUMMARY_REPORT_LIMIT",
    "CSV_HEADER",
    "iso_timestamp",
    "report_basename",
    "format_report_as_text",
    "ReportGenerator",
    # Persistence
    "Base",
    "EpochReportRecord",
    "EpochReportRepository",
    # Publishing
    "TELEGRAM_BASE_URL",
    "format_report_summary",
    "ReportPublisher",
]
