"""
Reporting - File Report Generator.

============================================================
RESPONSIBILITY
============================================================
Writes epoch reports to the reports directory and reads
them back.

- epoch-<n>-<iso>.json: machine-readable report
- epoch-<n>-<iso>.txt:  operator-readable report
- Summary and CSV export over stored reports

============================================================
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple, Union

from core.exceptions import ReportingError

from .types import EpochReport, ReportSummary


logger = logging.getLogger(__name__)


SUMMARY_REPORT_LIMIT = 1000

CSV_HEADER = "EpochNumber,Timestamp,FeesDetected,Buyback,LP,Burn,Cooling,Health,Status,Actions"

RULE = "=" * 80
SUBRULE = "-" * 40


def iso_timestamp(unix_seconds: int) -> str:
    """ISO 8601 UTC with milliseconds and a Z suffix."""
    dt = datetime.fromtimestamp(unix_seconds, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def report_basename(report: EpochReport) -> str:
    safe = iso_timestamp(report.timestamp).replace(":", "-").replace(".", "-")
    return f"epoch-{report.epoch_number}-{safe}"


def format_report_as_text(report: EpochReport) -> str:
    """Render a report as plain text."""
    health = report.ice_health
    metrics = health.metrics
    allocations = report.allocations

    lines = [
        RULE,
        "ICE PROTOCOL EPOCH REPORT",
        RULE,
        "",
        "EPOCH METADATA",
        SUBRULE,
        f"Epoch Number: {report.epoch_number}",
        f"Timestamp: {iso_timestamp(report.timestamp)}",
        "",
        "FEE SUMMARY",
        SUBRULE,
        f"Total Fees Detected (SOL): {report.fees_detected:.4f}",
        "",
        "ALLOCATIONS",
        SUBRULE,
        f"Buyback (SOL):  {allocations.buyback:.4f}",
        f"LP Add (SOL):   {allocations.lp:.4f}",
        f"Burn (SOL):     {allocations.burn:.4f}",
        f"Cooling (SOL):  {allocations.cooling:.4f}",
        "",
        "ICE CUBE HEALTH",
        SUBRULE,
        f"Health Score: {health.health:.2f}/100",
        f"Status: {health.status.value}",
        f"Last Action: {iso_timestamp(health.last_action_time)}",
        "",
        "Health Metrics:",
        f"  Buyback Frequency:   {metrics.buyback_frequency:.2f}",
        f"  Buyback Coverage:    {metrics.buyback_coverage:.2f}",
        f"  Liquidity Depth:     {metrics.liquidity_depth:.2f}",
        f"  Volatility Penalty:  {metrics.volatility_penalty:.2f}",
        f"  Time Decay:          {metrics.time_decay:.2f}",
        "",
        "ACTIONS EXECUTED",
        SUBRULE,
    ]

    if not report.actions:
        lines.append("No actions executed this epoch.")
    for idx, action in enumerate(report.actions, start=1):
        lines.append(f"Action {idx}:")
        lines.append(f"  Type: {action.type.value}")
        lines.append(f"  Amount: {action.amount_sol:.4f} SOL")
        lines.append(f"  Status: {action.status.value}")
        if action.signature:
            lines.append(f"  Signature: {action.signature}")
        if action.error:
            lines.append(f"  Error: {action.error}")
        lines.append("")

    lines.extend(["TRANSACTION SIGNATURES", SUBRULE])
    if not report.tx_signatures:
        lines.append("No transactions.")
    lines.extend(f"{idx}. {sig}" for idx, sig in enumerate(report.tx_signatures, start=1))
    lines.append("")

    if report.errors:
        lines.extend(["ERRORS", SUBRULE])
        lines.extend(f"{idx}. {err}" for idx, err in enumerate(report.errors, start=1))
        lines.append("")

    lines.extend([RULE, "END OF REPORT", RULE])

    return "\n".join(lines)


class ReportGenerator:
    """Epoch report files in a single directory."""

    def __init__(self, reports_dir: Union[str, Path] = "./reports"):
        self.reports_dir = Path(reports_dir).resolve()

        if not self.reports_dir.exists():
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created reports directory: {self.reports_dir}")

    def generate_report(self, report: EpochReport) -> Tuple[Path, Path]:
        """
        Write the JSON and text renditions of a report.

        Returns:
            (json_path, txt_path)

        Raises:
            ReportingError: If either file cannot be written
        """
        basename = report_basename(report)
        json_file = self.reports_dir / f"{basename}.json"
        txt_file = self.reports_dir / f"{basename}.txt"

        try:
            json_file.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
            txt_file.write_text(format_report_as_text(report), encoding="utf-8")
        except OSError as e:
            raise ReportingError(
                f"Failed to write report for epoch {report.epoch_number}: {e}",
                context={"reports_dir": str(self.reports_dir)},
                cause=e,
            )

        logger.info(
            f"Report generated | epoch={report.epoch_number} "
            f"json={json_file.name} txt={txt_file.name}"
        )
        return json_file, txt_file

    def load_recent_reports(self, limit: int = 10) -> List[EpochReport]:
        """Most recent reports first; unreadable files are skipped."""
        reports = []

        for path in self.reports_dir.glob("epoch-*.json"):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                reports.append(EpochReport.from_dict(data))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Error loading report {path.name}: {e}")

        reports.sort(key=lambda r: (r.timestamp, r.epoch_number), reverse=True)
        return reports[:limit]

    def generate_summary(self) -> ReportSummary:
        reports = self.load_recent_reports(SUMMARY_REPORT_LIMIT)

        return ReportSummary(
            total_epochs=len(reports),
            total_fees=sum(r.fees_detected for r in reports),
            total_actions=sum(len(r.actions) for r in reports),
        )

    def export_to_csv(self) -> str:
        """CSV of stored reports, most recent first."""
        rows = [CSV_HEADER]

        for report in self.load_recent_reports(SUMMARY_REPORT_LIMIT):
            a = report.allocations
            rows.append(",".join([
                str(report.epoch_number),
                iso_timestamp(report.timestamp),
                f"{report.fees_detected:.4f}",
                f"{a.buyback:.4f}",
                f"{a.lp:.4f}",
                f"{a.burn:.4f}",
                f"{a.cooling:.4f}",
                f"{report.ice_health.health:.2f}",
                report.ice_health.status.value,
                str(len(report.actions)),
            ]))

        return "\n".join(rows)


__all__ = [
    "SUMMARY_REPORT_LIMIT",
    "CSV_HEADER",
    "iso_timestamp",
    "report_basename",
    "format_report_as_text",
    "ReportGenerator",
]
