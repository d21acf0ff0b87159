"""
Reporting - ORM Models.

Epoch reports persisted for audit when a reports database is
configured.
"""

from datetime import datetime

from sqlalchemy import Column, BigInteger, Float, Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def utc_now():
    """Get current UTC timestamp."""
    return datetime.utcnow()


class EpochReportRecord(Base):
    """
    One executed epoch.

    Source: orchestrator.core
    Update Frequency: Per executed epoch
    """
    __tablename__ = "epoch_reports"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    epoch_number = Column(Integer, nullable=False, index=True)
    epoch_timestamp = Column(BigInteger, nullable=False)  # Unix seconds

    fees_detected_sol = Column(Float, nullable=False)
    buyback_sol = Column(Float, nullable=False, default=0.0)
    lp_sol = Column(Float, nullable=False, default=0.0)
    burn_sol = Column(Float, nullable=False, default=0.0)
    cooling_sol = Column(Float, nullable=False, default=0.0)

    health = Column(Float, nullable=False)
    health_status = Column(String(16), nullable=False)

    action_count = Column(Integer, nullable=False, default=0)
    failed_action_count = Column(Integer, nullable=False, default=0)

    report = Column(JSON, nullable=False)  # Full EpochReport.to_dict()

    created_at = Column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_epoch_reports_timestamp", "epoch_timestamp"),
    )


__all__ = ["Base", "EpochReportRecord"]
