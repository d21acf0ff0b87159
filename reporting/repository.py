"""
Reporting - Report Repository.

============================================================
PURPOSE
============================================================
Persists epoch reports through SQLAlchemy.

- Explicit transaction boundaries
- Structured logging with row counts
- Hard failures (ReportingError) on persistence errors

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator, List

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from allocation.types import ActionStatus
from core.exceptions import ReportingError

from .models import Base, EpochReportRecord
from .types import EpochReport


logger = logging.getLogger(__name__)


class EpochReportRepository:
    """SQLAlchemy-backed store of epoch reports."""

    def __init__(self, database_url: str, echo: bool = False):
        self._engine = create_engine(database_url, echo=echo, future=True)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(f"Report repository using: {database_url.split('@')[-1]}")

    def create_tables(self) -> None:
        Base.metadata.create_all(self._engine)

    @contextmanager
    def transaction_scope(self) -> Generator[Session, None, None]:
        """
        Commits only if no exception occurs.
        Rolls back on any SQLAlchemy error.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Report transaction failed, rolling back: {e}")
            session.rollback()
            raise ReportingError(f"Report persistence failed: {e}", cause=e) from e
        finally:
            session.close()

    def save(self, report: EpochReport) -> int:
        """
        Persist one report.

        Returns:
            Row id
        """
        record = EpochReportRecord(
            epoch_number=report.epoch_number,
            epoch_timestamp=report.timestamp,
            fees_detected_sol=report.fees_detected,
            buyback_sol=report.allocations.buyback,
            lp_sol=report.allocations.lp,
            burn_sol=report.allocations.burn,
            cooling_sol=report.allocations.cooling,
            health=report.ice_health.health,
            health_status=report.ice_health.status.value,
            action_count=len(report.actions),
            failed_action_count=sum(
                1 for a in report.actions if a.status == ActionStatus.FAILED
            ),
            report=report.to_dict(),
        )

        with self.transaction_scope() as session:
            session.add(record)
            session.flush()
            record_id = record.id

        logger.info(f"Persist epoch_reports: inserted=1 (epoch={report.epoch_number})")
        return record_id

    def list_recent(self, limit: int = 10) -> List[EpochReport]:
        """Most recent reports first."""
        with self.transaction_scope() as session:
            rows = session.execute(
                select(EpochReportRecord)
                .order_by(
                    EpochReportRecord.epoch_timestamp.desc(),
                    EpochReportRecord.epoch_number.desc(),
                )
                .limit(limit)
            ).scalars().all()

            return [EpochReport.from_dict(row.report) for row in rows]

    def count(self) -> int:
        with self.transaction_scope() as session:
            return session.execute(
                select(func.count()).select_from(EpochReportRecord)
            ).scalar_one()

    def dispose(self) -> None:
        self._engine.dispose()


__all__ = ["EpochReportRepository"]
