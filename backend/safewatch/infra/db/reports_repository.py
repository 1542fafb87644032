from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from safewatch.domain.errors import ReportNotFoundError
from safewatch.domain.ids import IdGenerator, new_report_id
from safewatch.domain.models import Location, Report, ReportStatus
from safewatch.domain.store import MAX_ID_ATTEMPTS

from .tables import reports_table

logger = logging.getLogger(__name__)


class SqlReportStore:
    """Report store backed by a SQLAlchemy engine.

    Insertion order is the autoincrement ``seq`` column; each write is a
    single transaction so readers never see a half-written row.
    """

    def __init__(self, engine: Engine, id_generator: IdGenerator = new_report_id):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine
        self._id_generator = id_generator

    def append(self, report: Report) -> str:
        candidate = report
        for _ in range(MAX_ID_ATTEMPTS):
            try:
                with self.engine.begin() as conn:
                    if self._exists(conn, candidate.id):
                        candidate = self._regenerate(candidate)
                        continue
                    conn.execute(insert(reports_table).values(**self._to_row(candidate)))
                return candidate.id
            except IntegrityError:
                # a concurrent writer took the id between the check and the insert
                candidate = self._regenerate(candidate)
        raise RuntimeError(f"Could not allocate a unique report id after {MAX_ID_ATTEMPTS} attempts")

    def get(self, report_id: str) -> Report:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(reports_table).where(reports_table.c.id == report_id)
            ).mappings().first()
        if row is None:
            raise ReportNotFoundError(report_id)
        return self._from_row(row)

    def update_status(self, report_id: str, status: ReportStatus) -> Report:
        status = ReportStatus.parse(status)
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            result = conn.execute(
                update(reports_table)
                .where(reports_table.c.id == report_id)
                .values(status=status.value, updated_at=now)
            )
            if result.rowcount == 0:
                raise ReportNotFoundError(report_id)
            row = conn.execute(
                select(reports_table).where(reports_table.c.id == report_id)
            ).mappings().one()
        return self._from_row(row)

    def snapshot(self) -> Tuple[Report, ...]:
        with self.engine.begin() as conn:
            rows = conn.execute(select(reports_table).order_by(reports_table.c.seq)).mappings().all()
        return tuple(self._from_row(row) for row in rows)

    def list_reports(self) -> Tuple[Report, ...]:
        return self.snapshot()

    def _regenerate(self, report: Report) -> Report:
        new_id = self._id_generator()
        logger.warning("Report id collision on %s, reassigned to %s", report.id, new_id)
        return replace(report, id=new_id)

    @staticmethod
    def _exists(conn: Connection, report_id: str) -> bool:
        found = conn.execute(
            select(reports_table.c.seq).where(reports_table.c.id == report_id)
        ).scalar_one_or_none()
        return found is not None

    @staticmethod
    def _to_row(report: Report) -> Dict[str, Any]:
        return {
            "id": report.id,
            "category": report.category.value,
            "description": report.description,
            "contact_info": report.contact_info,
            "lat": report.location.latitude if report.location else None,
            "lon": report.location.longitude if report.location else None,
            "media_ref": report.media_ref,
            "submitted_at": report.submitted_at,
            "status": report.status.value,
            "updated_at": report.submitted_at,
        }

    @staticmethod
    def _from_row(row) -> Report:
        location: Optional[Location] = None
        if row["lat"] is not None and row["lon"] is not None:
            location = Location(latitude=row["lat"], longitude=row["lon"])
        # SQLite drops tzinfo; Report normalises naive values to UTC
        return Report(
            id=row["id"],
            category=row["category"],
            description=row["description"],
            contact_info=row["contact_info"],
            location=location,
            media_ref=row["media_ref"],
            submitted_at=row["submitted_at"],
            status=row["status"],
        )
