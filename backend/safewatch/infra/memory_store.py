from __future__ import annotations

import logging
from dataclasses import replace
from threading import Lock
from typing import Dict, List, Tuple

from safewatch.domain.errors import ReportNotFoundError
from safewatch.domain.ids import IdGenerator, new_report_id
from safewatch.domain.models import Report, ReportStatus
from safewatch.domain.store import MAX_ID_ATTEMPTS

logger = logging.getLogger(__name__)


class InMemoryReportStore:
    """Process-local report store guarded by a single writer lock."""

    def __init__(self, id_generator: IdGenerator = new_report_id) -> None:
        self._id_generator = id_generator
        self._lock = Lock()
        self._records: List[Report] = []
        self._positions: Dict[str, int] = {}

    def append(self, report: Report) -> str:
        with self._lock:
            report = self._with_unique_id(report)
            self._positions[report.id] = len(self._records)
            self._records.append(report)
            return report.id

    def get(self, report_id: str) -> Report:
        with self._lock:
            position = self._positions.get(report_id)
            if position is None:
                raise ReportNotFoundError(report_id)
            return self._records[position]

    def update_status(self, report_id: str, status: ReportStatus) -> Report:
        status = ReportStatus.parse(status)
        with self._lock:
            position = self._positions.get(report_id)
            if position is None:
                raise ReportNotFoundError(report_id)
            updated = replace(self._records[position], status=status)
            self._records[position] = updated
            return updated

    def snapshot(self) -> Tuple[Report, ...]:
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _with_unique_id(self, report: Report) -> Report:
        if report.id not in self._positions:
            return report
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_generator()
            if candidate not in self._positions:
                logger.warning("Report id collision on %s, reassigned to %s", report.id, candidate)
                return replace(report, id=candidate)
        raise RuntimeError(f"Could not allocate a unique report id after {MAX_ID_ATTEMPTS} attempts")
