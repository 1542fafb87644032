from __future__ import annotations

from typing import Protocol, Tuple

from .models import Report, ReportStatus

# Upper bound on id regeneration attempts after a collision.
MAX_ID_ATTEMPTS = 16


class ReportStore(Protocol):
    """Contract shared by every report backend.

    ``append`` is atomic with respect to other appends and returns the id the
    report was stored under, which differs from ``report.id`` only after a
    collision. ``snapshot`` returns an immutable, insertion-ordered view that
    later writes never alter.
    """

    def append(self, report: Report) -> str:
        ...

    def get(self, report_id: str) -> Report:
        ...

    def update_status(self, report_id: str, status: ReportStatus) -> Report:
        ...

    def snapshot(self) -> Tuple[Report, ...]:
        ...
