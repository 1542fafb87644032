from __future__ import annotations

from threading import Lock


class CommunityStats:
    """Counters shown on the app's home screen; not part of clustering."""

    def __init__(self, community_members: int = 1) -> None:
        self._lock = Lock()
        self._reports_submitted = 0
        self._incidents_recorded = 0
        self._community_members = community_members

    def record_submission(self) -> None:
        with self._lock:
            self._reports_submitted += 1
            self._incidents_recorded += 1

    def as_dict(self) -> dict:
        with self._lock:
            return {
                "reportsSubmitted": self._reports_submitted,
                "incidentsRecorded": self._incidents_recorded,
                "communityMembers": self._community_members,
            }
