from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from safewatch.domain.clustering import HotspotSettings, aggregate_hotspots, detect_hotspot
from safewatch.domain.errors import ReportValidationError
from safewatch.domain.ids import IdGenerator, new_hotspot_id, new_report_id
from safewatch.domain.models import (
    Category,
    DetectionResult,
    Hotspot,
    Location,
    Report,
    ReportStatus,
    to_utc,
)
from safewatch.domain.store import ReportStore
from safewatch.notifications.hub import NotificationHub

from .stats import CommunityStats

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SubmissionResult:
    report: Report
    detection: DetectionResult

    def to_payload(self) -> dict:
        payload = {
            "success": True,
            "reportId": self.report.id,
            "message": "Report submitted successfully",
            "submittedAt": self.report.submitted_at.isoformat(),
            "hotspotAlert": self.detection.is_hotspot,
            "hotspotId": self.detection.hotspot_id,
        }
        if self.detection.is_hotspot:
            payload["clusterInfo"] = self.detection.cluster_info()
        return payload


@dataclass(frozen=True)
class HotspotListing:
    hotspots: List[Hotspot]
    generated_at: datetime

    @property
    def total_active(self) -> int:
        return len(self.hotspots)

    def to_payload(self) -> dict:
        return {
            "hotspots": [h.to_dict() for h in self.hotspots],
            "totalActiveHotspots": self.total_active,
        }


class ReportService:
    def __init__(
        self,
        store: ReportStore,
        *,
        settings: Optional[HotspotSettings] = None,
        hub: Optional[NotificationHub] = None,
        clock: Clock = utc_now,
        report_ids: IdGenerator = new_report_id,
        hotspot_ids: IdGenerator = new_hotspot_id,
        stats: Optional[CommunityStats] = None,
    ):
        if store is None:
            raise ValueError("store is required")
        self.store = store
        self.settings = settings or HotspotSettings()
        self.hub = hub
        self.clock = clock
        self.stats = stats or CommunityStats()
        self._report_ids = report_ids
        self._hotspot_ids = hotspot_ids

    def submit(
        self,
        *,
        category,
        description: str,
        contact_info: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        media_ref: Optional[str] = None,
        submitted_at: Optional[datetime] = None,
    ) -> SubmissionResult:
        # Validate before an id is drawn or the store is touched.
        category = Category.parse(category)
        description = (description or "").strip()
        if not description:
            raise ReportValidationError("description must not be empty")
        location = Location.from_parts(latitude, longitude)

        report = Report(
            id=self._report_ids(),
            category=category,
            description=description,
            contact_info=(contact_info or "").strip() or None,
            location=location,
            media_ref=media_ref or None,
            submitted_at=to_utc(submitted_at) if submitted_at else self.clock(),
        )

        before = self.store.snapshot()
        report_id = self.store.append(report)
        if report_id != report.id:
            report = replace(report, id=report_id)
        self.stats.record_submission()

        detection = detect_hotspot(report, before, self.clock(), self.settings, self._hotspot_ids)
        logger.info(
            "Report %s accepted (category=%s, located=%s, hotspot=%s)",
            report.id,
            report.category.value,
            report.location is not None,
            detection.is_hotspot,
        )
        if detection.is_hotspot:
            logger.warning(
                "Hotspot %s: %d reports near report %s",
                detection.hotspot_id,
                detection.report_count,
                report.id,
            )

        if self.hub is not None:
            self.hub.dispatch(report, detection)
        return SubmissionResult(report=report, detection=detection)

    def get_report(self, report_id: str) -> Report:
        return self.store.get(report_id)

    def list_reports(self) -> Tuple[Report, ...]:
        return self.store.snapshot()

    def update_status(self, report_id: str, status) -> Report:
        status = ReportStatus.parse(status)
        report = self.store.update_status(report_id, status)
        logger.info("Report %s moved to %s", report_id, status.value)
        return report

    def list_hotspots(self, now: Optional[datetime] = None) -> HotspotListing:
        now = to_utc(now) if now else self.clock()
        hotspots = aggregate_hotspots(self.store.snapshot(), now, self.settings, self._hotspot_ids)
        return HotspotListing(hotspots=hotspots, generated_at=now)

    def get_stats(self) -> dict:
        return self.stats.as_dict()
