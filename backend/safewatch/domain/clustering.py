from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Set

from .geometry import centroid, filter_recent, within_radius
from .ids import IdGenerator, new_hotspot_id
from .models import DetectionResult, Hotspot, Report, to_utc

# ~500 m at moderate latitudes, tuned for the planar metric in geometry.distance
DEFAULT_RADIUS_DEG = 0.005
DEFAULT_MIN_REPORTS = 3
DEFAULT_TIME_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class HotspotSettings:
    radius: float = DEFAULT_RADIUS_DEG
    min_reports: int = DEFAULT_MIN_REPORTS
    time_window: timedelta = DEFAULT_TIME_WINDOW

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError("radius must be positive")
        if self.min_reports < 1:
            raise ValueError("min_reports must be at least 1")
        if self.time_window <= timedelta(0):
            raise ValueError("time_window must be positive")


def detect_hotspot(
    new_report: Report,
    snapshot_before: Iterable[Report],
    now: datetime,
    settings: HotspotSettings = HotspotSettings(),
    hotspot_ids: IdGenerator = new_hotspot_id,
) -> DetectionResult:
    """Decide whether ``new_report`` completes a hotspot among earlier reports.

    ``snapshot_before`` must not contain ``new_report`` itself. The centre is the
    mean of the neighbours only; the new report's own coordinate is left out,
    unlike :func:`aggregate_hotspots` which averages the whole cluster.
    """
    if new_report.location is None:
        return DetectionResult.negative()

    recent = filter_recent(snapshot_before, now, settings.time_window)
    neighbors = within_radius(recent, new_report.location, settings.radius)
    if len(neighbors) + 1 < settings.min_reports:
        return DetectionResult.negative()

    return DetectionResult(
        is_hotspot=True,
        hotspot_id=hotspot_ids(),
        # min_reports == 1 can flag a report with no neighbours
        center=centroid(neighbors) if neighbors else new_report.location,
        report_count=len(neighbors) + 1,
        radius=settings.radius,
        time_window=settings.time_window,
    )


def aggregate_hotspots(
    snapshot: Iterable[Report],
    now: datetime,
    settings: HotspotSettings = HotspotSettings(),
    hotspot_ids: IdGenerator = new_hotspot_id,
) -> List[Hotspot]:
    """Greedy single pass over recent reports in insertion order.

    Each unprocessed report anchors a candidate cluster made of the recent
    reports within the radius that no earlier hotspot has claimed, so the
    hotspots never share a member. Clusters reaching ``min_reports`` mark
    their members as processed; smaller candidates are dropped and their
    anchor stays unprocessed. Membership depends only on the snapshot, ``now`` and the
    settings; hotspot ids are fresh on every call.
    """
    now = to_utc(now)
    recent = filter_recent(snapshot, now, settings.time_window)
    processed: Set[str] = set()
    hotspots: List[Hotspot] = []

    for anchor in recent:
        if anchor.id in processed:
            continue
        unclaimed = [r for r in recent if r.id not in processed]
        cluster = within_radius(unclaimed, anchor.location, settings.radius)
        if len(cluster) < settings.min_reports:
            continue
        processed.update(r.id for r in cluster)
        hotspots.append(
            Hotspot(
                id=hotspot_ids(),
                center=centroid(cluster),
                members=tuple(r.id for r in cluster),
                categories=frozenset(r.category for r in cluster),
                radius=settings.radius,
                time_window=settings.time_window,
                detected_at=now,
            )
        )
    return hotspots
