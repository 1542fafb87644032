from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence
import math

from .models import Location, Report, to_utc


def distance(a: Location, b: Location) -> float:
    """Planar distance in degree space.

    Lat/lng are treated as flat x/y. Only meaningful at neighbourhood scale;
    the clustering radius is calibrated against this metric, not metres.
    """
    return math.sqrt((a.latitude - b.latitude) ** 2 + (a.longitude - b.longitude) ** 2)


def filter_recent(snapshot: Iterable[Report], now: datetime, time_window: timedelta) -> List[Report]:
    # age == time_window is still recent
    now = to_utc(now)
    return [
        report
        for report in snapshot
        if report.location is not None and now - report.submitted_at <= time_window
    ]


def centroid(reports: Sequence[Report]) -> Location:
    count = len(reports)
    if count == 0:
        raise ValueError("centroid of an empty group is undefined")
    lat = sum(r.location.latitude for r in reports) / count
    lng = sum(r.location.longitude for r in reports) / count
    return Location(latitude=lat, longitude=lng)


def within_radius(reports: Iterable[Report], origin: Location, radius: float) -> List[Report]:
    return [r for r in reports if distance(r.location, origin) <= radius]
