from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .errors import ReportValidationError


class Category(str, Enum):
    DRUG_ACTIVITY = "Drug Activity"
    SUSPICIOUS_BEHAVIOR = "Suspicious Behavior"
    PUBLIC_SAFETY = "Public Safety"
    ENVIRONMENTAL_HAZARD = "Environmental Hazard"
    OTHER = "Other"

    @classmethod
    def parse(cls, value) -> "Category":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(c.value for c in cls)
            raise ReportValidationError(f"Unknown category '{value}'. Expected one of: {allowed}") from exc


class ReportStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"

    @classmethod
    def parse(cls, value) -> "ReportStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(s.value for s in cls)
            raise ReportValidationError(f"Unknown status '{value}'. Expected one of: {allowed}") from exc


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def from_parts(cls, latitude: Optional[float], longitude: Optional[float]) -> Optional["Location"]:
        """Build a location from loose parts; both or neither must be given."""
        if latitude is None and longitude is None:
            return None
        if latitude is None or longitude is None:
            raise ReportValidationError("location requires both latitude and longitude")
        try:
            lat, lng = float(latitude), float(longitude)
        except (TypeError, ValueError) as exc:
            raise ReportValidationError("latitude and longitude must be numbers") from exc
        if not -90.0 <= lat <= 90.0:
            raise ReportValidationError(f"latitude {lat} out of range [-90, 90]")
        if not -180.0 <= lng <= 180.0:
            raise ReportValidationError(f"longitude {lng} out of range [-180, 180]")
        return cls(latitude=lat, longitude=lng)


@dataclass(frozen=True)
class Report:
    id: str
    category: Category
    description: str
    submitted_at: datetime
    contact_info: Optional[str] = None
    location: Optional[Location] = None
    media_ref: Optional[str] = None
    status: ReportStatus = ReportStatus.SUBMITTED

    def __post_init__(self):
        if not self.id:
            raise ReportValidationError("id is required")
        object.__setattr__(self, "category", Category.parse(self.category))
        object.__setattr__(self, "status", ReportStatus.parse(self.status))
        if not self.description or not self.description.strip():
            raise ReportValidationError("description must not be empty")
        object.__setattr__(self, "submitted_at", to_utc(self.submitted_at))

    @property
    def is_anonymous(self) -> bool:
        return not self.contact_info

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "description": self.description,
            "contactInfo": self.contact_info,
            "location": (
                {"latitude": self.location.latitude, "longitude": self.location.longitude}
                if self.location
                else None
            ),
            "mediaRef": self.media_ref,
            "submittedAt": self.submitted_at.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Hotspot:
    id: str
    center: Location
    members: Tuple[str, ...]
    categories: FrozenSet[Category]
    radius: float
    time_window: timedelta
    detected_at: datetime

    @property
    def report_count(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "center": {"latitude": self.center.latitude, "longitude": self.center.longitude},
            "reportCount": self.report_count,
            "reports": list(self.members),
            "categories": sorted(c.value for c in self.categories),
            "radius": self.radius,
            "timeWindow": _millis(self.time_window),
            "lastUpdated": self.detected_at.isoformat(),
        }


@dataclass(frozen=True)
class DetectionResult:
    is_hotspot: bool
    hotspot_id: Optional[str] = None
    center: Optional[Location] = None
    report_count: int = 0
    radius: Optional[float] = None
    time_window: Optional[timedelta] = field(default=None)

    @classmethod
    def negative(cls) -> "DetectionResult":
        return cls(is_hotspot=False)

    def cluster_info(self) -> Optional[dict]:
        if not self.is_hotspot or self.center is None:
            return None
        return {
            "center": {"latitude": self.center.latitude, "longitude": self.center.longitude},
            "reportCount": self.report_count,
            "radius": self.radius,
            "timeWindow": _millis(self.time_window) if self.time_window is not None else None,
        }


def _millis(delta: timedelta) -> int:
    return int(delta.total_seconds() * 1000)
