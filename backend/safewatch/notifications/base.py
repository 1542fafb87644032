from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Protocol

from safewatch.domain.models import DetectionResult, Report


@dataclass
class ReportNotification:
    recipient: str
    subject: str
    body: str
    urgent: bool = False
    payload: dict = field(default_factory=dict)


class NotificationChannel(Protocol):
    """Contract for anything that delivers report notifications to authorities."""

    def send(self, notification: ReportNotification) -> None:
        """Deliver ``notification``; raise on failure.

        The hub catches and records failures, so channels should not swallow
        their own errors.
        """
        raise NotImplementedError


def build_notification(report: Report, detection: DetectionResult, recipient: str) -> ReportNotification:
    category = report.category.value
    if detection.is_hotspot:
        subject = f"URGENT: Hotspot Alert - {category} ({detection.hotspot_id})"
    else:
        subject = f"New Community Safety Report - {category}"

    lines = ["New Community Safety Report", ""]
    if detection.is_hotspot:
        lines += [
            "HOTSPOT ALERT",
            f"Hotspot ID: {detection.hotspot_id}",
            f"Cluster Size: {detection.report_count} reports",
            f"Area: {_describe_radius(detection.radius)}",
            f"Time Window: {_describe_window(detection.time_window)}",
            "IMMEDIATE ACTION RECOMMENDED",
            "",
        ]
    lines += [
        f"Report ID: {report.id}",
        f"Category: {category}",
        f"Description: {report.description}",
        f"Submitted: {report.submitted_at.isoformat()}",
    ]
    if report.location:
        lat, lng = report.location.latitude, report.location.longitude
        lines += [
            "Location:",
            f"  Latitude: {lat}",
            f"  Longitude: {lng}",
            f"  Map: https://maps.google.com/?q={lat},{lng}",
        ]
    else:
        lines.append("Location: Not provided")
    lines.append(f"Contact Info: {report.contact_info}" if report.contact_info else "Contact Info: Anonymous report")
    lines.append(
        f"Evidence: Media attached ({report.media_ref})" if report.media_ref else "Evidence: No media attached"
    )

    return ReportNotification(
        recipient=recipient,
        subject=subject,
        body="\n".join(lines),
        urgent=detection.is_hotspot,
        payload={
            "report": report.to_dict(),
            "hotspotAlert": detection.is_hotspot,
            "hotspotId": detection.hotspot_id,
            "clusterInfo": detection.cluster_info(),
        },
    )


def _describe_radius(radius: Optional[float]) -> str:
    if radius is None:
        return "unknown"
    # 1 degree of latitude ~= 111 km
    return f"~{round(radius * 111_000)}m radius"


def _describe_window(window: Optional[timedelta]) -> str:
    if window is None:
        return "unknown"
    hours = window.total_seconds() / 3600
    return f"Last {hours:g} hours"
