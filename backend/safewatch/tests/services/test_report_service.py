from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from safewatch.domain.clustering import HotspotSettings
from safewatch.domain.errors import ReportNotFoundError, ReportValidationError
from safewatch.domain.ids import SequentialIds
from safewatch.domain.models import ReportStatus
from safewatch.infra.memory_store import InMemoryReportStore
from safewatch.notifications.hub import NotificationHub
from safewatch.notifications.registry import ChannelRegistry
from safewatch.services.report_service import ReportService

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
LAT, LNG = 40.4168, -3.7038


class RecordingChannel:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []

    def send(self, notification) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append(notification)


def build_service(*channels, store=None):
    registry = ChannelRegistry()
    for idx, channel in enumerate(channels):
        registry.register(f"ch{idx}", channel)
    hub = NotificationHub(registry, recipient="authorities@example.org")
    return ReportService(
        store if store is not None else InMemoryReportStore(),
        settings=HotspotSettings(),
        hub=hub,
        clock=lambda: NOW,
        report_ids=SequentialIds(prefix="R"),
        hotspot_ids=SequentialIds(prefix="HS-"),
    )


def submit_at(service, lat=LAT, lng=LNG, **kwargs):
    kwargs.setdefault("category", "Drug Activity")
    kwargs.setdefault("description", "Dealing near the bus stop")
    return service.submit(latitude=lat, longitude=lng, **kwargs)


def test_third_colocated_submission_raises_alert():
    channel = RecordingChannel()
    service = build_service(channel)

    first = submit_at(service)
    second = submit_at(service)
    third = submit_at(service)

    assert [first.detection.is_hotspot, second.detection.is_hotspot] == [False, False]
    assert third.detection.is_hotspot
    assert third.detection.hotspot_id == "HS-0001"
    assert third.detection.report_count == 3
    assert [r.id for r in service.list_reports()] == ["R0001", "R0002", "R0003"]
    assert channel.sent[-1].urgent is True
    assert channel.sent[-1].subject == "URGENT: Hotspot Alert - Drug Activity (HS-0001)"
    assert channel.sent[0].subject == "New Community Safety Report - Drug Activity"


def test_submission_payload_matches_wire_format():
    service = build_service()
    submit_at(service)
    submit_at(service)
    payload = submit_at(service).to_payload()

    assert payload["success"] is True
    assert payload["reportId"] == "R0003"
    assert payload["hotspotAlert"] is True
    assert payload["clusterInfo"]["reportCount"] == 3
    assert payload["clusterInfo"]["center"] == {"latitude": LAT, "longitude": LNG}


def test_report_without_location_never_alerts():
    service = build_service()
    for _ in range(4):
        result = service.submit(category="Public Safety", description="Loud noise, no GPS")
        assert result.detection.is_hotspot is False
        assert result.report.location is None
        assert "clusterInfo" not in result.to_payload()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"category": "Jaywalking", "description": "bad"},
        {"category": "Other", "description": "   "},
        {"category": "Other", "description": "partial", "latitude": 40.0},
    ],
)
def test_invalid_submissions_leave_store_untouched(kwargs):
    ids = SequentialIds(prefix="R")
    store = InMemoryReportStore()
    service = ReportService(store, clock=lambda: NOW, report_ids=ids)

    with pytest.raises(ReportValidationError):
        service.submit(**kwargs)

    assert store.snapshot() == ()
    assert service.get_stats()["reportsSubmitted"] == 0
    assert ids() == "R0001"


def test_contact_info_blank_means_anonymous():
    service = build_service()
    report = service.submit(category="Other", description="x", contact_info="  ").report
    assert report.contact_info is None
    assert report.is_anonymous


def test_notification_failure_does_not_undo_submission():
    broken = RecordingChannel(fail=True)
    healthy = RecordingChannel()
    service = build_service(broken, healthy)

    result = submit_at(service)

    assert service.get_report(result.report.id) == result.report
    assert len(healthy.sent) == 1
    assert service.hub.errors[0][0] == "ch0"
    assert service.get_stats()["reportsSubmitted"] == 1


def test_update_status_and_lookup_errors():
    service = build_service()
    report_id = submit_at(service).report.id

    assert service.update_status(report_id, "resolved").status is ReportStatus.RESOLVED
    with pytest.raises(ReportValidationError):
        service.update_status(report_id, "closed")
    with pytest.raises(ReportNotFoundError):
        service.update_status("missing", "resolved")
    with pytest.raises(ReportNotFoundError):
        service.get_report("missing")


def test_stats_count_submissions():
    service = build_service()
    submit_at(service)
    service.submit(category="Other", description="no location")
    assert service.get_stats() == {
        "reportsSubmitted": 2,
        "incidentsRecorded": 2,
        "communityMembers": 1,
    }


def test_scenario_close_reports_within_the_hour_list_one_hotspot():
    service = build_service()
    # ~100 m apart in degree space
    for offset, minutes in ((0.0, 50), (0.0006, 30), (0.0009, 5)):
        submit_at(service, lat=LAT + offset, submitted_at=NOW - timedelta(minutes=minutes))

    listing = service.list_hotspots()

    assert listing.total_active == 1
    assert listing.hotspots[0].report_count == 3
    assert listing.to_payload()["totalActiveHotspots"] == 1


def test_scenario_spread_reports_list_nothing():
    service = build_service()
    for offset in (0.0, 0.018, 0.036):
        submit_at(service, lat=LAT + offset)
    assert service.list_hotspots().total_active == 0


def test_scenario_old_report_drops_out_of_the_window():
    service = build_service()
    submit_at(service, submitted_at=NOW - timedelta(hours=25))
    submit_at(service)
    third = submit_at(service)

    assert third.detection.is_hotspot is False
    assert service.list_hotspots().total_active == 0


class BarrierStore(InMemoryReportStore):
    """Holds each snapshot reader until ``parties`` readers have taken theirs."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self._barrier = threading.Barrier(parties, timeout=5)
        self.hold = True

    def snapshot(self):
        view = super().snapshot()
        if self.hold:
            self._barrier.wait()
        return view


def test_scenario_concurrent_submissions_converge_on_listing():
    store = BarrierStore(parties=2)
    service = build_service(store=store)

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(submit_at, service) for _ in range(2)]
        pair = [f.result() for f in futures]
    store.hold = False

    # each saw a snapshot without the other
    assert [r.detection.is_hotspot for r in pair] == [False, False]

    third = submit_at(service, lat=LAT + 0.0005)
    listing = service.list_hotspots()

    assert third.detection.is_hotspot is True
    assert listing.total_active == 1
    assert set(listing.hotspots[0].members) == {r.report.id for r in pair} | {third.report.id}


def test_listing_does_not_touch_the_store():
    service = build_service()
    for _ in range(3):
        submit_at(service)
    before = service.list_reports()

    service.list_hotspots()
    service.list_hotspots()

    assert service.list_reports() == before

