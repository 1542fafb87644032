from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from safewatch.api.main import create_app
from safewatch.domain.clustering import HotspotSettings
from safewatch.domain.ids import SequentialIds
from safewatch.infra.db.reports_repository import SqlReportStore
from safewatch.infra.db.tables import metadata
from safewatch.infra.memory_store import InMemoryReportStore
from safewatch.notifications.hub import NotificationHub
from safewatch.notifications.registry import ChannelRegistry
from safewatch.services.report_service import ReportService

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _RecordingChannel:
    def __init__(self) -> None:
        self.sent = []

    def send(self, notification) -> None:
        self.sent.append(notification)


def _build_service(store) -> ReportService:
    registry = ChannelRegistry()
    registry.register("recording", _RecordingChannel())
    return ReportService(
        store,
        settings=HotspotSettings(),
        hub=NotificationHub(registry, recipient="authorities@example.org"),
        clock=lambda: FIXED_NOW,
        report_ids=SequentialIds(prefix="R"),
        hotspot_ids=SequentialIds(prefix="HS-"),
    )


@pytest.fixture()
def api_client():
    app = create_app(service=_build_service(InMemoryReportStore()))
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def sql_api_client(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'api_tests.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(engine)
    app = create_app(service=_build_service(SqlReportStore(engine)))
    with TestClient(app) as client:
        yield client
    metadata.drop_all(engine)
