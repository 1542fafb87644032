from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from safewatch import settings
from safewatch.api.routers import hotspots, meta, reports
from safewatch.infra.memory_store import InMemoryReportStore
from safewatch.notifications.channels import LoggingChannel, WebhookChannel
from safewatch.notifications.hub import NotificationHub
from safewatch.notifications.registry import ChannelRegistry
from safewatch.services.report_service import ReportService


def build_service() -> ReportService:
    if settings.database_url():
        from safewatch.infra.database import get_engine
        from safewatch.infra.db.reports_repository import SqlReportStore

        store = SqlReportStore(get_engine())
    else:
        store = InMemoryReportStore()

    registry = ChannelRegistry()
    registry.register("log", LoggingChannel())
    url = settings.webhook_url()
    if url:
        registry.register("webhook", WebhookChannel(url))
    hub = NotificationHub(registry, recipient=settings.authority_email())
    return ReportService(store, settings=settings.load_hotspot_settings(), hub=hub)


def create_app(service: Optional[ReportService] = None) -> FastAPI:
    app = FastAPI(title="Community Safety Hotspots API", version="0.1.0")
    app.state.report_service = service if service is not None else build_service()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(reports.router, prefix="/api")
    app.include_router(hotspots.router, prefix="/api")
    app.include_router(meta.router, prefix="/api")
    return app


app = create_app()
