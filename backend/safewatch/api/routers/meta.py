from __future__ import annotations

from fastapi import APIRouter, Depends

from safewatch.api.deps import get_service
from safewatch.services.report_service import ReportService

router = APIRouter(tags=["meta"])


@router.get("/stats")
def get_stats(service: ReportService = Depends(get_service)):
    return service.get_stats()


@router.get("/health")
def health(service: ReportService = Depends(get_service)):
    return {
        "status": "OK",
        "timestamp": service.clock().isoformat(),
        "features": {
            "hotspotDetection": True,
            "batchAggregation": True,
            "notificationChannels": service.hub.channels if service.hub else [],
        },
    }
