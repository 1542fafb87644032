from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from safewatch.api.deps import get_service
from safewatch.services.report_service import ReportService

router = APIRouter(tags=["hotspots"])


@router.get("/hotspots")
def list_hotspots(
    now: Optional[datetime] = Query(None, description="Reference instant, defaults to server time"),
    service: ReportService = Depends(get_service),
):
    return service.list_hotspots(now).to_payload()
