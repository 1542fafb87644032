from __future__ import annotations

from fastapi import HTTPException, Request

from safewatch.services.report_service import ReportService


def get_service(request: Request) -> ReportService:
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail="Report service not configured")
    return service
