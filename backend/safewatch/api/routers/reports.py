from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from safewatch.api.deps import get_service
from safewatch.api.schemas import StatusUpdateIn, SubmitReportIn
from safewatch.domain.errors import ReportNotFoundError, ReportValidationError
from safewatch.services.report_service import ReportService

router = APIRouter(tags=["reports"])


@router.post("/reports", status_code=201)
def submit_report(body: SubmitReportIn, service: ReportService = Depends(get_service)):
    location = body.location
    try:
        result = service.submit(
            category=body.category,
            description=body.description,
            contact_info=body.contactInfo,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            media_ref=body.mediaRef,
            submitted_at=body.submittedAt,
        )
    except ReportValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return result.to_payload()


@router.get("/reports")
def list_reports(service: ReportService = Depends(get_service)):
    return [report.to_dict() for report in service.list_reports()]


@router.get("/reports/{report_id}")
def get_report(report_id: str, service: ReportService = Depends(get_service)):
    try:
        return service.get_report(report_id).to_dict()
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Report not found") from exc


@router.patch("/reports/{report_id}/status")
def update_status(report_id: str, body: StatusUpdateIn, service: ReportService = Depends(get_service)):
    try:
        return service.update_status(report_id, body.status).to_dict()
    except ReportValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Report not found") from exc
