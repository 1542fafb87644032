from __future__ import annotations


class ReportValidationError(ValueError):
    """Raised when a submission or status change is rejected before touching the store."""


class ReportNotFoundError(LookupError):
    def __init__(self, report_id: str):
        super().__init__(f"Report '{report_id}' not found")
        self.report_id = report_id
