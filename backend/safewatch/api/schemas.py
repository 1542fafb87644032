from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LocationIn(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class SubmitReportIn(BaseModel):
    category: str
    description: str
    contactInfo: Optional[str] = None
    location: Optional[LocationIn] = None
    mediaRef: Optional[str] = None
    submittedAt: Optional[datetime] = None


class StatusUpdateIn(BaseModel):
    status: str
