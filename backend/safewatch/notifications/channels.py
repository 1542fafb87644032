from __future__ import annotations

import logging
from typing import Optional

import httpx

from .base import ReportNotification

logger = logging.getLogger(__name__)


class LoggingChannel:
    """Writes notifications to the application log."""

    def send(self, notification: ReportNotification) -> None:
        level = logging.WARNING if notification.urgent else logging.INFO
        logger.log(level, "To %s: %s", notification.recipient, notification.subject)


class WebhookChannel:
    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        if not url:
            raise ValueError("url is required")
        self.url = url
        self.timeout = timeout
        self._client = client

    def send(self, notification: ReportNotification) -> None:
        body = {
            "recipient": notification.recipient,
            "subject": notification.subject,
            "text": notification.body,
            "urgent": notification.urgent,
            **notification.payload,
        }
        if self._client is not None:
            resp = self._client.post(self.url, json=body, timeout=self.timeout)
            resp.raise_for_status()
            return
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(self.url, json=body)
            resp.raise_for_status()
