from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Tuple

from safewatch.domain.models import DetectionResult, Report

from .base import build_notification
from .registry import ChannelRegistry

logger = logging.getLogger(__name__)

# Recent delivery failures kept for inspection; older ones are dropped.
MAX_RECORDED_ERRORS = 50


class NotificationHub:
    def __init__(self, registry: ChannelRegistry, recipient: str, max_errors: int = MAX_RECORDED_ERRORS) -> None:
        self._registry = registry
        self.recipient = recipient
        self.errors: Deque[Tuple[str, Exception]] = deque(maxlen=max_errors)

    @property
    def channels(self) -> List[str]:
        return self._registry.list()

    def dispatch(self, report: Report, detection: DetectionResult) -> List[str]:
        """Fan a report out to every channel; returns the names that succeeded.

        Failures are logged and the most recent ones kept in ``errors``; the
        report is already committed, so nothing here is allowed to propagate.
        """
        notification = build_notification(report, detection, self.recipient)
        delivered: List[str] = []
        for name in self._registry.list():
            channel = self._registry.get(name)
            try:
                channel.send(notification)
            except Exception as exc:
                logger.warning("Notification channel %s failed for report %s: %s", name, report.id, exc)
                # drop the traceback so retained errors do not pin frames
                self.errors.append((name, exc.with_traceback(None)))
                continue
            delivered.append(name)
        return delivered
