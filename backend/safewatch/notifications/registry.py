from __future__ import annotations

from typing import Dict, List

from .base import NotificationChannel


class ChannelRegistry:
    """Named notification channels, dispatched in registration order."""

    def __init__(self) -> None:
        self._channels: Dict[str, NotificationChannel] = {}

    def register(self, name: str, channel: NotificationChannel) -> None:
        if not name:
            raise ValueError("channel name is required")
        if not callable(getattr(channel, "send", None)):
            raise TypeError(f"Channel '{name}' must provide a callable send(notification)")
        if name in self._channels:
            raise ValueError(f"Channel '{name}' already registered")
        self._channels[name] = channel

    def unregister(self, name: str) -> NotificationChannel:
        try:
            return self._channels.pop(name)
        except KeyError as exc:
            raise KeyError(f"Channel '{name}' is not registered") from exc

    def get(self, name: str) -> NotificationChannel:
        try:
            return self._channels[name]
        except KeyError as exc:
            raise KeyError(f"Channel '{name}' is not registered") from exc

    def list(self) -> List[str]:
        return list(self._channels.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._channels
