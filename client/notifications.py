"""
Dismissable notifications raised by the interceptor.
"""

from __future__ import annotations

import itertools
from typing import List

from pydantic import BaseModel

from client.signals import Signal


class Notification(BaseModel):
    id: int
    severity: str  # "error" | "warn" | "info"
    summary: str
    detail: str = ""


class Notifier:
    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.notifications: Signal[List[Notification]] = Signal([])

    @property
    def active(self) -> List[Notification]:
        return self.notifications.value

    def add(self, severity: str, summary: str, detail: str = "") -> Notification:
        note = Notification(id=next(self._ids), severity=severity, summary=summary, detail=detail)
        self.notifications.set([*self.active, note])
        return note

    def dismiss(self, notification_id: int) -> None:
        self.notifications.set([n for n in self.active if n.id != notification_id])

    def clear(self) -> None:
        self.notifications.set([])
