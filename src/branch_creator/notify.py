"""User notification and navigation.

The orchestrator reports progress through a ``Notifier``.  Calls are fire
and forget: the outcome of a branch creation never depends on them.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Protocol

from .constants import TOAST_DURATION_MS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    duration_ms: int = TOAST_DURATION_MS
    call_to_action: str | None = None
    link: str | None = None
    level: str = "info"

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...

    def open_link(self, url: str) -> None:
        ...


@dataclass
class LoggingNotifier:
    """Notifier that logs and keeps what it was asked to show.

    The MCP tools return the recorded notifications and links to the client
    that triggered the branch creation.
    """

    notifications: list[Notification] = field(default_factory=list)
    opened_links: list[str] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        log = logger.warning if notification.level == "warning" else logger.info
        log("%s", notification.message)

    def open_link(self, url: str) -> None:
        self.opened_links.append(url)
        logger.info("Open %s", url)
