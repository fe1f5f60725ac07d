"""Outbound notification transports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Notification could not be handed to the transport."""


@dataclass(frozen=True, slots=True)
class Notification:
    """One outbound message."""

    recipient: str
    subject: str
    html_body: str


class Notifier(Protocol):
    """Protocol implemented by notification transports."""

    def send(self, notification: Notification) -> None:
        """Deliver ``notification``; raise ``NotificationError`` on failure."""


class LogNotifier:
    """Writes notifications to the log instead of sending them."""

    def send(self, notification: Notification) -> None:
        logger.info(
            "Notification for %s: %s (%d chars)",
            notification.recipient,
            notification.subject,
            len(notification.html_body),
        )


class HttpMailNotifier:
    """Posts notifications as JSON to a mail relay endpoint."""

    def __init__(
        self,
        url: str,
        *,
        sender: str | None = None,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.sender = sender
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout_seconds, connect=10.0))

    def send(self, notification: Notification) -> None:
        payload: dict[str, str] = {
            "to": notification.recipient,
            "subject": notification.subject,
            "html": notification.html_body,
        }
        if self.sender:
            payload["from"] = self.sender
        try:
            response = self._client.post(self.url, json=payload)
        except httpx.HTTPError as error:
            raise NotificationError(f"Mail relay unreachable: {error}") from error
        if not response.is_success:
            raise NotificationError(f"Mail relay returned HTTP {response.status_code}")

    def close(self) -> None:
        self._client.close()


def build_notifier(
    url: str | None,
    *,
    sender: str | None = None,
    timeout_seconds: float = 30.0,
) -> Notifier:
    if not url:
        return LogNotifier()
    return HttpMailNotifier(url, sender=sender, timeout_seconds=timeout_seconds)
