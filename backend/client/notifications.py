"""
Notification channels used by the reminder poller.

DesktopNotifier sends operating-system notifications through `notify-send`
when it is installed. ConsoleNotifier is the in-app fallback: a transient
message written to the log and kept in a short history.
"""

import logging
import shutil
import subprocess
from collections import deque
from typing import Deque, List, Optional

from backend.calendar_service.reminders import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    NotificationError,
)

logger = logging.getLogger(__name__)

NOTIFY_COMMAND = "notify-send"
MESSAGE_HISTORY = 20
MESSAGE_DURATION_MS = 5000


class DesktopNotifier:
    """
    System notifications via `notify-send`.

    Permission starts undetermined; requesting it looks the command up once
    and settles on granted or denied.
    """

    def __init__(self, command: str = NOTIFY_COMMAND):
        self.command = command
        self._permission = PERMISSION_DEFAULT
        self._path: Optional[str] = None

    @property
    def permission(self) -> str:
        return self._permission

    def request_permission(self) -> None:
        self._path = shutil.which(self.command)
        self._permission = PERMISSION_GRANTED if self._path else PERMISSION_DENIED
        logger.info(f"Desktop notifications {self._permission}")

    def show(self, title: str, body: str) -> None:
        """
        Raises:
            NotificationError: If permission is missing or `notify-send` fails,
                e.g. when no desktop session bus is available.
        """
        if self._permission != PERMISSION_GRANTED:
            raise NotificationError("Desktop notifications are not permitted")
        try:
            subprocess.run(
                [self._path, "--expire-time", str(MESSAGE_DURATION_MS), title, body],
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise NotificationError(f"{self.command} failed: {e}") from e


class ConsoleNotifier:
    """In-app transient messages; always available."""

    def __init__(self, history: int = MESSAGE_HISTORY):
        self._messages: Deque[str] = deque(maxlen=history)

    def show(self, body: str) -> None:
        logger.info(f"\U0001F514 {body}")
        self._messages.append(body)

    @property
    def messages(self) -> List[str]:
        return list(self._messages)
