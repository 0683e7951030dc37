# notification collaborators: surface success/error messages to the user
# fire-and-forget; the console never consumes a return value

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

REDACTED = "[redacted]"


class Notifier(Protocol):
    def notify_success(self, message: str) -> None: ...

    def notify_error(self, message: str) -> None: ...

    def notify_secret(self, label: str, secret: str) -> None: ...


class LogNotifier:
    """default notifier, writes messages to the console log"""

    def notify_success(self, message: str) -> None:
        logger.info(message)

    def notify_error(self, message: str) -> None:
        logger.error(message)

    def notify_secret(self, label: str, secret: str) -> None:
        """a log is persistent, so only the label is written"""
        logger.info(f"{label}: {REDACTED}")


class RecordingNotifier:
    """keeps messages in memory, in the order they were raised"""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def notify_success(self, message: str) -> None:
        self.messages.append(("success", message))

    def notify_error(self, message: str) -> None:
        self.messages.append(("error", message))

    def notify_secret(self, label: str, secret: str) -> None:
        # shown once to whoever holds the notifier, same as a success toast
        self.messages.append(("success", f"{label}: {secret}"))

    @property
    def successes(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "success"]

    @property
    def errors(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "error"]

    def clear(self):
        self.messages.clear()
