# shared controller plumbing: pending flag, teardown, and failure reporting

import logging
from contextlib import contextmanager
from typing import Optional

from crm_console.dependencies import SessionContext
from crm_console.errors import BackendError, UnauthorizedError
from crm_console.services.api_client import ApiClient
from crm_console.services.notifications import LogNotifier, Notifier

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
LOGIN_PATH = "/login"


class BaseController:
    """owns one local cache; sole writer to it until close()"""

    def __init__(
        self,
        api: ApiClient,
        notifier: Optional[Notifier] = None,
        session: Optional[SessionContext] = None,
    ):
        self.api = api
        self.notifier = notifier or LogNotifier()
        self.session = session or SessionContext()
        self._pending = 0
        self._disposed = False

    @property
    def pending(self) -> bool:
        """true while a request is in flight; callers disable the triggering control"""
        return self._pending > 0

    @property
    def disposed(self) -> bool:
        return self._disposed

    def close(self):
        """tear down; responses that arrive afterwards are dropped"""
        if not self._disposed:
            logger.debug(f"{type(self).__name__} closed")
        self._disposed = True

    @contextmanager
    def _in_flight(self):
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    def _report(self, error: BackendError, fallback: Optional[str] = None):
        """surface a backend failure; fallback replaces the server text when given"""
        if isinstance(error, UnauthorizedError):
            self.notifier.notify_error(SESSION_EXPIRED_MESSAGE)
            self.session.navigate(LOGIN_PATH)
            return
        self.notifier.notify_error(fallback or error.message)
