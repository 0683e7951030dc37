# session context: identity, confirmation, and navigation capabilities
# threaded explicitly into each controller instead of read from ambient state

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from crm_console.models.user import CurrentUser
from crm_console.services.notifications import Notifier

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_MESSAGE = "Admin access required"


def _deny(message: str) -> bool:
    return False


def _stay(path: str) -> None:
    return None


@dataclass(frozen=True)
class SessionContext:
    """read-only view of the signed-in session.

    confirm must return True before any destructive action is sent.
    the default refuses every prompt.
    """
    current_user: Optional[CurrentUser] = None
    confirm: Callable[[str], bool] = _deny
    navigate: Callable[[str], None] = _stay

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.is_admin

    def is_self(self, user_id: str) -> bool:
        return self.current_user is not None and str(user_id) == self.current_user.id


def require_admin(session: SessionContext, notifier: Notifier, redirect_to: str = "/") -> bool:
    """admin gate for the roster page; redirects non-admins once and reports why"""
    if session.is_admin:
        return True
    user_id = session.current_user.id if session.current_user else None
    logger.warning(f"Non-admin user {user_id} denied access to user management")
    notifier.notify_error(ADMIN_REQUIRED_MESSAGE)
    session.navigate(redirect_to)
    return False
