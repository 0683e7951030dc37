# dashboard controller: loads the summary and runs the weekly goal edit flow
# viewing -> editing on start_edit; back to viewing on cancel or a successful save

import logging
from enum import Enum
from typing import Optional

from pydantic import ValidationError as SchemaError

from crm_console.config import settings
from crm_console.controllers.base import BaseController
from crm_console.errors import BackendError, ValidationError
from crm_console.models.dashboard import DashboardSummary, DashboardViewModel, GoalUpdateResponse
from crm_console.services.dashboard_service import (
    apply_goal_update,
    build_view_model,
    request_goal_update,
)
from crm_console.services.result import Result

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load dashboard"
GOAL_FAILED_MESSAGE = "Failed to update goal"
GOAL_UPDATED_MESSAGE = "Weekly goal updated"


class EditMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class DashboardController(BaseController):
    """dashboard page state: last fetched summary plus the goal draft"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.summary: Optional[DashboardSummary] = None
        self.mode = EditMode.VIEWING
        self.draft_goal = ""

    @property
    def view_model(self) -> Optional[DashboardViewModel]:
        if self.summary is None:
            return None
        return build_view_model(self.summary)

    @property
    def current_goal(self) -> Optional[int]:
        return self.summary.weekly_goal if self.summary else None

    async def load(self) -> Result[DashboardSummary]:
        """fetch the dashboard summary, keeping the previous one on failure"""
        with self._in_flight():
            try:
                payload = await self.api.get_dashboard()
                summary = DashboardSummary.model_validate(payload or {})
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.error(f"Dashboard fetch failed: {e.message}")
                self._report(e, LOAD_FAILED_MESSAGE)
                return Result.failure(e)
            except SchemaError as e:
                if self.disposed:
                    return Result.aborted()
                logger.error(f"Dashboard payload did not match the expected shape: {e}")
                error = BackendError(LOAD_FAILED_MESSAGE, payload=payload)
                self._report(error)
                return Result.failure(error)

        if self.disposed:
            return Result.aborted()

        # the backend filters on >= now - window, so a window can touch one extra day
        max_points = settings.GROWTH_WINDOW_DAYS + 1
        if len(summary.contact_growth) > max_points:
            logger.warning(
                f"Contact growth has {len(summary.contact_growth)} daily points, "
                f"expected at most {max_points}"
            )

        self.summary = summary
        logger.info(
            f"Dashboard loaded: {summary.contacts_total} contacts, "
            f"{summary.activities_this_week}/{summary.weekly_goal} activities this week"
        )
        return Result.success(summary)

    # weekly goal edit flow

    def start_edit(self) -> bool:
        """enter editing mode with the draft seeded from the current goal"""
        if self.summary is None:
            return False
        self.mode = EditMode.EDITING
        self.draft_goal = str(self.summary.weekly_goal)
        return True

    def set_draft(self, text: str):
        self.draft_goal = text

    def cancel_edit(self):
        """discard the draft and restore it to the last known goal"""
        self.mode = EditMode.VIEWING
        self.draft_goal = str(self.current_goal) if self.summary else ""

    async def save_goal(self) -> Result[int]:
        """validate the draft, send it, and commit locally once the backend accepts"""
        if self.mode is not EditMode.EDITING or self.summary is None:
            return Result.failure(ValidationError("Weekly goal is not being edited"))

        try:
            goal = request_goal_update(self.summary.weekly_goal, self.draft_goal)
        except ValidationError as e:
            self.notifier.notify_error(e.message)
            return Result.failure(e)

        with self._in_flight():
            try:
                payload = await self.api.update_weekly_goal(goal)
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.warning(f"Weekly goal update to {goal} rejected: {e.message}")
                self._report(e)
                return Result.failure(e)

        if self.disposed:
            return Result.aborted()

        goal = _acknowledged_goal(payload, goal)
        self.summary = apply_goal_update(self.summary, goal)
        self.mode = EditMode.VIEWING
        self.draft_goal = str(goal)
        self.notifier.notify_success(GOAL_UPDATED_MESSAGE)
        logger.info(f"Weekly goal set to {goal}")
        return Result.success(goal)


def _acknowledged_goal(payload, requested: int) -> int:
    """the goal the backend says it stored; falls back to the requested one"""
    try:
        ack = GoalUpdateResponse.model_validate(payload if isinstance(payload, dict) else {})
    except SchemaError as e:
        logger.warning(f"Weekly goal acknowledgement unreadable, keeping {requested}: {e}")
        return requested
    if ack.weekly_goal is None:
        return requested
    if ack.weekly_goal != requested:
        logger.warning(f"Backend stored weekly goal {ack.weekly_goal}, requested {requested}")
    return ack.weekly_goal
