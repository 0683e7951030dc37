# dashboard service: pure view-model transforms and weekly goal validation
# no i/o here; the dashboard controller owns fetching and saving

import logging
import re
from itertools import accumulate

from crm_console.config import settings
from crm_console.errors import ValidationError
from crm_console.models.dashboard import (
    BreakdownShare,
    CumulativePoint,
    DashboardSummary,
    DashboardViewModel,
)

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?\d+")


def cumulative_growth(summary: DashboardSummary) -> list[CumulativePoint]:
    """prefix-sum of daily contact counts, same length and order as the input"""
    totals = accumulate(point.count for point in summary.contact_growth)
    return [
        CumulativePoint(date=point.date, running_total=total)
        for point, total in zip(summary.contact_growth, totals)
    ]


def completion_percent(activities: int, goal: int) -> int:
    """percent of the weekly goal reached, rounded half away from zero"""
    if goal <= 0:
        goal = settings.DEFAULT_WEEKLY_GOAL
    # half-up: 12.5 -> 13 (builtin round() would give 12)
    return int(activities * 100 / goal + 0.5)


def breakdown_shares(summary: DashboardSummary) -> list[BreakdownShare]:
    """activity types ordered by count (stable), each with its share of the total"""
    total = sum(item.count for item in summary.activity_breakdown)
    if total == 0:
        return []
    ordered = sorted(summary.activity_breakdown, key=lambda item: item.count, reverse=True)
    return [
        BreakdownShare(type=item.type, count=item.count, percent=round(item.count * 100 / total, 1))
        for item in ordered
    ]


def build_view_model(summary: DashboardSummary) -> DashboardViewModel:
    """derive every display value from a summary; never raises on empty data"""
    growth = cumulative_growth(summary)
    breakdown_total = sum(item.count for item in summary.activity_breakdown)

    return DashboardViewModel(
        contactsTotal=summary.contacts_total,
        cumulativeGrowth=growth,
        newContactsInWindow=growth[-1].running_total if growth else 0,
        activitiesThisWeek=summary.activities_this_week,
        weeklyGoal=summary.weekly_goal,
        completionPercent=completion_percent(summary.activities_this_week, summary.weekly_goal),
        goalReached=summary.activities_this_week >= summary.weekly_goal,
        breakdownTotal=breakdown_total,
        breakdownShares=breakdown_shares(summary),
        hasGrowthData=bool(growth),
        hasBreakdownData=bool(summary.activity_breakdown),
    )


def request_goal_update(current_goal: int, proposed_goal_text: str) -> int:
    """parse and range-check a proposed weekly goal, raising ValidationError on bad input"""
    text = (proposed_goal_text or "").strip()
    if not _INTEGER_RE.fullmatch(text):
        logger.debug(f"Rejected weekly goal {text!r} (current {current_goal}): not an integer")
        raise ValidationError(
            f"Goal must be a whole number between {settings.MIN_WEEKLY_GOAL} and {settings.MAX_WEEKLY_GOAL}",
            field="weeklyGoal",
        )

    goal = int(text)
    if goal <settings.MIN_WEEKLY_GOAL or goal > settings.MAX_WEEKLY_GOAL:
        logger.debug(f"Rejected weekly goal {goal} (current {current_goal}): out of range")
        raise ValidationError(
            f"Goal must be between {settings.MIN_WEEKLY_GOAL} and {settings.MAX_WEEKLY_GOAL}",
            field="weeklyGoal",
        )

    return goal


def apply_goal_update(summary: DashboardSummary, new_goal: int) -> DashboardSummary:
    """copy of summary with only the weekly goal replaced"""
    return summary.model_copy(update={"weekly_goal": new_goal})
