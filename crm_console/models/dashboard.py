# dashboard models: summary document and derived view model
# mirrors the backend GET /analytics/dashboard payload and the dashboard page state

from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from crm_console.config import settings


class GrowthPoint(BaseModel):
    """new contacts created on a single calendar day"""
    date: date
    count: int = Field(0, ge=0)

    @field_validator("date", mode="before")
    @classmethod
    def _truncate_timestamp(cls, value: Any) -> Any:
        # backend groups by DATE_TRUNC('day', ...) so dates may arrive as full timestamps
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class BreakdownItem(BaseModel):
    """activity count for one activity type (call, email, meeting...)"""
    type: str
    count: int = Field(0, ge=0)


class DashboardSummary(BaseModel):
    """backend summary document, immutable per fetch"""
    contacts_total: int = Field(0, ge=0, alias="contactsTotal")
    contact_growth: list[GrowthPoint] = Field(default_factory=list, alias="contactGrowth")
    activities_this_week: int = Field(0, ge=0, alias="activitiesThisWeek")
    weekly_goal: int = Field(settings.DEFAULT_WEEKLY_GOAL, alias="weeklyGoal")
    activity_breakdown: list[BreakdownItem] = Field(default_factory=list, alias="activityBreakdown")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _flatten_wire_shape(cls, data: Any) -> Any:
        """accept the nested {contacts: {...}, activities: {...}} payload the api returns"""
        if not isinstance(data, dict) or ("contacts" not in data and "activities" not in data):
            return data
        contacts = data.get("contacts") or {}
        activities = data.get("activities") or {}
        return {
            "contactsTotal": contacts.get("total") or 0,
            "contactGrowth": contacts.get("growth") or [],
            "activitiesThisWeek": activities.get("thisWeek") or 0,
            "weeklyGoal": activities.get("weeklyGoal"),
            "activityBreakdown": activities.get("breakdown") or [],
        }

    @field_validator("weekly_goal", mode="before")
    @classmethod
    def _default_goal(cls, value: Any) -> Any:
        # a missing or zero goal falls back to the default, which also guards the percentage
        if value is None or value == 0 or value == "":
            return settings.DEFAULT_WEEKLY_GOAL
        return value

    @field_validator("activity_breakdown")
    @classmethod
    def _unique_types(cls, items: list[BreakdownItem]) -> list[BreakdownItem]:
        seen = set()
        for item in items:
            if item.type in seen:
                raise ValueError(f"duplicate activity type in breakdown: {item.type}")
            seen.add(item.type)
        return items


class CumulativePoint(BaseModel):
    """running total of contacts up to and including this day"""
    date: date
    running_total: int = Field(..., alias="runningTotal")

    model_config = {"populate_by_name": True}


class BreakdownShare(BaseModel):
    """an activity type with its share of the weekly breakdown"""
    type: str
    count: int
    percent: float


class DashboardViewModel(BaseModel):
    """display values derived from a summary, recomputed on every build"""
    contacts_total: int = Field(..., alias="contactsTotal")
    cumulative_growth: list[CumulativePoint] = Field(default_factory=list, alias="cumulativeGrowth")
    new_contacts_in_window: int = Field(0, alias="newContactsInWindow")
    activities_this_week: int = Field(..., alias="activitiesThisWeek")
    weekly_goal: int = Field(..., alias="weeklyGoal")
    completion_percent: int = Field(0, alias="completionPercent")
    goal_reached: bool = Field(False, alias="goalReached")
    breakdown_total: int = Field(0, alias="breakdownTotal")
    breakdown_shares: list[BreakdownShare] = Field(default_factory=list, alias="breakdownShares")
    has_growth_data: bool = Field(False, alias="hasGrowthData")
    has_breakdown_data: bool = Field(False, alias="hasBreakdownData")

    model_config = {"populate_by_name": True}


class GoalUpdateResponse(BaseModel):
    """backend acknowledgement of PUT /analytics/weekly-goal"""
    message: str = ""
    weekly_goal: Optional[int] = Field(
        None, alias="weeklyGoal", ge=settings.MIN_WEEKLY_GOAL, le=settings.MAX_WEEKLY_GOAL
    )

    model_config = {"populate_by_name": True}
