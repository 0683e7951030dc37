# user models: roster records, forms, and session identity
# mirrors the backend /user-management payloads and the auth context user

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class UserStats(BaseModel):
    """per-user activity stats computed server-side for the roster table"""
    contact_count: int = Field(0, alias="contactCount")
    deal_count: int = Field(0, alias="dealCount")
    total_deal_value: float = Field(0.0, alias="totalDealValue")

    model_config = {"populate_by_name": True}

    @field_validator("contact_count", "deal_count", "total_deal_value", mode="before")
    @classmethod
    def _zero_when_missing(cls, value: Any) -> Any:
        return 0 if value is None else value


class UserRecord(BaseModel):
    """an organization user as returned by GET /user-management"""
    id: str
    email: str
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    is_admin: bool = Field(False, alias="isAdmin")
    is_loan_officer: bool = Field(False, alias="isLoanOfficer")
    licensed_states: list[str] = Field(default_factory=list, alias="licensedStates")
    is_active: bool = Field(True, alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")
    stats: UserStats = Field(default_factory=UserStats)

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("id", mode="before")
    @classmethod
    def _opaque_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("is_admin", "is_loan_officer", mode="before")
    @classmethod
    def _false_when_missing(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_active", mode="before")
    @classmethod
    def _active_when_missing(cls, value: Any) -> Any:
        # only an explicit false marks a user inactive
        return True if value is None else value

    @field_validator("licensed_states", mode="before")
    @classmethod
    def _unique_states(cls, value: Any) -> Any:
        if value is None:
            return []
        return list(dict.fromkeys(value))

    @field_validator("stats", mode="before")
    @classmethod
    def _empty_stats(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def role_labels(self) -> list[str]:
        labels = []
        if self.is_admin:
            labels.append("Admin")
        if self.is_loan_officer:
            labels.append("Loan Officer")
        return labels or ["User"]

    @property
    def status_label(self) -> str:
        return "Active" if self.is_active else "Inactive"


class NewUserForm(BaseModel):
    """create-user form; required fields are checked before any request"""
    email: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    is_loan_officer: bool = Field(False, alias="isLoanOfficer")
    licensed_states: list[str] = Field(default_factory=list, alias="licensedStates")

    model_config = {"populate_by_name": True}


class UserUpdate(BaseModel):
    """partial update; only explicitly set fields are sent"""
    is_admin: Optional[bool] = Field(None, alias="isAdmin")
    is_loan_officer: Optional[bool] = Field(None, alias="isLoanOfficer")
    licensed_states: Optional[list[str]] = Field(None, alias="licensedStates")
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class RosterCounts(BaseModel):
    """summary cards above the roster table"""
    total: int = 0
    active: int = 0
    admins: int = 0
    loan_officers: int = Field(0, alias="loanOfficers")

    model_config = {"populate_by_name": True}


class CreatedUser(BaseModel):
    """server echo of a freshly created user (POST /user-management)"""
    id: str
    email: str
    organization_id: Optional[str] = Field(None, alias="organizationId")
    is_loan_officer: bool = Field(False, alias="isLoanOfficer")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("id", "organization_id", mode="before")
    @classmethod
    def _opaque_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class ResetPasswordOutcome(BaseModel):
    """result of a password reset; temp_password is only set in development mode"""
    temp_password_shown: bool = False
    temp_password: Optional[str] = Field(None, repr=False)


class CurrentUser(BaseModel):
    """the signed-in user as exposed by the identity context"""
    id: str
    email: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    is_admin: bool = Field(False, alias="isAdmin")
    is_loan_officer: bool = Field(False, alias="isLoanOfficer")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _opaque_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value
