# roster service: pure helpers over the cached user list
# counts, form validation, self-protection rules, and display formatting

from typing import Iterable

from crm_console.errors import ValidationError
from crm_console.models.user import NewUserForm, RosterCounts, UserRecord, UserUpdate

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
SELF_ADMIN_MESSAGE = "You cannot remove your own admin privileges"
SELF_DEACTIVATE_MESSAGE = "You cannot deactivate your own account"


def derive_counts(roster: Iterable[UserRecord]) -> RosterCounts:
    """total / active / admin / loan officer counts for the summary cards"""
    users = list(roster)
    return RosterCounts(
        total=len(users),
        active=sum(1 for u in users if u.is_active),
        admins=sum(1 for u in users if u.is_admin),
        loanOfficers=sum(1 for u in users if u.is_loan_officer),
    )


def validate_new_user(form: NewUserForm) -> dict:
    """check required fields and return the trimmed POST body"""
    missing = [
        name
        for name, value in (
            ("email", form.email),
            ("firstName", form.first_name),
            ("lastName", form.last_name),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE, field=missing[0])

    return {
        "email": form.email.strip(),
        "firstName": form.first_name.strip(),
        "lastName": form.last_name.strip(),
        "isLoanOfficer": form.is_loan_officer,
        "licensedStates": list(dict.fromkeys(form.licensed_states)),
    }


def check_self_update(current_user_id: str, user_id: str, patch: UserUpdate):
    """an admin may not strip their own admin flag or switch their own account off"""
    if str(user_id) != str(current_user_id):
        return
    if patch.is_admin is False:
        raise ValidationError(SELF_ADMIN_MESSAGE, field="isAdmin")
    if patch.is_active is False:
        raise ValidationError(SELF_DEACTIVATE_MESSAGE, field="isActive")


def check_self_deactivate(current_user_id: str, user_id: str):
    if str(user_id) == str(current_user_id):
        raise ValidationError(SELF_DEACTIVATE_MESSAGE)


def format_currency(amount: float) -> str:
    """whole-dollar usd, e.g. 1250000 -> $1,250,000"""
    amount = amount or 0
    whole = int(abs(amount) + 0.5)
    sign = "-" if amount < 0 and whole else ""
    return f"{sign}${whole:,}"


def find_user(roster: Iterable[UserRecord], user_id: str):
    for user in roster:
        if user.id == str(user_id):
            return user
    return None
