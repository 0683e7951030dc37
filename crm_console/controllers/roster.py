# roster controller: admin user management over /user-management
# every successful write is followed by one full re-fetch; failures leave the roster untouched

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from crm_console.controllers.base import BaseController
from crm_console.dependencies import require_admin
from crm_console.errors import BackendError, ConflictError, ValidationError
from crm_console.models.user import (
    CreatedUser,
    NewUserForm,
    ResetPasswordOutcome,
    RosterCounts,
    UserRecord,
    UserUpdate,
)
from crm_console.services.result import Result
from crm_console.services.roster_service import (
    check_self_deactivate,
    check_self_update,
    derive_counts,
    find_user,
    validate_new_user,
)

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch users"
CREATED_MESSAGE = "User created and invitation sent!"
CREATE_FAILED_MESSAGE = "Failed to create user"
UPDATED_MESSAGE = "User updated successfully"
UPDATE_FAILED_MESSAGE = "Failed to update user"
RESET_SENT_MESSAGE = "Password reset email sent"
RESET_FAILED_MESSAGE = "Failed to reset password"
TEMP_PASSWORD_LABEL = "Temp password"
DEACTIVATED_MESSAGE = "User deactivated"
DEACTIVATE_FAILED_MESSAGE = "Failed to deactivate user"


def conflict_message(assigned_contacts: int) -> str:
    return f"User has {assigned_contacts} assigned contacts. Please reassign them first."


class RosterController(BaseController):
    """organization user roster, a read replica refreshed after every write"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.users: list[UserRecord] = []
        self.loaded = False

    @property
    def counts(self) -> RosterCounts:
        return derive_counts(self.users)

    @property
    def _current_user_id(self) -> Optional[str]:
        user = self.session.current_user
        return user.id if user else None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return find_user(self.users, user_id)

    def can_edit_admin_flag(self, user: UserRecord) -> bool:
        """the admin checkbox is disabled on your own row"""
        return not self.session.is_self(user.id)

    def can_deactivate(self, user: UserRecord) -> bool:
        return not self.session.is_self(user.id)

    async def open(self) -> bool:
        """admin gate plus initial load; non-admins are redirected and nothing is fetched"""
        if not require_admin(self.session, self.notifier):
            return False
        await self.fetch_roster()
        return True

    async def fetch_roster(self) -> Result[list[UserRecord]]:
        """replace the whole local roster with a fresh read"""
        with self._in_flight():
            try:
                payload = await self.api.list_users()
                users = [UserRecord.model_validate(item) for item in payload or []]
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.error(f"Error fetching users: {e.message}")
                self._report(e, FETCH_FAILED_MESSAGE)
                return Result.failure(e)
            except SchemaError as e:
                if self.disposed:
                    return Result.aborted()
                logger.error(f"User list did not match the expected shape: {e}")
                error = BackendError(FETCH_FAILED_MESSAGE, payload=payload)
                self._report(error)
                return Result.failure(error)

        if self.disposed:
            return Result.aborted()

        self.users = users
        self.loaded = True
        logger.info(f"Roster loaded: {len(users)} users")
        return Result.success(users)

    async def create_user(self, form: NewUserForm) -> Result[CreatedUser]:
        try:
            body = validate_new_user(form)
        except ValidationError as e:
            self.notifier.notify_error(e.message)
            return Result.failure(e)

        with self._in_flight():
            try:
                payload = await self.api.create_user(body)
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.warning(f"Create user {body['email']} failed: {e.message}")
                self._report(e)
                return Result.failure(e)

        if self.disposed:
            return Result.aborted()

        self.notifier.notify_success(CREATED_MESSAGE)
        await self.fetch_roster()

        created = None
        echoed = payload.get("user") if isinstance(payload, dict) else None
        if echoed:
            try:
                created = CreatedUser.model_validate(echoed)
            except SchemaError:
                logger.warning("Create user response did not include a usable user record")
        return Result.success(created)

    async def update_user(self, user_id: str, patch: UserUpdate) -> Result[None]:
        try:
            check_self_update(self._current_user_id, user_id, patch)
        except ValidationError as e:
            self.notifier.notify_error(e.message)
            return Result.failure(e)

        with self._in_flight():
            try:
                await self.api.update_user(user_id, patch.to_payload())
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.warning(f"Update user {user_id} failed: {e.message}")
                self._report(e)
                return Result.failure(e)

        if self.disposed:
            return Result.aborted()

        self.notifier.notify_success(UPDATED_MESSAGE)
        await self.fetch_roster()
        return Result.success()

    async def reset_password(self, user_id: str, email: str) -> Result[ResetPasswordOutcome]:
        """confirm, then ask the backend to issue a temporary password; roster is not touched"""
        if not self.session.confirm(f"Reset password for {email}?"):
            return Result.aborted()

        with self._in_flight():
            try:
                payload = await self.api.reset_password(user_id)
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.warning(f"Password reset for user {user_id} failed: {e.message}")
                self._report(e, RESET_FAILED_MESSAGE)
                return Result.failure(e)

        if self.disposed:
            return Result.aborted()

        self.notifier.notify_success(RESET_SENT_MESSAGE)
        logger.info(f"Password reset issued for user {user_id}")

        temp_password = payload.get("tempPassword") if isinstance(payload, dict) else None
        if temp_password:
            # development backends echo the credential; show it once, never log it
            self.notifier.notify_secret(TEMP_PASSWORD_LABEL, temp_password)
        return Result.success(
            ResetPasswordOutcome(temp_password_shown=bool(temp_password), temp_password=temp_password)
        )

    async def deactivate_user(
        self,
        user_id: str,
        email: str,
        reassign_to: Optional[str] = None,
    ) -> Result[None]:
        """confirm, then soft-delete; contacts still assigned to the user block it"""
        try:
            check_self_deactivate(self._current_user_id, user_id)
        except ValidationError as e:
            self.notifier.notify_error(e.message)
            return Result.failure(e)

        if not self.session.confirm(
            f"Deactivate user {email}? Their contacts will need to be reassigned."
        ):
            return Result.aborted()

        with self._in_flight():
            try:
                await self.api.deactivate_user(user_id, reassign_to=reassign_to)
            except ConflictError as e:
                if self.disposed:
                    return Result.aborted()
                logger.info(f"Deactivate user {user_id} blocked by {e.assigned_contacts} assigned contacts")
                self.notifier.notify_error(conflict_message(e.assigned_contacts))
                return Result.failure(e)
            except BackendError as e:
                if self.disposed:
                    return Result.aborted()
                logger.warning(f"Deactivate user {user_id} failed: {e.message}")
                self._report(e, DEACTIVATE_FAILED_MESSAGE)
                return Result.failure(e)

        if self.disposed:
            return Result.aborted()

        self.notifier.notify_success(DEACTIVATED_MESSAGE)
        await self.fetch_roster()
        return Result.success()
