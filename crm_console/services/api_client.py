# crm api client: async http transport for the dashboard and user-management endpoints
# wraps httpx.AsyncClient, attaches the bearer token, maps error responses to BackendError

import logging
from typing import Any, Optional

import httpx

from crm_console.config import settings
from crm_console.errors import BackendError, ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def extract_error_message(payload: Any, default: str) -> Optional[str]:
    """pull the server-supplied error text out of an error body, else return default"""
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        # express-validator style: {"errors": [{"msg": "...", "path": "email"}, ...]}
        errors = payload.get("errors")
        if isinstance(errors, list):
            messages = [
                str(item.get("msg")).strip()
                for item in errors
                if isinstance(item, dict) and item.get("msg")
            ]
            if messages:
                return "; ".join(messages)
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


def _assigned_contacts(payload: Any) -> int:
    """contact count from a deactivation conflict body, 0 when absent or unreadable"""
    if not isinstance(payload, dict):
        return 0
    value = payload.get("assignedContacts")
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unreadable assignedContacts value: {value!r}")
        return 0


class ApiClient:
    """thin async client over the crm rest api"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = _normalize_base_url(base_url or settings.CRM_API_URL)
        self._token = (token if token is not None else settings.CRM_API_TOKEN).strip()
        self._timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self):
        """open the underlying http connection pool"""
        if self._client is not None:
            return
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info(f"CRM API client ready: {self.base_url}")

    async def close(self):
        """close the http connection pool"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("CRM API client closed")

    async def __aenter__(self) -> "ApiClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        default_error: str = "Request failed",
    ) -> Any:
        """send a request and return the decoded json body (None for empty bodies)"""
        if self._client is None:
            await self.connect()

        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed to reach the CRM API: {e}")
            raise BackendError(default_error) from e

        payload = _decode(response)

        if response.status_code >= 400:
            message = extract_error_message(payload, default_error)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            if response.status_code == 401:
                raise UnauthorizedError(message, status_code=401, payload=payload)
            assigned = _assigned_contacts(payload)
            if assigned:
                raise ConflictError(
                    message,
                    assigned_contacts=assigned,
                    status_code=response.status_code,
                    payload=payload,
                )
            raise BackendError(message, status_code=response.status_code, payload=payload)

        return payload

    # dashboard endpoints

    async def get_dashboard(self) -> dict:
        return await self.request(
            "GET", "/analytics/dashboard", default_error="Failed to load dashboard"
        )

    async def update_weekly_goal(self, goal: int) -> dict:
        return await self.request(
            "PUT", "/analytics/weekly-goal", json={"goal": goal}, default_error="Failed to update goal"
        )

    # user-management endpoints

    async def list_users(self) -> list[dict]:
        return await self.request("GET", "/user-management", default_error="Failed to fetch users")

    async def create_user(self, payload: dict) -> dict:
        return await self.request(
            "POST", "/user-management", json=payload, default_error="Failed to create user"
        )

    async def update_user(self, user_id: str, patch: dict) -> dict:
        return await self.request(
            "PUT", f"/user-management/{user_id}", json=patch, default_error="Failed to update user"
        )

    async def reset_password(self, user_id: str) -> dict:
        return await self.request(
            "POST",
            f"/user-management/{user_id}/reset-password",
            default_error="Failed to reset password",
        )

    async def deactivate_user(self, user_id: str, reassign_to: Optional[str] = None) -> dict:
        body = {"reassignTo": reassign_to} if reassign_to else None
        return await self.request(
            "DELETE", f"/user-management/{user_id}", json=body, default_error="Failed to deactivate user"
        )


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
