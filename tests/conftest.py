# shared fixtures for console tests
# provides an in-memory crm backend behind httpx.MockTransport, sessions, and controllers

import copy
import json

import httpx
import pytest
import pytest_asyncio

from crm_console.controllers.dashboard import DashboardController
from crm_console.controllers.roster import RosterController
from crm_console.dependencies import SessionContext
from crm_console.models.user import CurrentUser
from crm_console.services.api_client import ApiClient
from crm_console.services.notifications import RecordingNotifier


BASE_URL = "http://test/api"

# test ids
ADMIN_ID = "1"
LOAN_OFFICER_ID = "2"
INACTIVE_LOAN_OFFICER_ID = "3"
INACTIVE_USER_ID = "4"
PLAIN_USER_ID = "5"


# sample data (as the backend returns it)

DASHBOARD_DOC = {
    "contacts": {
        "total": 42,
        "growth": [
            {"date": "2025-10-01T00:00:00.000Z", "count": "3"},
            {"date": "2025-10-02T00:00:00.000Z", "count": 0},
            {"date": "2025-10-03T00:00:00.000Z", "count": 5},
            {"date": "2025-10-04T00:00:00.000Z", "count": 2},
        ],
    },
    "activities": {
        "thisWeek": 7,
        "weeklyGoal": 50,
        "breakdown": [
            {"type": "call", "count": 4},
            {"type": "email", "count": 2},
            {"type": "meeting", "count": 1},
        ],
    },
}

USER_DOCS = [
    {
        "id": ADMIN_ID,
        "email": "dana.reyes@salesco.com",
        "firstName": "Dana",
        "lastName": "Reyes",
        "isAdmin": True,
        "isLoanOfficer": False,
        "licensedStates": [],
        "isActive": True,
        "createdAt": "2025-01-27T00:00:00.000Z",
        "lastLogin": "2025-10-01T12:30:00.000Z",
        "stats": {"contactCount": 12, "dealCount": 3, "totalDealValue": 1250000},
    },
    {
        # isActive omitted on purpose, older rows predate the column
        "id": LOAN_OFFICER_ID,
        "email": "marco.bell@salesco.com",
        "isAdmin": False,
        "isLoanOfficer": True,
        "licensedStates": ["CA", "TX"],
        "createdAt": "2025-02-10T00:00:00.000Z",
        "stats": {"contactCount": 30, "dealCount": 8, "totalDealValue": 2400000.5},
    },
    {
        "id": INACTIVE_LOAN_OFFICER_ID,
        "email": "lee.park@salesco.com",
        "isAdmin": False,
        "isLoanOfficer": True,
        "isActive": False,
        "createdAt": "2025-03-01T00:00:00.000Z",
        "stats": None,
    },
    {
        "id": INACTIVE_USER_ID,
        "email": "sam.ortiz@salesco.com",
        "isAdmin": False,
        "isLoanOfficer": False,
        "isActive": False,
        "createdAt": "2025-03-15T00:00:00.000Z",
    },
    {
        "id": PLAIN_USER_ID,
        "email": "jo.nguyen@salesco.com",
        "isAdmin": False,
        "isLoanOfficer": False,
        "isActive": True,
        "createdAt": "2025-04-02T00:00:00.000Z",
    },
]


class FakeBackend:
    """in-memory stand-in for the crm api; records every request it receives"""

    def __init__(self):
        self.dashboard = copy.deepcopy(DASHBOARD_DOC)
        self.users = copy.deepcopy(USER_DOCS)
        self.assigned_contacts: dict[str, int] = {}
        self.temp_password = None
        self.requests: list[tuple[str, str, object]] = []
        self.failures: dict[tuple[str, str], tuple[int, object]] = {}
        self.offline = False
        self.on_request = None
        self._next_id = 100

    # test helpers

    def respond_next(self, method: str, path: str, status: int, body=None):
        """make the next request to method+path return a canned response"""
        self.failures[(method, path)] = (status, body)

    def fail_next(self, method: str, path: str, status: int, body=None):
        """make the next request to method+path return an error response"""
        self.respond_next(method, path, status, body)

    def calls(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.requests if m == method and p == path)

    def body_of_last(self, method: str, path: str):
        for m, p, body in reversed(self.requests):
            if m == method and p == path:
                return body
        return None

    def find(self, user_id: str):
        for doc in self.users:
            if doc["id"] == user_id:
                return doc
        return None

    # transport handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else None
        self.requests.append((method, path, body))

        if self.on_request is not None:
            self.on_request(request)

        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        failure = self.failures.pop((method, path), None)
        if failure is not None:
            status, payload = failure
            if payload is None:
                return httpx.Response(status)
            return httpx.Response(status, json=payload)

        return self._route(method, path, body)

    def _route(self, method, path, body):
        if path == "/analytics/dashboard" and method == "GET":
            return httpx.Response(200, json=self.dashboard)

        if path == "/analytics/weekly-goal" and method == "PUT":
            goal = (body or {}).get("goal")
            if not isinstance(goal, int) or goal < 1 or goal > 1000:
                return httpx.Response(400, json={"message": "Goal must be a number between 1 and 1000"})
            self.dashboard["activities"]["weeklyGoal"] = goal
            return httpx.Response(200, json={
                "message": "Weekly activity goal updated successfully",
                "weeklyGoal": goal,
            })

        if path == "/user-management" and method == "GET":
            return httpx.Response(200, json=copy.deepcopy(self.users))

        if path == "/user-management" and method == "POST":
            if any(u["email"] == body["email"] for u in self.users):
                return httpx.Response(400, json={"error": "User with this email already exists"})
            self._next_id += 1
            doc = {
                "id": str(self._next_id),
                "email": body["email"],
                "isAdmin": False,
                "isLoanOfficer": body.get("isLoanOfficer", False),
                "licensedStates": body.get("licensedStates", []),
                "isActive": True,
                "createdAt": "2025-10-19T09:00:00.000Z",
            }
            self.users.insert(0, doc)
            return httpx.Response(201, json={
                "message": "User created successfully",
                "user": {
                    "id": doc["id"],
                    "email": doc["email"],
                    "organizationId": "org-1",
                    "isLoanOfficer": doc["isLoanOfficer"],
                    "createdAt": doc["createdAt"],
                },
            })

        parts = path.strip("/").split("/")
        if len(parts) >= 2 and parts[0] == "user-management":
            doc = self.find(parts[1])
            if doc is None:
                return httpx.Response(404, json={"error": "User not found"})

            if len(parts) == 3 and parts[2] == "reset-password" and method == "POST":
                return httpx.Response(200, json={
                    "message": "Password reset successfully",
                    "tempPassword": self.temp_password,
                })

            if method == "PUT":
                doc.update(body or {})
                return httpx.Response(200, json={"message": "User updated successfully", "user": doc})

            if method == "DELETE":
                reassign_to = (body or {}).get("reassignTo")
                assigned = self.assigned_contacts.get(doc["id"], 0)
                if assigned > 0 and not reassign_to:
                    return httpx.Response(400, json={
                        "error": f"User has {assigned} assigned contacts. Please reassign them first "
                                 "or provide a reassignTo user ID.",
                        "assignedContacts": assigned,
                    })
                doc["isActive"] = False
                return httpx.Response(200, json={
                    "message": "User deactivated successfully",
                    "reassignedContacts": assigned if reassign_to else 0,
                })

        return httpx.Response(404, json={"error": "Not found"})


class Navigator:
    """records navigation calls"""

    def __init__(self):
        self.paths: list[str] = []

    def __call__(self, path: str):
        self.paths.append(path)


class Confirmer:
    """answers confirmation prompts with a fixed reply and records them"""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts: list[str] = []

    def __call__(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer


ADMIN_USER = CurrentUser(id=ADMIN_ID, email="dana.reyes@salesco.com", firstName="Dana", isAdmin=True)
NON_ADMIN_USER = CurrentUser(id=PLAIN_USER_ID, email="jo.nguyen@salesco.com", firstName="Jo", isAdmin=False)


@pytest.fixture
def fake_backend():
    """fresh backend state for each test"""
    return FakeBackend()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def navigator():
    return Navigator()


@pytest.fixture
def confirmer():
    return Confirmer(answer=True)


@pytest.fixture
def admin_session(navigator, confirmer):
    return SessionContext(current_user=ADMIN_USER, confirm=confirmer, navigate=navigator)


@pytest.fixture
def non_admin_session(navigator, confirmer):
    return SessionContext(current_user=NON_ADMIN_USER, confirm=confirmer, navigate=navigator)


@pytest_asyncio.fixture
async def api(fake_backend):
    """api client wired to the fake backend"""
    client = ApiClient(
        base_url=BASE_URL,
        token="test-token",
        timeout=5.0,
        transport=httpx.MockTransport(fake_backend.handle),
    )
    await client.connect()
    yield client
    await client.close()


@pytest_asyncio.fixture
async def dashboard(api, notifier, admin_session):
    controller = DashboardController(api, notifier, admin_session)
    yield controller
    controller.close()


@pytest_asyncio.fixture
async def roster(api, notifier, admin_session):
    """roster controller for the admin, already loaded"""
    controller = RosterController(api, notifier, admin_session)
    await controller.fetch_roster()
    notifier.clear()
    yield controller
    controller.close()
