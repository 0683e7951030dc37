# crm console entry point
# wires the api client, notifier, and session into the dashboard and roster controllers

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from crm_console.config import Settings, settings as default_settings
from crm_console.controllers.dashboard import DashboardController
from crm_console.controllers.roster import RosterController
from crm_console.dependencies import SessionContext
from crm_console.services.api_client import ApiClient
from crm_console.services.notifications import LogNotifier, Notifier

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or default_settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@dataclass
class Console:
    """the two independent page controllers sharing one api client"""
    api: ApiClient
    dashboard: DashboardController
    roster: RosterController


@asynccontextmanager
async def console_session(
    settings: Optional[Settings] = None,
    session: Optional[SessionContext] = None,
    notifier: Optional[Notifier] = None,
    api: Optional[ApiClient] = None,
):
    """startup: open the api client. shutdown: tear down controllers, then close it."""
    settings = settings or default_settings
    notifier = notifier or LogNotifier()
    session = session or SessionContext()
    api = api or ApiClient(
        base_url=settings.CRM_API_URL,
        token=settings.CRM_API_TOKEN,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
    )

    logger.info("Starting CRM console...")
    await api.connect()
    console = Console(
        api=api,
        dashboard=DashboardController(api, notifier, session),
        roster=RosterController(api, notifier, session),
    )
    try:
        yield console
    finally:
        logger.info("Shutting down CRM console...")
        console.dashboard.close()
        console.roster.close()
        await api.close()
