# console configuration
# loads env vars for the crm api endpoint, auth token, and dashboard goal bounds

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # crm backend
    CRM_API_URL: str = os.getenv("CRM_API_URL", "http://localhost:5000/api")
    CRM_API_TOKEN: str = os.getenv("CRM_API_TOKEN", "")
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # weekly activity goal
    DEFAULT_WEEKLY_GOAL: int = 50
    MIN_WEEKLY_GOAL: int = 1
    MAX_WEEKLY_GOAL: int = 1000

    # contact growth chart window reported by the backend
    GROWTH_WINDOW_DAYS: int = 30

    # logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
