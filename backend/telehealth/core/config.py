import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Runtime settings for the telehealth backend."""

    APP_TITLE: str = os.getenv("APP_TITLE", "Telehealth Clinic Platform API")
    PORT: int = int(os.getenv("PORT", "5000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Frontend dev servers allowed through CORS
    CORS_ORIGINS: List[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]

    # Simulated latency before a summary is returned (seconds)
    SUMMARY_DELAY_SECONDS: float = float(os.getenv("SUMMARY_DELAY_SECONDS", "1.5"))

    # Follow-ups due within this many days of today get a reminder
    REMINDER_WINDOW_DAYS: int = int(os.getenv("REMINDER_WINDOW_DAYS", "1"))

    class Config:
        case_sensitive = True


settings = Settings()
