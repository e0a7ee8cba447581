from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    supabase_url: str
    supabase_key: str

    # Storage
    storage_bucket: str = "study-content"
    signed_url_ttl_seconds: int = 3600  # 1 hour

    # Google Calendar
    google_calendar_api_url: str = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
    calendar_timeout_seconds: float = 10.0

    # App
    app_name: str = "Study Tracker"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"

settings = Settings()
