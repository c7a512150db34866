from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    supabase_url: str
    supabase_key: str
    supabase_service_role_key: Optional[str] = None

    # Streaks: IANA zone used as the "local" calendar, system zone when unset
    timezone: Optional[str] = None

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # App
    app_name: str = "StudySync"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
