import os
import tempfile
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./swiftshop.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    RESET_DB: bool = False

    # per-item checkout locks
    LOCK_DIR: str = os.path.join(tempfile.gettempdir(), "swiftshop_locks")
    LOCK_TIMEOUT_SECONDS: float = 10.0

    IDEMPOTENCY_TTL_SECONDS: int = 86400
    IDEMPOTENCY_PURGE_INTERVAL_SECONDS: int = 3600

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
