from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    DATABASE_URL and JWT_SECRET are required; everything else has a default.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.database_url: Optional[str] = os.getenv("DATABASE_URL")
        self.jwt_secret: Optional[str] = os.getenv("JWT_SECRET")
        self.jwt_algorithm: str = "HS256"
        self.access_token_expire_days: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
        self.default_credits: int = int(os.getenv("DEFAULT_CREDITS", "20"))
        self.google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY")
        self.chat_model: str = os.getenv("CHAT_MODEL", "gemini-2.5-flash")
        self.cors_origins: List[str] = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ]

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ValueError("DATABASE_URL is not set. Check your .env file!")
        return self.database_url

    def require_jwt_secret(self) -> str:
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET is not set. Check your .env file!")
        return self.jwt_secret


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
