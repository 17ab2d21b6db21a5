# app/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    port: int
    frontend_url: str
    env: str
    log_level: str

    jwt_secret: str
    jwt_algorithm: str
    access_token_expire_days: int

    database_url: str

    email_service: str
    email_user: str
    email_pass: str
    email_from: str
    smtp_host: str
    smtp_port: int | None
    smtp_timeout: float

    reminders_enabled: bool
    reminder_hour: int
    reminder_minute: int

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    환경변수(.env 포함)에서 설정을 한 번 읽어 캐시한다.
    테스트에서는 get_settings.cache_clear() 후 다시 읽으면 된다.
    """
    email_user = os.getenv("EMAIL_USER", "").strip()
    smtp_port = os.getenv("SMTP_PORT", "").strip()
    return Settings(
        port=int(os.getenv("PORT", "5000")),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
        env=os.getenv("ENV", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_expire_days=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7")),
        database_url=os.getenv("DATABASE_URL", ""),
        email_service=os.getenv("EMAIL_SERVICE", "gmail").strip().lower(),
        email_user=email_user,
        email_pass=os.getenv("EMAIL_PASS", ""),
        email_from=os.getenv("EMAIL_FROM", "").strip() or email_user,
        smtp_host=os.getenv("SMTP_HOST", "").strip(),
        smtp_port=int(smtp_port) if smtp_port else None,
        smtp_timeout=float(os.getenv("SMTP_TIMEOUT", "10")),
        reminders_enabled=_env_bool("REMINDERS_ENABLED", "true"),
        reminder_hour=int(os.getenv("REMINDER_HOUR", "9")),
        reminder_minute=int(os.getenv("REMINDER_MINUTE", "0")),
    )
