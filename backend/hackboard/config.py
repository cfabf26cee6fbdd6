from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "hackboard-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Hackboard")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/hackboard_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "json")  # json|console

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "10080"))  # 7d
    participant_otp_ttl_min: int = int(os.getenv("PARTICIPANT_OTP_TTL_MIN", "5"))
    admin_otp_ttl_min: int = int(os.getenv("ADMIN_OTP_TTL_MIN", "10"))
    registration_ttl_seconds: int = int(os.getenv("REGISTRATION_TTL_SECONDS", "300"))
    # Comma-separated; used by hackboard-seed-admins when no --email is given
    admin_emails: str = os.getenv("ADMIN_EMAILS", "")

    # Email
    email_backend: str = os.getenv("EMAIL_BACKEND", "rq")  # rq|log
    email_from: str = os.getenv("EMAIL_FROM", "no-reply@hackboard.local")
    smtp_host: str = os.getenv("SMTP_HOST", "localhost")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")
    smtp_starttls: bool = os.getenv("SMTP_STARTTLS", "1") == "1"

    # Leaderboard
    leaderboard_top_n: int = int(os.getenv("LEADERBOARD_TOP_N", "50"))
    leaderboard_default_limit: int = int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "50"))
    # 0 = rank each page on its own, 1 = ties spanning a page boundary keep their global rank
    leaderboard_global_ties: bool = os.getenv("LEADERBOARD_GLOBAL_TIES", "1") == "1"

    # Recompute a participant's ledger after every review and refuse to commit a divergence
    ledger_audit: bool = os.getenv("LEDGER_AUDIT", "1") == "1"

settings = Settings()
