import os

from pydantic import BaseModel, Field


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    # Storage
    DATABASE_URL: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./eventbook.db"))
    REDIS_URL: str = Field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))

    # Auth
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")))

    # Per-event lock held around every seat counter mutation
    LOCK_TIMEOUT_SECONDS: float = Field(default_factory=lambda: float(os.getenv("LOCK_TIMEOUT_SECONDS", "10")))
    LOCK_BLOCKING_TIMEOUT_SECONDS: float = Field(default_factory=lambda: float(os.getenv("LOCK_BLOCKING_TIMEOUT_SECONDS", "5")))

    # Periodic drift repair (celery beat)
    RECONCILE_INTERVAL_SECONDS: int = Field(default_factory=lambda: int(os.getenv("RECONCILE_INTERVAL_SECONDS", "300")))

    CORS_ORIGINS: list[str] = Field(default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "*")))
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


settings = Settings()
