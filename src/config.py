"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Retention sweeper
    retention_days: int = 15  # rides older than this are purged
    sweep_interval_seconds: int = 60  # scheduler tick period

    # Store wiring
    id_strategy: str = "uuid"  # "uuid" | "sequential"
    seed_demo_accounts: bool = True

    # HTTP adapter
    rate_limit: str = "100/minute"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
