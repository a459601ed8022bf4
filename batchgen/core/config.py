"""Application configuration loaded from environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults and env var overrides."""

    # App
    app_env: str = "development"
    app_port: int = 9090
    log_level: str = "INFO"

    # Worker pool (None -> one worker per CPU)
    max_workers: Optional[int] = None

    # Job ceilings (requests above these are rejected up front)
    max_transactions: int = 100_000
    max_batches: int = 10_000
    max_copies: int = 100
    max_template_bytes: int = 10 * 1024 * 1024

    # Delivery
    archive_store_capacity: int = 50
    output_dir: str = "generated"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
