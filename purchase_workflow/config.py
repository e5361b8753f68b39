from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workflow persistence
    workflow_store: str = "local"  # "local" | "memory"
    workflows_dir: str = "data/workflows"

    # Attachments
    attachment_store: str = "local"  # "local" | "memory"
    attachments_dir: str = "data/attachments"
    attachment_base_url: str = "/attachments"
    max_attachment_bytes: int = 10 * 1024 * 1024

    # Yard directory
    yards_file: str | None = None

    # Purchases
    default_currency: str = "JPY"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def for_testing(cls) -> "AppConfig":
        """Pre-configured for tests: everything in memory, no files touched."""
        return cls(
            workflow_store="memory",
            attachment_store="memory",
            yards_file=None,
        )
