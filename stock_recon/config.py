from datetime import timedelta, timezone
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ReconConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "INFO"

    # Data access
    data_backend: str = "csv"
    data_dir: str = "sample_data"
    fetch_workers: int = 4

    # Periods are calendar months in a fixed offset, UTC+5:30 by default
    reference_utc_offset_minutes: int = 330

    # Reconciliation
    rollforward_depth: int = 1
    product_unit_suffixes: List[str] = ["momo"]
    quantity_precision: int = 3

    # Submission
    auto_approve_roles: List[str] = ["admin", "operations_head"]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def reference_tz(self) -> timezone:
        """The fixed reference timezone every calendar day is measured in."""
        return timezone(timedelta(minutes=self.reference_utc_offset_minutes))


_config: Optional[ReconConfig] = None


def get_config() -> ReconConfig:
    """Return the ReconConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = ReconConfig()
    return _config


def set_config_for_test(**kwargs):
    """For testing only: override the ReconConfig instance with new values."""
    global _config
    _config = ReconConfig(**kwargs)
