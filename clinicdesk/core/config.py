"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application environment
    env: Literal["dev", "test", "prod"] = "dev"

    # Key-value substrate backing the document store
    database_url: str = "sqlite:///./data/clinicdesk.db"

    # Logging
    log_level: str = "INFO"

    # Per-collection quota for one serialized document (bytes)
    max_document_bytes: int = 5 * 1024 * 1024

    # Referential policy
    cascade_patient_delete: bool = False
    enforce_patient_references: bool = True

    # Text frozen into every signed consent form
    consent_agreement_text: str = (
        "I hereby give consent for the proposed treatment and agree to the "
        "associated costs."
    )

    # Provider filled into medical records that omit one
    default_provider: str = ""

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
