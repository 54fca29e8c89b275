"""
Configuration management for the Portfolio Renovation Advisor.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables (``PRA_`` prefix) or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote services
    api_base_url: str = Field(default="http://localhost:8000/api", description="Base URL of the energy/financial API")
    api_token: str | None = Field(default=None, description="Bearer token for the remote services")
    request_timeout_sec: float = Field(default=120.0, gt=0, description="Per-request timeout for collaborator calls")
    max_retries: int = Field(default=2, ge=0, description="Transport retries inside the HTTP clients")

    # Batch analysis
    concurrency_limit: int = Field(default=3, ge=1, description="Buildings analysed concurrently per window")
    default_project_lifetime: int = Field(default=20, ge=1, le=30, description="Project lifetime in years")
    output_tier: Literal["private", "professional", "public", "complete"] = Field(
        default="professional",
        description="Statistical detail requested from the financial service",
    )
    default_persona: str = Field(default="cost-optimization", description="Persona used when none is given")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")


# Global settings instance
settings = Settings()
