"""Configuration management for RepoWarden."""

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SeverityThreshold = Literal['critical', 'high', 'medium', 'low', 'info']


class Settings(BaseSettings):
    """RepoWarden configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="dev", description="Environment: dev, prod")

    # GitHub Configuration
    github_token: Optional[str] = Field(
        default=None,
        description="GitHub token used for repository configuration reads and fixes"
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL (override for GitHub Enterprise)"
    )
    org: Optional[str] = Field(
        default=None,
        description="Organization whose repositories are listed"
    )

    # Scan Configuration
    severity_threshold: SeverityThreshold = Field(
        default="low",
        description="Least severe finding level kept in scan results"
    )
    include_archived: bool = Field(
        default=False,
        description="Include archived repositories when listing"
    )
    include_forks: bool = Field(
        default=False,
        description="Include forked repositories when listing"
    )

    # Timeouts
    http_timeout: int = Field(
        default=30,
        description="GitHub API request timeout in seconds"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log format: json, console"
    )


class ScanOptions(BaseModel):
    """Options accepted by the scan orchestrator."""

    severity_threshold: SeverityThreshold = "low"
    include_archived: bool = False
    include_forks: bool = False
    org: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "ScanOptions":
        """Build scan options from settings, with keyword overrides applied."""
        settings = settings or get_settings()
        values = {
            "severity_threshold": settings.severity_threshold,
            "include_archived": settings.include_archived,
            "include_forks": settings.include_forks,
            "org": settings.org,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (for testing)."""
    global _settings
    _settings = None
