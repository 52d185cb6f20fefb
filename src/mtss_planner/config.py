"""Configuration management for the MTSS planner."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Text-generation service settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    provider: Optional[str] = Field(None, validation_alias="LLM_PROVIDER")
    model: Optional[str] = Field(None, validation_alias="LLM_MODEL")
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v):
        """Only providers with a client implementation are accepted."""
        if v is None or v == "":
            return None
        v = v.lower()
        if v not in ("gemini", "claude"):
            raise ValueError("LLM_PROVIDER must be 'gemini' or 'claude'")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v):
        if v < 0:
            raise ValueError("MAX_RETRIES must not be negative")
        return v


class AppConfig(BaseSettings):
    """Application configuration settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    name: str = Field("mtss-planner", validation_alias="APP_NAME")
    version: str = Field("0.1.0", validation_alias="APP_VERSION")
    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level


class ReportConfig(BaseSettings):
    """Export and report settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    inspector_name: str = ""
    export_dir: Path = Path("exports")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    llm: LLMConfig = Field(default_factory=LLMConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment."""
        return cls()


# Global settings instance
settings = Settings.load()
