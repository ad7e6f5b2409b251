"""Application settings loaded from environment variables."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the AssignCheck web app."""

    model_config = SettingsConfigDict(env_prefix="ASSIGNCHECK_", extra="ignore")

    app_name: str = "AssignCheck"
    max_upload_mb: int = 25
    session_cookie_name: str = "assigncheck_session"
    max_sessions: int = 500
    session_ttl_seconds: float = 3600.0

    # OpenAI grading
    openai_model: str = Field(
        default="gpt-4.1-mini",
        validation_alias=AliasChoices("ASSIGNCHECK_OPENAI_MODEL", "OPENAI_MODEL"),
    )
    openai_temperature: float = 0.2
    openai_timeout_seconds: float = 60.0

    # CORS configuration
    cors_allow_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("ASSIGNCHECK_CORS_ALLOW_ORIGINS", "CORS_ALLOW_ORIGINS"),
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def cors_origin_list(self) -> list[str]:
        if self.cors_allow_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


settings = Settings()
