"""
Configuration management for the Barangay Services Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


DEFAULT_ADMIN_PASSWORD = "Admin@12345"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    DATABASE_URL: str = Field(
        default="sqlite:///./barangay.db",
        description="SQLAlchemy database URL (PostgreSQL in production)"
    )

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Timezone used for control numbers and API datetimes (DB stores UTC)
    TZ: str = Field(default="Asia/Manila", description="Barangay local timezone")

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Staff sessions
    SESSION_TTL_HOURS: int = Field(default=8, ge=1, description="Lifetime of a staff session in hours")
    SESSION_WARNING_MINUTES: int = Field(
        default=5,
        ge=0,
        description="Remaining minutes at which a session is reported as expiring soon"
    )

    # Login throttling
    LOGIN_MAX_FAILED_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="Failed logins allowed per username inside the lockout window"
    )
    LOGIN_LOCKOUT_MINUTES: int = Field(default=15, ge=1, description="Failed-login counting window in minutes")

    # Certificate control numbers
    CONTROL_NUMBER_MAX_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="How many random control numbers to try before accepting a duplicate"
    )

    # Outbound email notifications
    NOTIFICATIONS_ENABLED: bool = Field(default=False, description="Send status emails to residents")
    EMAIL_API_URL: str = Field(default="https://api.resend.com/emails", description="HTTP email API endpoint")
    EMAIL_API_KEY: Optional[str] = Field(default=None, description="Bearer key for the email API")
    EMAIL_FROM: str = Field(default="Barangay Office <onboarding@resend.dev>", description="Sender address")

    # Initial admin bootstrap settings
    INITIAL_ADMIN_USERNAME: str = Field(
        default="admin",
        description="Username for initial admin user (used when no admin exists)"
    )
    INITIAL_ADMIN_PASSWORD: str = Field(
        default=DEFAULT_ADMIN_PASSWORD,
        description="Password for initial admin user (used when no admin exists)"
    )
    INITIAL_ADMIN_FULL_NAME: str = Field(
        default="System Administrator",
        description="Display name for initial admin user"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

            if self.INITIAL_ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
                raise ValueError(
                    "INITIAL_ADMIN_PASSWORD must be changed from the default in production environment"
                )

            if self.NOTIFICATIONS_ENABLED and not self.EMAIL_API_KEY:
                raise ValueError(
                    "EMAIL_API_KEY is required when NOTIFICATIONS_ENABLED is set in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
