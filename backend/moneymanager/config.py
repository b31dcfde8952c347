from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional


class Settings(BaseSettings):
    # Security: SECRET_KEY must be provided via environment variable
    # Generate with: python -c "import secrets; print(secrets.token_urlsafe(32))"
    SECRET_KEY: str  # REQUIRED - no default for security
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 600  # 10 hours

    # Database configuration
    DATABASE_URL: str  # PostgreSQL URL (required), sqlite:// accepted for local runs

    API_PREFIX: str = "/api/v1.0"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080

    # Links embedded in outgoing mail
    APP_BASE_URL: str = "http://localhost:8080"
    FRONTEND_URL: str = "http://localhost:5173"

    # Outbound mail
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: str = "no-reply@moneymanager.local"
    SMTP_USE_TLS: bool = True
    EMAIL_DELIVERY: str = "inline"  # inline or queue

    # Background job / Redis configuration
    REDIS_URL: str = "redis://redis:6379/0"
    EMAIL_QUEUE_NAME: str = "email_delivery"
    EMAIL_JOB_TIMEOUT: int = 120  # 2 minutes

    # Scheduled notifications
    SCHEDULER_ENABLED: bool = True
    REMINDER_TIMEZONE: str = "Asia/Ho_Chi_Minh"
    REMINDER_HOUR: int = 10
    SUMMARY_HOUR: int = 11

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/15minutes"
    REGISTER_RATE_LIMIT: str = "3/hour"

    LOG_LEVEL: str = "INFO"

    @field_validator("SECRET_KEY")
    @classmethod
    def _validate_secret_key(cls, value):
        """
        Validate SECRET_KEY for security best practices.
        """
        if not value or len(value) < 32:
            raise ValueError(
                "SECRET_KEY must be at least 32 characters long. "
                "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )

        # Prevent use of obvious insecure values
        insecure_values = [
            "your-secret-key",
            "change-this",
            "secret",
            "password",
            "123456",
            "changeme"
        ]
        value_lower = value.lower()
        for insecure in insecure_values:
            if insecure in value_lower:
                raise ValueError(
                    f"SECRET_KEY contains insecure pattern '{insecure}'. "
                    "Please generate a secure random key."
                )

        return value

    @field_validator("EMAIL_DELIVERY")
    @classmethod
    def _validate_email_delivery(cls, value):
        normalized = (value or "").strip().lower()
        if normalized not in {"inline", "queue"}:
            raise ValueError("EMAIL_DELIVERY must be 'inline' or 'queue'")
        return normalized

    @field_validator("API_PREFIX")
    @classmethod
    def _normalize_api_prefix(cls, value):
        value = (value or "").strip()
        if not value:
            return ""
        return "/" + value.strip("/")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def activation_base_url(self) -> str:
        """Absolute URL of the activation endpoint, without the token."""
        return f"{self.APP_BASE_URL.rstrip('/')}{self.API_PREFIX}/activate"

    @property
    def is_smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST)

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore extra environment variables not defined in the model


settings = Settings()
