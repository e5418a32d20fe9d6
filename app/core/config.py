"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Outbound mail
    email_username: Optional[str] = None
    email_password: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Business
    business_name: str = "Your Company"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def mail_configured(self) -> bool:
        """Whether SMTP credentials are available."""
        return bool(self.email_username and self.email_password)


settings = Settings()
