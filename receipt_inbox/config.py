"""
Centralized configuration using Pydantic Settings.

All environment variables are loaded and validated here.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Airtable (exchange rates + ledger)
    airtable_api_key: str = ""
    airtable_base_path: str = "https://api.airtable.com/v0/app00000000000000"
    airtable_exchange_rates_table: str = "Exchange Rates"
    airtable_ledger_table: str = "Expenses"
    airtable_ledger_record_url: str = ""  # e.g. https://airtable.com/appX/tblY
    airtable_timeout: int = 30

    # Public base URL the archived attachments are served from
    uploads_base_url: str = "https://uploads.example.com/"

    # MinIO
    minio_endpoint: str | None = None
    minio_access_key: str | None = None
    minio_secret_key: str | None = None
    minio_bucket: str = "receipts"
    minio_secure: bool = True
    archive_max_workers: int = 4

    # Outbound replies
    reply_from_address: str = "receipts@example.com"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_starttls: bool = True

    # IMAP polling (optional inbound trigger)
    imap_host: str = ""
    imap_username: str = ""
    imap_password: str = ""
    imap_folder: str = "INBOX"
    imap_poll_enabled: bool = False
    imap_poll_interval_minutes: int = 5

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True  # False for colored dev output


# Global settings instance
settings = Settings()
