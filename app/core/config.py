
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Vendor Onboarding API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 10

    # Database (PostgreSQL via asyncpg or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./onboarding_dev.db",
        alias="DATABASE_URL",
    )
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Attachment storage
    storage_backend: str = Field(
        default="local", alias="STORAGE_BACKEND",
    )  # "local" | "supabase"
    storage_bucket: str = Field(default="photos", alias="STORAGE_BUCKET")
    storage_timeout: int = Field(default=30, alias="STORAGE_TIMEOUT")
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_key: str | None = Field(default=None, alias="SUPABASE_KEY")
    local_storage_dir: str = Field(default="./media", alias="LOCAL_STORAGE_DIR")
    public_base_url: str = Field(
        default="http://localhost:8000", alias="PUBLIC_BASE_URL",
    )  # Used to build /media URLs for the local backend

    # Registration policy
    natural_key_mutable_on_update: bool = Field(
        default=True, alias="NATURAL_KEY_MUTABLE_ON_UPDATE",
    )
    compensate_orphaned_attachments: bool = Field(
        default=False, alias="COMPENSATE_ORPHANED_ATTACHMENTS",
    )  # Delete blobs uploaded by a create that failed before persisting

    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def supabase_enabled(self) -> bool:
        """Supabase storage is usable only when both URL and key are configured."""
        return bool(self.supabase_url and self.supabase_key)

settings = Settings()
