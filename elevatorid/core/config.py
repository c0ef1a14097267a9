
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "ElevatorID API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./elevatorid_dev.db",
        alias="DATABASE_URL",
    )
    sqlite_busy_timeout: int = Field(
        default=30, alias="SQLITE_BUSY_TIMEOUT",
    )  # seconds a writer waits for the database lock

    # Multi-tenancy default
    default_client_id: str = Field(default="default", alias="DEFAULT_CLIENT_ID")

    # Generated part identifiers, e.g. PRT-7K2QX9AB
    part_uid_prefix: str = Field(default="PRT-", alias="PART_UID_PREFIX")
    part_uid_length: int = Field(default=8, alias="PART_UID_LENGTH")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

settings = Settings()
