from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True
    # Upper bound for connecting to / waiting on the store, in seconds
    DB_TIMEOUT_SECONDS: float = 10.0

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"

    # Divisions created on first startup when the table is empty
    DEFAULT_DIVISIONS: List[str] = []

    # First authenticated request for an unknown email creates a Staff record
    AUTO_PROVISION_USERS: bool = True

    ENV: str = "dev"  # "dev" or "prod"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    LOGIN_RATE_LIMIT: str = "10/minute"


settings = Settings()
