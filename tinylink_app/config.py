from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "TinyLink"
    app_version: str = "1.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"

    # Link store
    store_backend: str = "sqlalchemy"  # Options: "sqlalchemy", "redis", "memory"
    database_url: str = "sqlite:///./tinylink.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "tinylink"
    storage_timeout: float = 5.0  # Seconds a store call may wait on the database

    # Short codes
    max_generation_attempts: int = 10  # Bound on random-code collision retries

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
