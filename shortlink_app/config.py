from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


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
    debug: bool = False

    # Application
    app_name: str = "Shortlink Service"
    app_version: str = "1.0.0"
    secret_key: str = "your-secret-key-here-change-in-production"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Identity
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = 60 * 24  # 0 disables expiry
    bcrypt_rounds: int = 12

    # Database
    database_url: str = "sqlite:///./shortlinks.db"
    store_timeout_seconds: float = 5.0  # Upper bound for any single store call

    # Short links
    base_url: str = "http://127.0.0.1:8000"
    short_code_length: int = 7
    code_max_attempts: int = 10
    redirect_status_code: int = 302

    # Short code generation strategy
    short_code_strategy: str = "random"  # Options: "random", "base62"
    short_code_salt: int = 1256  # Offset added to the sequence by the Base62 strategy

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 60 * 60 * 24  # Lookup cache TTL in seconds (24 hours)

    # Analytics
    stats_daily_days: int = 7

    # Requests
    max_request_body_bytes: int = 1024 * 1024

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 60

    # CORS
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
