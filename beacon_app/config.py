from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


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
    app_name: str = "Visitor Beacon"
    app_version: str = "2.4.0"
    
    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    
    # Counting store settings
    store_backend: str = "redis"  # Options: "redis", "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = ""  # Normalized to end with ":" by KeySpace
    store_timeout: float = 2.0  # Seconds, per store operation
    store_connect_retries: int = 3
    store_connect_retry_delay: float = 5.0  # Seconds between startup pings
    
    # HTTP
    cors_allow_origins: List[str] = ["*"]
    trust_forwarded_headers: bool = True  # Honour X-Forwarded-For / X-Real-IP
    strict_callback: bool = False  # Reject callbacks that aren't JS identifiers
    
    # Logging
    log_level: str = "INFO"
    
    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
