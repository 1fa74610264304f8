"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./data/tip_calculator.db"

    # Service
    service_name: str = "tip-gateway"
    environment: str = "production"  # "development" exposes error detail on 500s
    log_level: str = "INFO"
    cors_origin: str = "http://localhost:8080"
    host: str = "0.0.0.0"
    port: int = 3001

    # History pagination
    history_default_limit: int = 50
    history_max_limit: int = 100

    # API client
    api_base_url: str = "http://localhost:3001"
    http_timeout_seconds: float = 5.0

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
