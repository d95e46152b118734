"""Configuration Settings for Auth Policy Service

Manages environment variables and application configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import Optional

from auth_policy_service.domain.models.policy import (
    DEFAULT_TAP_DEFAULT_LENGTH,
    DEFAULT_TAP_DEFAULT_LIFETIME,
    DEFAULT_TAP_MAXIMUM_LIFETIME,
    DEFAULT_TAP_MINIMUM_LIFETIME,
)


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "fm-auth-policy-service"
    service_version: str = "1.0.0"
    environment: str = "development"

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Redis configuration (settings lookup + audit trail)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components"""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Remote policy API (Microsoft Graph)
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_scope: str = "https://graph.microsoft.com/.default"
    graph_timeout_seconds: float = 30.0

    # Tenant credentials
    login_base_url: str = "https://login.microsoftonline.com"
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None  # delegated ("as user") context
    token_expiry_skew_seconds: int = 300

    # Settings lookup
    settings_category: str = "standards"
    global_settings_key: str = "AllTenants"

    # Audit trail
    audit_log_enabled: bool = True
    audit_log_max_entries: int = 500

    # Temporary Access Pass defaults
    tap_minimum_lifetime: int = DEFAULT_TAP_MINIMUM_LIFETIME
    tap_maximum_lifetime: int = DEFAULT_TAP_MAXIMUM_LIFETIME
    tap_default_lifetime: int = DEFAULT_TAP_DEFAULT_LIFETIME
    tap_default_length: int = DEFAULT_TAP_DEFAULT_LENGTH

    # CORS configuration
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance

    Returns:
        Settings instance
    """
    return Settings()
