"""Application configuration and settings."""

from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    service_name: str = Field(default="collector-membership-service")
    service_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Supabase Configuration (unset -> in-memory store)
    supabase_url: Optional[str] = Field(default=None)
    supabase_key: Optional[str] = Field(default=None)

    # Directory Query Configuration
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Cache Configuration
    member_query_cache_ttl_seconds: int = Field(default=30)
    collector_scope_cache_ttl_seconds: int = Field(default=300)
    summary_cache_ttl_seconds: int = Field(default=30)
    cache_max_entries: int = Field(default=1024)

    # Storage Timeout and Retry Configuration
    storage_timeout_seconds: float = Field(default=10.0)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay_seconds: float = Field(default=0.5)
    retry_max_delay_seconds: float = Field(default=5.0)

    # CORS
    enable_cors: bool = Field(default=True)
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("default_page_size", "max_page_size", "retry_max_attempts", "cache_max_entries")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
