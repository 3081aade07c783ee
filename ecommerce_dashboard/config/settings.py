"""
E-Commerce Dashboard Engine
Centralized Configuration Management

Pydantic settings with environment variable support for the aggregation
engine, the payload source, logging and the API server.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Aggregation Engine Configuration"""

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    # Top-N + Others bucketing for proportional views
    bucket_threshold_count: int = Field(default=7, ge=1, description="Group count above which bucketing applies")
    bucket_max_groups: int = Field(default=6, ge=1, description="Most groups kept before merging into Others")
    bucket_min_share_pct: float = Field(default=5.0, ge=0, le=100, description="Share (%) below which no further groups are kept")

    # Cascading options
    option_scan_limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Cap on records scanned when resolving filter options (unset scans everything)",
    )

    # Profitability
    profit_view: str = Field(default="price", description="Default profit ratio view: price or weight")

    # Rankings
    top_categories_limit: int = Field(default=10, ge=1, description="Categories in the top revenue ranking")
    rated_products_limit: int = Field(default=5, ge=1, description="Products in best/worst rated rankings")
    profitable_products_limit: int = Field(default=10, ge=1, description="Products in the profitability ranking")
    profitable_min_rating: float = Field(default=4.0, ge=1, le=5, description="Minimum rating for profitable products")

    @field_validator("profit_view")
    @classmethod
    def validate_profit_view(cls, v: str) -> str:
        """Validate profit view value"""
        allowed = ["price", "weight"]
        if v.lower() not in allowed:
            raise ValueError(f"Profit view must be one of: {allowed}")
        return v.lower()


class DataSettings(BaseSettings):
    """Dashboard Payload Source Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    payload_path: str = Field(default="./data/dashboard.json", description="Dashboard JSON payload path")
    fallback_order_year: int = Field(default=2023, description="Year used when a product has no derivable order date")
    demo_output_path: str = Field(default="./data/generated/dashboard.json", description="Demo payload output path")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="ecommerce-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_reload: bool = Field(default=False, alias="API_RELOAD", description="Enable reload")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    engine: EngineSettings = Field(default_factory=EngineSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
