"""Configuration management for the fraud review service.

Configuration is loaded from environment variables. Every scoring constant
lives here so operators can tune sensitivity without a redeploy.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Constants for database URL construction
POSTGRESQL_PREFIX = "postgresql://"
ASYNCPG_DRIVER = "+asyncpg"


def _split_csv(v: str | list[str] | tuple[str, ...] | set[str]) -> list[str]:
    """Parse a comma-separated string into a list of non-empty items."""
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return list(v)


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    POSTGRES = "postgres"


class RandomMode(str, Enum):
    UNIFORM = "uniform"
    SEEDED = "seeded"
    FIXED = "fixed"


class StationMatchMode(str, Enum):
    EXACT = "exact"
    SUBSTRING = "substring"


class AppConfig(BaseSettings):
    name: str = Field(default="transit-fraud-review")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=4)

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class DatabaseConfig(BaseSettings):
    # Primary: Full connection URL
    url_app: str = Field(default="", alias="database_url_app")

    # Fallback: Individual components
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    name: str = Field(default="transit_fraud")
    user: str = Field(default="postgres")
    password: SecretStr = Field(default=SecretStr(""))
    pool_size: int = Field(default=10)
    max_overflow: int = Field(default=20)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)
    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        populate_by_name=True,  # Allow alias to work
    )

    @property
    def async_url(self) -> str:
        """Build async database URL."""
        if self.url_app:
            # Convert postgresql:// to postgresql+asyncpg:// if needed
            url = self.url_app
            if url.startswith(POSTGRESQL_PREFIX) and ASYNCPG_DRIVER not in url:
                new_prefix = POSTGRESQL_PREFIX.removesuffix("://") + ASYNCPG_DRIVER + "://"
                url = url.replace(POSTGRESQL_PREFIX, new_prefix, 1)
            return url
        password = self.password.get_secret_value()
        return f"postgresql{ASYNCPG_DRIVER}://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class StoreConfig(BaseSettings):
    backend: StoreBackend = Field(default=StoreBackend.MEMORY)
    default_limit: int = Field(default=100, ge=1)
    max_limit: int = Field(default=500, ge=1)
    create_schema: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="STORE_")


class ScoringConfig(BaseSettings):
    """Risk scoring policy and status thresholds."""

    base_score: float = Field(default=0.0)
    score_floor: float = Field(default=0.0, ge=0.0, le=1.0)
    score_ceiling: float = Field(default=1.0, ge=0.0, le=1.0)

    high_amount_threshold: float = Field(default=100.0)
    high_amount_increment: float = Field(default=0.3)
    low_amount_threshold: float = Field(default=1.0)
    low_amount_increment: float = Field(default=0.4)

    high_risk_stations: Annotated[list[str], NoDecode] = Field(
        default=["East Station", "Central Station"]
    )
    station_match: StationMatchMode = Field(default=StationMatchMode.EXACT)
    station_increment: float = Field(default=0.2)

    suspicious_suffixes: Annotated[list[str], NoDecode] = Field(default=["7"])
    suffix_increment: float = Field(default=0.3)

    # Off-hours window [start, end), wrapping past midnight when start > end
    off_hours_start: int = Field(default=23, ge=0, le=24)
    off_hours_end: int = Field(default=5, ge=0, le=24)
    off_hours_increment: float = Field(default=0.15)
    timezone: str = Field(default="UTC")

    random_mode: RandomMode = Field(default=RandomMode.UNIFORM)
    random_min: float = Field(default=0.0)
    random_max: float = Field(default=0.3)
    random_seed: int | None = Field(default=None)
    random_fixed_value: float = Field(default=0.0, ge=0.0, lt=1.0)
    seed_modulus: int = Field(default=100, ge=1)

    flag_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    clear_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    risk_high_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    risk_medium_threshold: float = Field(default=0.4, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    @field_validator("high_risk_stations", "suspicious_suffixes", mode="before")
    @classmethod
    def parse_csv_list(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list."""
        return _split_csv(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> ScoringConfig:
        if self.clear_threshold > self.flag_threshold:
            raise ValueError(
                "SCORING_CLEAR_THRESHOLD must not exceed SCORING_FLAG_THRESHOLD "
                f"({self.clear_threshold} > {self.flag_threshold})"
            )
        if self.score_floor > self.score_ceiling:
            raise ValueError("SCORING_SCORE_FLOOR must not exceed SCORING_SCORE_CEILING")
        if self.random_min > self.random_max:
            raise ValueError("SCORING_RANDOM_MIN must not exceed SCORING_RANDOM_MAX")
        if self.risk_medium_threshold > self.risk_high_threshold:
            raise ValueError(
                "SCORING_RISK_MEDIUM_THRESHOLD must not exceed SCORING_RISK_HIGH_THRESHOLD"
            )
        return self


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="transit-fraud-review")
    otlp_endpoint: str | None = Field(default=None)
    otlp_insecure: bool = Field(default=True)
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="OTEL_")


class SecurityConfig(BaseSettings):
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8080"]
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PATCH"])
    cors_allow_headers: list[str] = Field(default=["Authorization", "Content-Type", "X-Request-ID"])

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list of origins."""
        return _split_csv(v)


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @model_validator(mode="after")
    def validate_store_settings(self) -> Settings:
        """The in-memory store loses every record on restart."""
        if self.app.env == AppEnvironment.PROD and self.store.backend == StoreBackend.MEMORY:
            raise ValueError(
                "STORE_BACKEND=memory is not allowed in the prod environment. "
                "Set STORE_BACKEND=postgres."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    get_settings.cache_clear()
    return get_settings()
