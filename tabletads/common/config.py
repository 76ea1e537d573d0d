"""
Configuration management for tabletads.

Supports loading from environment variables and YAML files.
"""

import re
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SQL_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class DatabaseSettings(BaseSettings):
    """PostgreSQL configuration (used by the ``postgres`` store backend)."""

    host: str = "localhost"
    port: int = 5432
    name: str = "postgres"
    user: str = "postgres"
    password: str = ""
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def async_url(self) -> str:
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class SupabaseSettings(BaseSettings):
    """Supabase project configuration (used by the ``supabase`` store backend)."""

    url: str = ""
    anon_key: str = ""


class StoreSettings(BaseSettings):
    """Data store selection and object names."""

    backend: Literal["supabase", "postgres"] = "supabase"

    ads_for_location_rpc: str = "get_ads_for_location_v3"
    increment_budget_rpc: str = "increment_orcamento_utilizado"

    @field_validator("ads_for_location_rpc", "increment_budget_rpc")
    @classmethod
    def validate_function_name(cls, v: str) -> str:
        # Interpolated into SQL by the postgres backend
        if not _SQL_IDENTIFIER.match(v):
            raise ValueError(f"Invalid function name: {v}")
        return v


class ServerSettings(BaseSettings):
    """Uvicorn / HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4
    reload: bool = False


# ---------------------------------------------------------------------------
# Ad Serving
# ---------------------------------------------------------------------------

class AdServingSettings(BaseSettings):
    """Playlist defaults sent to the tablets."""

    # Re-poll interval, independent of playlist size
    next_fetch_in_seconds: int = 300

    # Placeholders until the store exposes media type and duration
    default_media_type: str = "video"
    default_duration_seconds: int = 15

    impression_token_prefix: str = "imp"


class BillingSettings(BaseSettings):
    """Impression billing configuration."""

    # Flat cost charged per recorded view, same for every campaign
    cost_per_view: Decimal = Decimal("0.10")


class CORSSettings(BaseSettings):
    """Headers attached to every edge response."""

    allow_origin: str = "*"
    allow_headers: str = "authorization, x-client-info, apikey, content-type"

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Headers": self.allow_headers,
        }


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------

class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "console"] = "json"


class MonitoringSettings(BaseSettings):
    """Prometheus / monitoring configuration."""

    enabled: bool = True


# ---------------------------------------------------------------------------
# Root Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TABLETADS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = "tabletads"
    app_version: str = "0.1.0"
    debug: bool = False
    env: Literal["dev", "prod", "test"] = "dev"

    # Nested settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    ad_serving: AdServingSettings = Field(default_factory=AdServingSettings)
    billing: BillingSettings = Field(default_factory=BillingSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        if v not in ("dev", "prod", "test"):
            raise ValueError(f"Invalid environment: {v}")
        return v


# ---------------------------------------------------------------------------
# YAML Loader
# ---------------------------------------------------------------------------

def load_yaml_config(config_path: Path) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def merge_configs(base: dict, override: dict) -> dict:
    """Deep-merge two configuration dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


_SECTION_CLASSES: dict[str, type[BaseSettings]] = {
    "server": ServerSettings,
    "database": DatabaseSettings,
    "supabase": SupabaseSettings,
    "store": StoreSettings,
    "ad_serving": AdServingSettings,
    "billing": BillingSettings,
    "cors": CORSSettings,
    "logging": LoggingSettings,
    "monitoring": MonitoringSettings,
}


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings.

    Loads from:
    1. configs/base.yaml (base configuration)
    2. configs/{env}.yaml (environment-specific overrides)
    3. Environment variables (highest priority)
    """
    import os

    env = os.getenv("TABLETADS_ENV", "dev")

    config_dir = Path(__file__).parent.parent.parent / "configs"

    base_config = load_yaml_config(config_dir / "base.yaml")
    env_config = load_yaml_config(config_dir / f"{env}.yaml")
    merged = merge_configs(base_config, env_config)

    # Flatten nested config for Pydantic
    flat_config: dict = {}
    if "app" in merged:
        flat_config["app_name"] = merged["app"].get("name", "tabletads")
        flat_config["app_version"] = merged["app"].get("version", "0.1.0")
        flat_config["debug"] = merged["app"].get("debug", False)

    flat_config["env"] = env

    # pydantic-settings gives init kwargs higher priority than env vars,
    # so env-var overrides are merged into the YAML dict first.
    for section_key, settings_cls in _SECTION_CLASSES.items():
        section_data = dict(merged.get(section_key, {}))

        # TABLETADS_SECTION__FIELD -> field
        prefix = f"TABLETADS_{section_key.upper()}__"
        for env_key, env_value in os.environ.items():
            if env_key.startswith(prefix):
                field_name = env_key[len(prefix):].lower()
                section_data[field_name] = env_value

        flat_config[section_key] = settings_cls(**section_data)

    return Settings(**flat_config)


# Convenience alias
settings = get_settings()
