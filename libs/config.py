"""
Global configuration system for the loosehanger datagen services.

Provides globally shared configuration:
- Kafka cluster + Schema Registry settings
- OTEL settings
- Generic service-level runtime settings

Generation settings (rates, ratios, reference lists) live in
`apps.datagen.src.core.config` and must NOT be added here.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
DEFAULT_ENV_PATH: Path = PROJECT_ROOT / ".env"


class KafkaConfig(BaseSettings):
    """Kafka configuration shared by producers and admin tooling."""

    bootstrap_servers: str = Field(default="kafka:9092")
    schema_registry_url: str = Field(default="http://schema-registry:8081")
    client_id: str = Field(default="loosehanger-datagen")

    topic_partitions: int = Field(default=3, ge=1)
    topic_replication_factor: int = Field(default=1, ge=1)

    model_config = SettingsConfigDict(extra="ignore")


class OTELConfig(BaseSettings):
    """OpenTelemetry configuration shared across services."""

    service_name: str = Field(default="loosehanger-datagen")
    otlp_endpoint: str = Field(default="http://otel-collector:4317")
    otlp_headers: Optional[str] = Field(
        default=None,
        description="Comma separated key=value pairs sent with every export.",
    )
    otlp_insecure: bool = Field(default=True)
    resource_attributes: str = Field(default="deployment.environment=local")
    export_enabled: bool = Field(
        default=True,
        description="Disable to keep logs on stdout only (local runs, tests).",
    )

    model_config = SettingsConfigDict(extra="ignore")


class ServiceConfig(BaseSettings):
    """Generic service-level config."""

    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)
    environment: str = Field(default="local")

    model_config = SettingsConfigDict(extra="ignore")


class AppConfig(BaseSettings):
    """Root global configuration object."""

    kafka: KafkaConfig = Field(default_factory=KafkaConfig)
    otel: OTELConfig = Field(default_factory=OTELConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    @lru_cache(maxsize=1)
    def load(cls) -> "AppConfig":
        try:
            env_file = str(DEFAULT_ENV_PATH) if DEFAULT_ENV_PATH.exists() else None
            return cls(_env_file=env_file)
        except ValidationError as exc:
            raise RuntimeError("Invalid configuration values.") from exc
