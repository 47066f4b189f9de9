"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "broadside"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    def resource(self) -> dict[str, str]:
        """Resource attributes shared by every exporter."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`BROADSIDE_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()
        data.update(overrides)

        for signal in ("tracing", "metrics", "logging"):
            flag = _flag_from_env(
                f"BROADSIDE_ENABLE_{signal.upper()}",
                f"OTEL_{_OTEL_SIGNAL[signal].upper()}_ENABLED",
            )
            if flag is not None:
                data[f"enable_{signal}"] = flag

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        for signal, path in _OTEL_SIGNAL.items():
            key = f"otlp_{path}_endpoint"
            if data.get(key):
                continue
            explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{path.upper()}_ENDPOINT")
            data[key] = explicit or _with_suffix(base_endpoint, f"v1/{path}")

        service_name = os.getenv("OTEL_SERVICE_NAME")
        service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")
        if service_name:
            data["service_name"] = service_name
        if service_namespace:
            data["service_namespace"] = service_namespace

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            attrs = {**data.get("resource_attributes", {})}
            for part in resource_env.split(","):
                if "=" not in part:
                    continue
                key, value = part.split("=", 1)
                attrs[key.strip()] = value.strip()
            data["resource_attributes"] = attrs

        # An endpoint implies the matching exporter is wanted.
        for signal, path in _OTEL_SIGNAL.items():
            if data.get(f"otlp_{path}_endpoint"):
                data[f"enable_{signal}"] = True

        return cls(**data)


_OTEL_SIGNAL = {"tracing": "traces", "metrics": "metrics", "logging": "logs"}


def _flag_from_env(*names: str) -> bool | None:
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


def _with_suffix(base: str | None, suffix: str) -> str | None:
    if not base:
        return None
    return f"{base.rstrip('/')}/{suffix}"


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise telemetry subsystems lazily."""

    from .logger import init_logging
    from .metrics import init_metrics
    from .tracer import init_tracing

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
