"""Configuration management for infra-sense."""
from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    """How the detected platform is printed."""

    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


class DetectionSettings(BaseModel):
    """Well-known signal locations and detection tuning."""

    # Kubernetes
    kubernetes_service_host_env: str = "KUBERNETES_SERVICE_HOST"
    service_account_path: str = "/var/run/secrets/kubernetes.io/serviceaccount"
    kubernetes_dns_name: str = "kubernetes.default.svc"
    dns_timeout_seconds: float = Field(default=2.0, gt=0)

    # Container runtimes
    docker_marker_path: str = "/.dockerenv"
    container_env_var: str = "container"
    container_env_path: str = "/run/.containerenv"
    nspawn_marker_path: str = "/run/systemd/nspawn/in_container"

    # Result cache
    cache_ttl_seconds: float = Field(default=30.0, gt=0)


class InfraSenseConfig(BaseModel):
    """Main configuration for infra-sense."""

    # Logging (falls back to LOG_LEVEL / LOG_JSON / LOG_FILE)
    log_level: str = Field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "info").lower()
    )
    json_logs: bool = Field(
        default_factory=lambda: os.environ.get("LOG_JSON", "").lower() == "true"
    )
    log_file: str | None = Field(
        default_factory=lambda: os.environ.get("LOG_FILE") or None
    )

    output_format: OutputFormat = OutputFormat.TEXT

    detection: DetectionSettings = Field(default_factory=DetectionSettings)


def load_config(path: Path) -> InfraSenseConfig:
    """Load configuration from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    # Handle detection settings
    if "detection" in data and isinstance(data["detection"], dict):
        data["detection"] = DetectionSettings(**data["detection"])

    return InfraSenseConfig(**data)
