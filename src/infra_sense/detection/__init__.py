"""Container platform detection."""

from infra_sense.detection.base import HostSignalReader, SignalReader
from infra_sense.detection.detector import (
    PlatformDetector,
    ProbeSet,
    detect_container_platform,
    detect_container_platform_sync,
    reset_cached_platform,
    safe_probe,
)
from infra_sense.detection.types import ContainerPlatform, PlatformType, Runtime

__all__ = [
    "ContainerPlatform",
    "HostSignalReader",
    "PlatformDetector",
    "PlatformType",
    "ProbeSet",
    "Runtime",
    "SignalReader",
    "detect_container_platform",
    "detect_container_platform_sync",
    "reset_cached_platform",
    "safe_probe",
]
