"""infra-sense - detect the container platform a process is running on."""

from infra_sense.detection import (
    ContainerPlatform,
    PlatformDetector,
    PlatformType,
    Runtime,
    detect_container_platform,
    detect_container_platform_sync,
    reset_cached_platform,
)

__version__ = "0.1.0"

__all__ = [
    "ContainerPlatform",
    "PlatformDetector",
    "PlatformType",
    "Runtime",
    "__version__",
    "detect_container_platform",
    "detect_container_platform_sync",
    "reset_cached_platform",
]
