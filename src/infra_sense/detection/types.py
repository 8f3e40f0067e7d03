"""Container platform classification types."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PlatformType(str, Enum):
    """How a process is orchestrated."""

    KUBERNETES = "kubernetes"
    STANDALONE = "standalone"
    HOST = "host"


class Runtime(str, Enum):
    """Container runtime implementation."""

    DOCKER = "docker"
    CRIO = "crio"
    CONTAINERD = "containerd"
    PODMAN = "podman"
    RKT = "rkt"
    LXC = "lxc"
    SYSTEMD_NSPAWN = "systemd-nspawn"
    OTHER = "other"
    NONE = "none"


# Every valid (type, runtime) pairing and its label
DISPLAY_NAMES: dict[tuple[PlatformType, Runtime], str] = {
    (PlatformType.KUBERNETES, Runtime.CRIO): "Kubernetes (CRI-O)",
    (PlatformType.KUBERNETES, Runtime.DOCKER): "Kubernetes (Docker)",
    (PlatformType.KUBERNETES, Runtime.OTHER): "Kubernetes (other)",
    (PlatformType.STANDALONE, Runtime.DOCKER): "Docker",
    (PlatformType.STANDALONE, Runtime.PODMAN): "Podman",
    (PlatformType.STANDALONE, Runtime.CRIO): "CRI-O",
    (PlatformType.STANDALONE, Runtime.CONTAINERD): "containerd",
    (PlatformType.STANDALONE, Runtime.RKT): "rkt",
    (PlatformType.STANDALONE, Runtime.LXC): "LXC/LXD",
    (PlatformType.STANDALONE, Runtime.SYSTEMD_NSPAWN): "systemd-nspawn",
    (PlatformType.HOST, Runtime.NONE): "Host (no recognized container)",
}


@dataclass(frozen=True)
class ContainerPlatform:
    """A detected platform.

    Only the pairings listed in ``DISPLAY_NAMES`` can be constructed, and the
    display name always comes from that table.
    """

    type: PlatformType
    runtime: Runtime

    def __post_init__(self) -> None:
        # Accept raw strings ("kubernetes", "crio") as well as enum members
        object.__setattr__(self, "type", PlatformType(self.type))
        object.__setattr__(self, "runtime", Runtime(self.runtime))
        if (self.type, self.runtime) not in DISPLAY_NAMES:
            raise ValueError(
                f"Invalid platform combination: {self.type.value}/{self.runtime.value}"
            )

    @property
    def display_name(self) -> str:
        """Human-readable label, e.g. "Kubernetes (CRI-O)"."""
        return DISPLAY_NAMES[(self.type, self.runtime)]

    @property
    def in_container(self) -> bool:
        """True unless running directly on the host."""
        return self.type is not PlatformType.HOST

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON/YAML output."""
        return {
            "type": self.type.value,
            "runtime": self.runtime.value,
            "display_name": self.display_name,
        }

    def __str__(self) -> str:
        return self.display_name


KUBERNETES_CRIO = ContainerPlatform(PlatformType.KUBERNETES, Runtime.CRIO)
KUBERNETES_DOCKER = ContainerPlatform(PlatformType.KUBERNETES, Runtime.DOCKER)
KUBERNETES_OTHER = ContainerPlatform(PlatformType.KUBERNETES, Runtime.OTHER)
DOCKER = ContainerPlatform(PlatformType.STANDALONE, Runtime.DOCKER)
PODMAN = ContainerPlatform(PlatformType.STANDALONE, Runtime.PODMAN)
CRIO = ContainerPlatform(PlatformType.STANDALONE, Runtime.CRIO)
CONTAINERD = ContainerPlatform(PlatformType.STANDALONE, Runtime.CONTAINERD)
RKT = ContainerPlatform(PlatformType.STANDALONE, Runtime.RKT)
LXC = ContainerPlatform(PlatformType.STANDALONE, Runtime.LXC)
SYSTEMD_NSPAWN = ContainerPlatform(PlatformType.STANDALONE, Runtime.SYSTEMD_NSPAWN)
HOST = ContainerPlatform(PlatformType.HOST, Runtime.NONE)

ALL_PLATFORMS: tuple[ContainerPlatform, ...] = (
    KUBERNETES_CRIO,
    KUBERNETES_DOCKER,
    KUBERNETES_OTHER,
    DOCKER,
    PODMAN,
    CRIO,
    CONTAINERD,
    RKT,
    LXC,
    SYSTEMD_NSPAWN,
    HOST,
)
