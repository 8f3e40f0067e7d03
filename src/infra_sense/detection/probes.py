"""Signal probes, one per candidate platform.

Each probe answers a single yes/no question from environment, filesystem or
DNS evidence. Failures while gathering evidence are logged at debug level and
count as "not detected"; a probe never raises on I/O errors.
"""
from __future__ import annotations

import asyncio
from typing import Any

from infra_sense.detection.base import SignalReader


def _container_env(signals: SignalReader) -> str | None:
    """Lower-cased value of the "container" environment variable."""
    value = signals.read_env(signals.settings.container_env_var)
    return value.lower() if value else None


def _container_env_is(
    signals: SignalReader, expected: str, probe: str, logger: Any
) -> bool:
    value = _container_env(signals)
    found = value == expected
    logger.debug(
        "Container env var checked",
        probe=probe,
        var=signals.settings.container_env_var,
        value=value,
        found=found,
    )
    return found


def _container_metadata_contains(
    signals: SignalReader, needle: str, probe: str, logger: Any
) -> bool:
    """Check whether the container metadata file mentions ``needle``."""
    path = signals.settings.container_env_path
    try:
        if not signals.path_exists(path):
            logger.debug("Container metadata file missing", probe=probe, path=path)
            return False
        contents = signals.read_text(path)
    except OSError as e:
        logger.debug(
            "Error reading container metadata file",
            probe=probe,
            path=path,
            error=str(e),
        )
        return False

    found = needle in contents.lower()
    logger.debug(
        "Container metadata file checked",
        probe=probe,
        path=path,
        needle=needle,
        found=found,
    )
    return found


async def detect_kubernetes(signals: SignalReader, logger: Any) -> bool:
    """Detect Kubernetes via service env var, ServiceAccount mount, or cluster DNS."""
    settings = signals.settings

    svc_host = signals.read_env(settings.kubernetes_service_host_env)
    if svc_host:
        logger.debug(
            "Kubernetes service host env var set",
            var=settings.kubernetes_service_host_env,
            value=svc_host,
        )
        return True

    try:
        if signals.path_exists(settings.service_account_path):
            logger.debug(
                "Kubernetes ServiceAccount directory found",
                path=settings.service_account_path,
            )
            return True
    except OSError as e:
        logger.debug(
            "Error checking ServiceAccount path",
            path=settings.service_account_path,
            error=str(e),
        )

    try:
        addresses = await signals.resolve_dns(settings.kubernetes_dns_name)
        if addresses:
            logger.debug(
                "Kubernetes cluster DNS resolved",
                hostname=settings.kubernetes_dns_name,
                addresses=addresses,
            )
            return True
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug(
            "Kubernetes cluster DNS lookup failed",
            hostname=settings.kubernetes_dns_name,
            error=str(e) or type(e).__name__,
        )

    logger.debug("Not running inside Kubernetes")
    return False


async def detect_docker_env(signals: SignalReader, logger: Any) -> bool:
    """Detect Docker by its marker file."""
    path = signals.settings.docker_marker_path
    try:
        present = signals.path_exists(path)
    except OSError as e:
        logger.debug("Error checking Docker marker file", path=path, error=str(e))
        return False
    logger.debug("Docker marker file checked", path=path, present=present)
    return present


async def detect_docker_cgroup(signals: SignalReader, logger: Any) -> bool:
    """Detect Docker by the "container" env var."""
    return _container_env_is(signals, "docker", "docker_cgroup", logger)


async def detect_podman(signals: SignalReader, logger: Any) -> bool:
    """Detect Podman by env var or container metadata file."""
    if _container_env_is(signals, "podman", "podman", logger):
        return True
    return _container_metadata_contains(signals, "podman", "podman", logger)


async def detect_crio(signals: SignalReader, logger: Any) -> bool:
    """Detect CRI-O by env var or container metadata file."""
    if _container_env_is(signals, "crio", "crio", logger):
        return True
    return _container_metadata_contains(signals, "crio", "crio", logger)


async def detect_containerd(signals: SignalReader, logger: Any) -> bool:
    """Detect containerd by env var."""
    return _container_env_is(signals, "containerd", "containerd", logger)


async def detect_rkt(signals: SignalReader, logger: Any) -> bool:
    """Detect rkt by env var."""
    return _container_env_is(signals, "rkt", "rkt", logger)


async def detect_lxc(signals: SignalReader, logger: Any) -> bool:
    """Detect LXC/LXD by env var."""
    return _container_env_is(signals, "lxc", "lxc", logger)


async def detect_systemd_nspawn(signals: SignalReader, logger: Any) -> bool:
    """Detect systemd-nspawn by env var or its marker file."""
    if _container_env_is(signals, "systemd-nspawn", "systemd_nspawn", logger):
        return True

    path = signals.settings.nspawn_marker_path
    try:
        present = signals.path_exists(path)
    except OSError as e:
        logger.debug("Error checking nspawn marker file", path=path, error=str(e))
        return False
    logger.debug("nspawn marker file checked", path=path, present=present)
    return present
