"""Container platform detection with priority ordering and a short-lived cache."""
from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import threading
import time
import weakref
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

import structlog

from infra_sense.detection import probes as default_probes
from infra_sense.detection.base import HostSignalReader, SignalReader
from infra_sense.detection.types import (
    CONTAINERD,
    CRIO,
    DOCKER,
    HOST,
    KUBERNETES_CRIO,
    KUBERNETES_DOCKER,
    KUBERNETES_OTHER,
    LXC,
    PODMAN,
    RKT,
    SYSTEMD_NSPAWN,
    ContainerPlatform,
)

Probe = Callable[[SignalReader, Any], Union[bool, Awaitable[bool]]]
SafeProbe = Callable[[SignalReader, Any], Awaitable[bool]]

KUBERNETES_LABEL = "Kubernetes"


@dataclass(frozen=True)
class ProbeSet:
    """The probes a detector evaluates. Override fields to substitute probes."""

    kubernetes: Probe = default_probes.detect_kubernetes
    docker: Probe = default_probes.detect_docker_env
    docker_cgroup: Probe = default_probes.detect_docker_cgroup
    podman: Probe = default_probes.detect_podman
    crio: Probe = default_probes.detect_crio
    containerd: Probe = default_probes.detect_containerd
    rkt: Probe = default_probes.detect_rkt
    lxc: Probe = default_probes.detect_lxc
    systemd_nspawn: Probe = default_probes.detect_systemd_nspawn


@dataclass(frozen=True)
class CacheEntry:
    """A completed detection result and when its pass started."""

    platform: ContainerPlatform
    timestamp: float


# Inside Kubernetes: CRI-O is checked before Docker, anything else is "other".
# This order is authoritative.
_KUBERNETES_SEQUENCE: tuple[tuple[str, str, ContainerPlatform], ...] = (
    ("crio", KUBERNETES_CRIO.display_name, KUBERNETES_CRIO),
    ("docker_cgroup", KUBERNETES_DOCKER.display_name, KUBERNETES_DOCKER),
)

# Outside Kubernetes: first match wins. The marker-file Docker check outranks
# every env-derived signal; the cgroup Docker check is a late catch-all.
_STANDALONE_SEQUENCE: tuple[tuple[str, str, ContainerPlatform], ...] = (
    ("docker", DOCKER.display_name, DOCKER),
    ("podman", PODMAN.display_name, PODMAN),
    ("crio", CRIO.display_name, CRIO),
    ("docker_cgroup", "Docker (via cgroup)", DOCKER),
    ("containerd", CONTAINERD.display_name, CONTAINERD),
    ("rkt", RKT.display_name, RKT),
    ("lxc", LXC.display_name, LXC),
    ("systemd_nspawn", SYSTEMD_NSPAWN.display_name, SYSTEMD_NSPAWN),
)


def safe_probe(probe: Probe, label: str) -> SafeProbe:
    """Wrap a probe so it always resolves to a bool.

    Any exception raised by the probe is logged at error level under
    ``label`` and treated as "not detected".

    Args:
        probe: Sync or async probe taking (signals, logger)
        label: Name used in log events

    Returns:
        Async callable with the same arguments that never raises
    """

    @functools.wraps(probe)
    async def wrapper(signals: SignalReader, logger: Any) -> bool:
        try:
            result = probe(signals, logger)
            if inspect.isawaitable(result):
                result = await result
            detected = bool(result)
        except Exception as e:
            logger.error(
                "Probe error suppressed",
                probe=label,
                error=str(e) or type(e).__name__,
            )
            return False

        logger.debug("Probe evaluated", probe=label, detected=detected)
        return detected

    return wrapper


def _as_structlog(logger: Any) -> Any:
    """Return a logger that accepts structlog-style keyword context."""
    if logger is None:
        return structlog.get_logger()
    if isinstance(logger, logging.Logger):
        return structlog.wrap_logger(
            logger,
            processors=[structlog.processors.KeyValueRenderer(key_order=["event"])],
            wrapper_class=structlog.stdlib.BoundLogger,
        )
    return logger


class PlatformDetector:
    """Detects the container platform this process runs on.

    Results are cached for ``ttl_seconds``; concurrent callers share a
    single detection pass.
    """

    def __init__(
        self,
        signals: SignalReader | None = None,
        probes: ProbeSet | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.signals = signals or HostSignalReader()
        self.probes = probes or ProbeSet()
        self.ttl_seconds = (
            ttl_seconds
            if ttl_seconds is not None
            else self.signals.settings.cache_ttl_seconds
        )
        self._clock = clock
        self._cache: CacheEntry | None = None
        # Guards the cache slot and the per-loop pass locks; never held across an await
        self._state_lock = threading.Lock()
        self._pass_locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, asyncio.Lock
        ] = weakref.WeakKeyDictionary()

        self._kubernetes_gate = safe_probe(self.probes.kubernetes, KUBERNETES_LABEL)
        self._kubernetes_sequence = self._wrap(_KUBERNETES_SEQUENCE)
        self._standalone_sequence = self._wrap(_STANDALONE_SEQUENCE)

    def _wrap(
        self, sequence: tuple[tuple[str, str, ContainerPlatform], ...]
    ) -> list[tuple[SafeProbe, ContainerPlatform]]:
        return [
            (safe_probe(getattr(self.probes, attr), label), platform)
            for attr, label, platform in sequence
        ]

    @property
    def cached(self) -> CacheEntry | None:
        """The current cache entry, if any (may be stale)."""
        return self._cache

    def reset_cache(self) -> None:
        """Forget the cached result so the next detect() re-runs all probes."""
        with self._state_lock:
            self._cache = None

    def _pass_lock(self) -> asyncio.Lock:
        """Lock serializing detection passes on the running event loop."""
        loop = asyncio.get_running_loop()
        with self._state_lock:
            lock = self._pass_locks.get(loop)
            if lock is None:
                lock = self._pass_locks[loop] = asyncio.Lock()
            return lock

    def _fresh_entry(self, now: float) -> CacheEntry | None:
        with self._state_lock:
            entry = self._cache
        if entry is not None and now - entry.timestamp <= self.ttl_seconds:
            return entry
        return None

    async def detect(
        self, logger: Any = None, *, force_refresh: bool = False
    ) -> ContainerPlatform:
        """Detect the current container platform.

        Passes on one event loop are serialized, so concurrent misses there
        share a single pass. Callers on other threads or loops may run their
        own pass; each stores a complete entry under a thread lock.

        Args:
            logger: Logger with debug/info/warning/error methods that accept
                keyword context, such as a structlog logger. A stdlib
                ``logging.Logger`` is wrapped with structlog. Defaults to a
                structlog logger.
            force_refresh: Ignore any cached result

        Returns:
            The detected ContainerPlatform; HOST if nothing matched
        """
        log = _as_structlog(logger)

        async with self._pass_lock():
            now = self._clock()
            entry = None if force_refresh else self._fresh_entry(now)
            if entry is not None:
                log.debug("Returning cached platform", platform=entry.platform.display_name)
                return entry.platform

            platform = await self._run_probes(log)
            with self._state_lock:
                self._cache = CacheEntry(platform=platform, timestamp=now)
            return platform

    async def _run_probes(self, log: Any) -> ContainerPlatform:
        if await self._kubernetes_gate(self.signals, log):
            log.debug("Inside Kubernetes environment")
            platform = await self._detect_kubernetes_runtime(log)
            log.debug("Detected Kubernetes platform", platform=platform.display_name)
            return platform

        for probe, platform in self._standalone_sequence:
            if await probe(self.signals, log):
                log.debug("Detected container platform", platform=platform.display_name)
                return platform

        log.debug("No container detected; defaulting to host environment")
        return HOST

    async def _detect_kubernetes_runtime(self, log: Any) -> ContainerPlatform:
        for probe, platform in self._kubernetes_sequence:
            if await probe(self.signals, log):
                return platform

        log.debug("Kubernetes runtime detected as 'other'")
        return KUBERNETES_OTHER


_default_detector: PlatformDetector | None = None
_default_lock = threading.Lock()


def get_default_detector() -> PlatformDetector:
    """Return the process-wide detector, creating it on first use."""
    global _default_detector
    with _default_lock:
        if _default_detector is None:
            _default_detector = PlatformDetector()
    return _default_detector


async def detect_container_platform(
    logger: Any = None, *, force_refresh: bool = False
) -> ContainerPlatform:
    """Detect the platform using the process-wide detector and cache."""
    return await get_default_detector().detect(logger, force_refresh=force_refresh)


def detect_container_platform_sync(
    logger: Any = None, *, force_refresh: bool = False
) -> ContainerPlatform:
    """Blocking variant of detect_container_platform for code without a loop."""
    return asyncio.run(detect_container_platform(logger, force_refresh=force_refresh))


def reset_cached_platform() -> None:
    """Clear the process-wide cached result."""
    if _default_detector is not None:
        _default_detector.reset_cache()
