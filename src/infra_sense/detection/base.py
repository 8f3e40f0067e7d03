"""Signal sources that probes read evidence from."""
from __future__ import annotations

import asyncio
import os
import socket
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from infra_sense.config import DetectionSettings


class SignalReader(ABC):
    """Abstract access to environment, filesystem and DNS evidence."""

    def __init__(self, settings: DetectionSettings | None = None) -> None:
        self.settings = settings or DetectionSettings()

    @abstractmethod
    def read_env(self, name: str) -> str | None:
        """Read an environment variable.

        Args:
            name: Variable name

        Returns:
            The value, or None if unset
        """
        pass

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        """Check whether a path exists.

        Args:
            path: Filesystem path

        Returns:
            True if it exists, False if missing or unreadable
        """
        pass

    @abstractmethod
    def read_text(self, path: str) -> str:
        """Read a small text file.

        Args:
            path: Filesystem path

        Returns:
            File contents

        Raises:
            OSError: If the file cannot be read
        """
        pass

    @abstractmethod
    async def resolve_dns(self, hostname: str) -> list[str]:
        """Resolve IPv4 addresses for a hostname.

        Args:
            hostname: Name to resolve

        Returns:
            List of addresses

        Raises:
            OSError: If resolution fails
            TimeoutError: If resolution exceeds the configured timeout
        """
        pass


class HostSignalReader(SignalReader):
    """Reads signals from the current process environment."""

    def __init__(
        self,
        settings: DetectionSettings | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings)
        self._environ = os.environ if environ is None else environ

    def read_env(self, name: str) -> str | None:
        return self._environ.get(name)

    def path_exists(self, path: str) -> bool:
        # os.path.exists already reports False on permission errors
        return os.path.exists(path)

    def read_text(self, path: str) -> str:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()

    async def resolve_dns(self, hostname: str) -> list[str]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[list[Any]] = loop.create_future()

        def settle(result: list[Any] | None, error: BaseException | None) -> None:
            # Already cancelled when wait_for gave up
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result or [])

        def lookup() -> None:
            try:
                result = socket.getaddrinfo(hostname, None, family=socket.AF_INET)
            except Exception as e:
                outcome: tuple[list[Any] | None, BaseException | None] = (None, e)
            else:
                outcome = (result, None)
            try:
                loop.call_soon_threadsafe(settle, *outcome)
            except RuntimeError:
                # Loop already closed after a timeout; nobody is waiting
                return

        # Not the default executor: asyncio.run() joins that on shutdown
        # and a hung resolver would outlive dns_timeout_seconds
        threading.Thread(target=lookup, name=f"dns-{hostname}", daemon=True).start()
        infos = await asyncio.wait_for(
            future, timeout=self.settings.dns_timeout_seconds
        )

        # getaddrinfo repeats each address once per socket type
        addresses: list[str] = []
        for _family, _type, _proto, _canonname, sockaddr in infos:
            if sockaddr[0] not in addresses:
                addresses.append(sockaddr[0])
        return addresses
