"""Control of the host's network-management service."""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from .commands import CommandRunner

logger = logging.getLogger(__name__)


class NetworkManagerKind(Enum):
    """Network-management mechanisms, in detection precedence order."""
    NETWORK_MANAGER = "NetworkManager"
    SYSTEMD_NETWORKD = "systemd-networkd"
    NETPLAN = "netplan"
    UNKNOWN = "unknown"


class ServiceController(ABC):
    """Base class for controlling the network-management service."""

    @abstractmethod
    async def is_active(self, name: str) -> bool:
        pass

    @abstractmethod
    async def is_failed(self, name: str) -> bool:
        pass

    @abstractmethod
    async def stop(self, name: str) -> bool:
        pass

    @abstractmethod
    async def start(self, name: str) -> bool:
        pass

    @abstractmethod
    async def detect_active_manager(
        self, primary_service: str = NetworkManagerKind.NETWORK_MANAGER.value
    ) -> NetworkManagerKind:
        """Which network-management mechanism is in charge of the host.

        ``primary_service`` is the systemd unit that provides NetworkManager
        on this host; it is checked first.
        """
        pass

    @abstractmethod
    async def interfaces_up(self) -> bool:
        """True if at least one network interface reports state UP."""
        pass


class SystemdServiceController(ServiceController):
    """ServiceController backed by systemctl and iproute2."""

    QUERY_TIMEOUT = 10.0
    CONTROL_TIMEOUT = 30.0

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner()

    async def _systemctl(self, *args: str, timeout: float = QUERY_TIMEOUT) -> bool:
        try:
            return await self.runner.run(["systemctl", *args], timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"systemctl {' '.join(args)} timed out")
            return False
        except OSError as e:
            logger.error(f"systemctl {' '.join(args)} failed: {e}")
            return False

    async def is_active(self, name: str) -> bool:
        return await self._systemctl("is-active", "--quiet", name)

    async def is_failed(self, name: str) -> bool:
        return await self._systemctl("is-failed", "--quiet", name)

    async def stop(self, name: str) -> bool:
        return await self._systemctl("stop", name, timeout=self.CONTROL_TIMEOUT)

    async def start(self, name: str) -> bool:
        return await self._systemctl("start", name, timeout=self.CONTROL_TIMEOUT)

    async def detect_active_manager(
        self, primary_service: str = NetworkManagerKind.NETWORK_MANAGER.value
    ) -> NetworkManagerKind:
        if await self.is_active(primary_service):
            return NetworkManagerKind.NETWORK_MANAGER
        if await self.is_active(NetworkManagerKind.SYSTEMD_NETWORKD.value):
            return NetworkManagerKind.SYSTEMD_NETWORKD
        if shutil.which("netplan"):
            return NetworkManagerKind.NETPLAN
        return NetworkManagerKind.UNKNOWN

    async def interfaces_up(self) -> bool:
        try:
            output = await self.runner.output(["ip", "link", "show"], timeout=self.QUERY_TIMEOUT)
        except (OSError, asyncio.TimeoutError) as e:
            logger.error(f"Could not list network interfaces: {e}")
            return False
        return "state UP" in output
