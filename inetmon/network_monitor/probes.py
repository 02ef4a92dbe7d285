"""Connectivity probes: ping reachability and DNS resolution."""

import asyncio
import logging
import socket
from typing import Awaitable, Callable, Optional, Sequence

from .commands import CommandRunner

logger = logging.getLogger(__name__)

DEFAULT_PING_TIMEOUT = 3
DEFAULT_DNS_HOSTNAME = "google.com"
DNS_TIMEOUT = 5.0

Resolver = Callable[[str], Awaitable[object]]


async def _getaddrinfo(hostname: str):
    loop = asyncio.get_running_loop()
    return await loop.getaddrinfo(hostname, None)


class ConnectivityProber:
    """Runs the individual connectivity probes.

    Every probe answers with a plain boolean. Failures of the probe
    itself (missing tool, resolver error) are logged and reported as a
    negative result, never raised.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        resolver: Optional[Resolver] = None,
        dns_timeout: float = DNS_TIMEOUT,
    ):
        self.runner = runner or CommandRunner()
        self.resolver = resolver or _getaddrinfo
        self.dns_timeout = dns_timeout

    async def _ping(self, host: str, timeout: int) -> bool:
        return await self.runner.run(
            ["ping", "-c", "1", "-W", str(int(timeout)), host],
            timeout=timeout + 1,
        )

    async def ping_reachable(self, hosts: Sequence[str], timeout: int = DEFAULT_PING_TIMEOUT) -> bool:
        """Return True as soon as any host answers a single ping.

        Hosts are tried in order; the first reply ends the probe.
        """
        for host in hosts:
            if not host:
                continue
            try:
                if await self._ping(host, timeout):
                    logger.debug(f"Ping to {host} succeeded")
                    return True
            except asyncio.TimeoutError:
                logger.debug(f"Ping to {host} timed out")
            except Exception as e:
                logger.error(f"Ping test error for {host}: {e}")
            logger.debug(f"No ping reply from {host}")
        return False

    async def dns_resolvable(self, hostname: str = DEFAULT_DNS_HOSTNAME) -> bool:
        """Return True if the hostname resolves to at least one address."""
        try:
            addresses = await asyncio.wait_for(self.resolver(hostname), self.dns_timeout)
        except (socket.gaierror, asyncio.TimeoutError) as e:
            logger.warning(f"DNS resolution failed for {hostname}: {str(e) or 'timeout'}")
            return False
        except Exception as e:
            logger.error(f"DNS test error: {e}")
            return False

        if not addresses:
            logger.warning(f"DNS resolution failed for {hostname}: no addresses")
            return False
        return True
