"""Combines probe results into a single online/offline verdict."""

import logging
from typing import Sequence

from .probes import DEFAULT_DNS_HOSTNAME, DEFAULT_PING_TIMEOUT, ConnectivityProber

logger = logging.getLogger(__name__)


class ConnectivityEvaluator:
    """Online means a ping target answered AND DNS resolves."""

    def __init__(
        self,
        prober: ConnectivityProber,
        ping_hosts: Sequence[str],
        ping_timeout: int = DEFAULT_PING_TIMEOUT,
        dns_hostname: str = DEFAULT_DNS_HOSTNAME,
    ):
        self.prober = prober
        self.ping_hosts = tuple(ping_hosts)
        self.ping_timeout = ping_timeout
        self.dns_hostname = dns_hostname

    async def has_internet(self) -> bool:
        if not await self.prober.ping_reachable(self.ping_hosts, self.ping_timeout):
            logger.debug("No ping target reachable, skipping DNS check")
            return False
        return await self.prober.dns_resolvable(self.dns_hostname)
