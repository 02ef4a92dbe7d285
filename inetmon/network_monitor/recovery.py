"""Network recovery with cooldown and exponential backoff.

The recovery manager restarts the network-management service while the
host is offline. Restarts are throttled: after every attempt a cooldown
must elapse before the next one, and after repeated consecutive failures
the cooldown doubles up to a hard cap. A verified successful restart
resets both the failure count and the cooldown.

The attempt slot is claimed (``last_attempt`` set) before any restart
work starts, so an attempt that stalls or is interrupted still counts
toward the cooldown.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .clock import Clock
from .services import NetworkManagerKind, ServiceController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoveryPolicy:
    """Timing policy for network-service restarts (all values in seconds)."""

    base_cooldown: int = 300
    max_cooldown: int = 3600
    # Consecutive failures before the cooldown starts doubling
    failure_threshold: int = 3

    # Restart sequence delays
    stop_settle: float = 5.0
    start_settle: float = 10.0
    interface_grace: float = 2.0


@dataclass
class RecoveryAttemptRecord:
    """Bookkeeping for restart attempts, kept in memory only."""

    last_attempt: int = 0  # epoch seconds, 0 = never
    cooldown: int = 300
    consecutive_failures: int = 0

    def remaining_cooldown(self, now: int) -> int:
        """Seconds left before another attempt is allowed (0 if none)."""
        if self.last_attempt == 0:
            return 0
        return max(self.cooldown - (now - self.last_attempt), 0)


class RecoveryManager:
    """Restarts the network-management service, throttled by cooldown and backoff."""

    def __init__(
        self,
        controller: ServiceController,
        clock: Optional[Clock] = None,
        policy: Optional[RecoveryPolicy] = None,
        service_name: str = NetworkManagerKind.NETWORK_MANAGER.value,
    ):
        self.controller = controller
        self.clock = clock or Clock()
        self.policy = policy or RecoveryPolicy()
        self.service_name = service_name
        self.record = RecoveryAttemptRecord(cooldown=self.policy.base_cooldown)
        self._cooldown_reported_for: Optional[int] = None

    async def try_reconnect(self) -> bool:
        """Attempt one network-service restart if the cooldown allows it.

        Returns:
            True only if the restart was performed and verified.
        """
        now = self.clock.now()
        record = self.record
        elapsed = now - record.last_attempt
        remaining = record.remaining_cooldown(now)

        if remaining > 0:
            message = f"In cooldown period. Next restart attempt in {remaining} seconds"
            # Only the first cooldown message per attempt is a warning.
            if self._cooldown_reported_for == record.last_attempt:
                logger.debug(message)
            else:
                logger.warning(message)
                self._cooldown_reported_for = record.last_attempt
            return False

        if record.last_attempt == 0:
            logger.warning("Attempting to reconnect network... (first attempt)")
        else:
            logger.warning(f"Attempting to reconnect network... (Attempt after {elapsed} seconds)")
        record.last_attempt = now

        try:
            manager = await self.controller.detect_active_manager(self.service_name)
        except Exception as e:
            logger.error(f"Could not detect network manager: {e}")
            manager = NetworkManagerKind.UNKNOWN
        logger.info(f"Detected network manager: {manager.value}")

        if manager != NetworkManagerKind.NETWORK_MANAGER:
            logger.info(f"Automatic recovery is not supported with {manager.value}, skipping restart")
            return False

        try:
            restarted = await self._restart_service()
        except Exception as e:
            logger.error(f"Error while restarting {self.service_name}: {e}")
            restarted = False

        if restarted:
            logger.info("Network reconnection successful")
            record.consecutive_failures = 0
            record.cooldown = self.policy.base_cooldown
            return True

        logger.error("Network reconnection failed")
        self._record_failure()
        return False

    def _record_failure(self) -> None:
        record = self.record
        record.consecutive_failures += 1
        if record.consecutive_failures >= self.policy.failure_threshold:
            record.cooldown = min(record.cooldown * 2, self.policy.max_cooldown)
            logger.warning(
                f"Increased cooldown to {record.cooldown} seconds after "
                f"{record.consecutive_failures} consecutive failures"
            )

    async def _restart_service(self) -> bool:
        """Stop, start and verify the network-management service."""
        name = self.service_name
        logger.info(f"Attempting {name} restart via systemctl...")

        if not await self.controller.stop(name):
            logger.error(f"Failed to stop {name}")
            return False
        logger.info(f"{name} stopped successfully")
        await self.clock.sleep(self.policy.stop_settle)

        if not await self.controller.start(name):
            logger.error(f"Failed to start {name}")
            return False
        logger.info(f"{name} start command issued")
        await self.clock.sleep(self.policy.start_settle)

        return await self._verify_service()

    async def _verify_service(self) -> bool:
        name = self.service_name
        if not await self.controller.is_active(name):
            logger.error(f"{name} is not active after restart")
            return False
        if await self.controller.is_failed(name):
            logger.error(f"{name} reports a failed state after restart")
            return False

        await self.clock.sleep(self.policy.interface_grace)
        if await self.controller.interfaces_up():
            logger.info("Network interfaces are up")
            return True

        logger.warning("No network interfaces are up yet")
        return False
