"""Internet Monitor Service - Watches connectivity, announces changes and recovers."""

import asyncio
import logging
import shutil
import signal
from enum import Enum
from typing import List, Optional, Sequence

from .clock import Clock, ShutdownToken
from .config import NetworkMonitorConfig
from .evaluator import ConnectivityEvaluator
from .notifier import NotificationEvent, Notifier
from .recovery import RecoveryManager

logger = logging.getLogger(__name__)

REQUIRED_COMMANDS = ("ping", "systemctl", "ip")


class StartupError(RuntimeError):
    """Raised when the host lacks something the monitor cannot run without."""

    pass


class NetworkState(Enum):
    """Internet connectivity states."""
    ONLINE = "online"
    OFFLINE = "offline"


def check_required_commands(commands: Sequence[str] = REQUIRED_COMMANDS) -> None:
    """Raise StartupError if any required external command is missing."""
    missing = [cmd for cmd in commands if shutil.which(cmd) is None]
    if missing:
        raise StartupError(f"Missing required commands: {', '.join(missing)}")


class NetworkMonitorService:
    """Service that monitors internet connectivity and attempts recovery.

    One evaluation cycle runs every ``check_interval`` seconds. Audio and
    status notifications fire only when the verdict changes; while
    offline, every cycle hands over to the recovery manager, whose
    cooldown decides whether a restart actually happens.
    """

    def __init__(
        self,
        config: NetworkMonitorConfig,
        evaluator: ConnectivityEvaluator,
        recovery: RecoveryManager,
        notifiers: Optional[List[Notifier]] = None,
        clock: Optional[Clock] = None,
        shutdown: Optional[ShutdownToken] = None,
    ):
        self.config = config
        self.evaluator = evaluator
        self.recovery = recovery
        self.notifiers = list(notifiers or [])
        self.clock = clock or Clock()
        self.shutdown = shutdown or ShutdownToken()

        # Offline at boot: "lost" is never announced before a first good verdict
        self.state = NetworkState.OFFLINE

    async def _notify(self, event: NotificationEvent) -> None:
        for notifier in self.notifiers:
            try:
                await notifier.announce(event)
            except Exception as e:
                logger.error(f"Notification {event.name} via {type(notifier).__name__} failed: {e}")

    async def run_cycle(self) -> NetworkState:
        """Evaluate connectivity once, handle transitions and recovery."""
        online = await self.evaluator.has_internet()

        if online:
            if self.state == NetworkState.OFFLINE:
                await self._notify(NotificationEvent.RECONNECTED)
                logger.info("Internet reconnected. AllStarLink node should be back on the network!")
            self.state = NetworkState.ONLINE
        else:
            if self.state == NetworkState.ONLINE:
                await self._notify(NotificationEvent.LOST)
                logger.warning("Internet lost. AllStarLink node is offline!")
            self.state = NetworkState.OFFLINE
            await self.recovery.try_reconnect()

        return self.state

    async def _sleep(self, seconds: float) -> None:
        """Sleep between cycles, waking early on shutdown."""
        sleeper = asyncio.ensure_future(self.clock.sleep(seconds))
        stopper = asyncio.ensure_future(self.shutdown.wait())
        try:
            await asyncio.wait({sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, stopper):
                task.cancel()
            await asyncio.gather(sleeper, stopper, return_exceptions=True)

    async def run_loop(self) -> None:
        """Main monitoring loop."""
        logger.info(f"Internet monitor started for node {self.config.node_number}")
        logger.info(f"Check interval: {self.config.check_interval} seconds")
        logger.info(f"Ping hosts: {' '.join(self.config.ping_hosts)}")

        while not self.shutdown.is_cancelled():
            try:
                await self.run_cycle()
            except Exception as e:
                logger.error(f"Error in monitoring loop: {e}")

            if self.shutdown.is_cancelled():
                break
            await self._sleep(self.config.check_interval)

        logger.info("Internet monitor stopped gracefully")

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
            self.shutdown.cancel()

        for signum in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(signum, signal_handler, signum)

    async def _main(self) -> None:
        self._setup_signal_handlers()
        await self.run_loop()

    def run(self) -> None:
        """Start the monitoring service (blocking)."""
        try:
            asyncio.run(self._main())
        except KeyboardInterrupt:
            logger.info("Shutting down internet monitor...")
        finally:
            for notifier in self.notifiers:
                notifier.close()
