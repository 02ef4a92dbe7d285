"""Fakes shared by the internet monitor tests."""

import asyncio
from typing import Callable, Dict, List, Optional

import pytest

from inetmon.network_monitor.clock import Clock
from inetmon.network_monitor.notifier import NotificationEvent, Notifier
from inetmon.network_monitor.services import NetworkManagerKind, ServiceController


class FakeClock(Clock):
    """Clock whose sleeps return immediately and advance simulated time."""

    def __init__(self, start: int = 1_700_000_000):
        self.current = start
        self.sleeps: List[float] = []
        self.on_sleep: Optional[Callable[[float], None]] = None

    def now(self) -> int:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += int(seconds)
        if self.on_sleep:
            self.on_sleep(seconds)
        await asyncio.sleep(0)


class FakeRunner:
    """CommandRunner stand-in that answers from a scripted table.

    ``results`` maps a command (joined with spaces) to a bool, a string
    (stdout) or an exception instance to raise. Unknown commands fail.
    """

    def __init__(self, results: Optional[Dict[str, object]] = None):
        self.results = dict(results or {})
        self.calls: List[List[str]] = []

    def _lookup(self, argv):
        self.calls.append(list(argv))
        result = self.results.get(" ".join(argv), False)
        if isinstance(result, BaseException):
            raise result
        return result

    async def run(self, argv, timeout: float = 30.0) -> bool:
        return bool(self._lookup(argv))

    async def output(self, argv, timeout: float = 30.0) -> str:
        result = self._lookup(argv)
        return result if isinstance(result, str) else ""

    @property
    def commands(self) -> List[str]:
        return [" ".join(call) for call in self.calls]


class FakeController(ServiceController):
    """ServiceController whose answers are plain attributes."""

    def __init__(
        self,
        manager: NetworkManagerKind = NetworkManagerKind.NETWORK_MANAGER,
        stop_ok: bool = True,
        start_ok: bool = True,
        active: bool = True,
        failed: bool = False,
        interfaces: bool = True,
    ):
        self.manager = manager
        self.stop_ok = stop_ok
        self.start_ok = start_ok
        self.active = active
        self.failed = failed
        self.interfaces = interfaces
        self.calls: List[str] = []
        self.detected_with: Optional[str] = None

    async def is_active(self, name: str) -> bool:
        self.calls.append(f"is_active {name}")
        return self.active

    async def is_failed(self, name: str) -> bool:
        self.calls.append(f"is_failed {name}")
        return self.failed

    async def stop(self, name: str) -> bool:
        self.calls.append(f"stop {name}")
        return self.stop_ok

    async def start(self, name: str) -> bool:
        self.calls.append(f"start {name}")
        return self.start_ok

    async def detect_active_manager(self, primary_service: str = "NetworkManager") -> NetworkManagerKind:
        self.calls.append("detect")
        self.detected_with = primary_service
        return self.manager

    async def interfaces_up(self) -> bool:
        self.calls.append("interfaces_up")
        return self.interfaces

    @property
    def restarts(self) -> int:
        return self.calls.count("stop NetworkManager")

    def make_healthy(self) -> None:
        self.stop_ok = self.start_ok = self.active = self.interfaces = True
        self.failed = False


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events: List[NotificationEvent] = []
        self.closed = False

    async def announce(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller():
    return FakeController()
