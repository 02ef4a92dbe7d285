"""Time source and shutdown signalling for the monitor loop."""

import asyncio
import time
from typing import Optional


class Clock:
    """Wall-clock time and sleeping, replaceable in tests."""

    def now(self) -> int:
        """Current time in whole epoch seconds."""
        return int(time.time())

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ShutdownToken:
    """Cancellation flag shared between signal handlers and the monitor loop."""

    def __init__(self):
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None

    def _get_event(self) -> asyncio.Event:
        # Created lazily so the event binds to the running loop.
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    def cancel(self) -> None:
        """Request shutdown."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def is_cancelled(self) -> bool:
        return self._cancelled

    async def wait(self) -> None:
        """Block until shutdown is requested."""
        await self._get_event().wait()
