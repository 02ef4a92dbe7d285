"""Async execution of external commands (ping, systemctl, ip, asterisk)."""

import asyncio
import logging
from typing import Sequence

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs external commands without a shell.

    Spawn failures (missing binary, permissions) surface as ``OSError``.
    A command that outlives its timeout is killed and
    ``asyncio.TimeoutError`` is raised.
    """

    async def _communicate(self, argv: Sequence[str], timeout: float):
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.debug(f"Command timed out after {timeout}s: {' '.join(argv)}")
            raise
        return process.returncode, stdout.decode(errors="replace")

    async def run(self, argv: Sequence[str], timeout: float = 30.0) -> bool:
        """Run a command and return True if it exited with status 0."""
        returncode, _ = await self._communicate(argv, timeout)
        return returncode == 0

    async def output(self, argv: Sequence[str], timeout: float = 30.0) -> str:
        """Run a command and return its standard output."""
        _, stdout = await self._communicate(argv, timeout)
        return stdout
