"""
Periodic device heartbeat.

A failed heartbeat is not treated as proof that the device lost its session:
on a 401 the heartbeat asks /device/info, and only that call decides whether
the credentials are cleared. This keeps a single clear-and-notify per
failing cycle even when both calls return 401.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from welcomesign_sdk.exceptions import WelcomeSignError

if TYPE_CHECKING:
    from welcomesign_sdk.client import WelcomeSignClient

logger = logging.getLogger("welcomesign_sdk.heartbeat")


class DeviceHeartbeat:
    """
    Cancellable repeating heartbeat task.

    The first beat is sent one interval after start(). A cycle never raises,
    so the loop runs until stop() is called.
    """

    def __init__(self, client: "WelcomeSignClient", interval: float):
        if interval <= 0:
            raise ValueError("Heartbeat interval must be positive")
        self._client = client
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Device heartbeat started (every %.1fs)", self.interval)

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Device heartbeat stopped")

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            await self.beat()

    async def beat(self):
        """Run one heartbeat cycle."""
        try:
            await self._client.device_heartbeat()
            return
        except WelcomeSignError as error:
            logger.error("Device heartbeat failed: %s", error)
            if error.status_code != 401:
                return
        except Exception:
            logger.exception("Device heartbeat failed")
            return

        try:
            await self._client.get_device_info()
            logger.info("Device session recovered via /device/info")
        except WelcomeSignError as info_error:
            # a 401 was already handled inside get_device_info
            if info_error.status_code != 401:
                logger.error("Device info check failed: %s", info_error)
        except Exception:
            logger.exception("Device info check failed")
