"""
Example of a signage device using WelcomeSign SDK.

The device restores its device token from disk, shows its content and keeps
a heartbeat running. When the pairing is revoked on the server, the SDK
clears the stored token and calls back so the device can go back to
showing a pairing code.
"""

import asyncio
import logging
import uuid

from welcomesign_sdk import WelcomeSignSettings
from welcomesign_sdk import create_client
from welcomesign_sdk.logging_middleware import LoggingMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_device():
    settings = WelcomeSignSettings(
        base_url="https://api.welcomesign.example",
        heartbeat_interval=60,
    )
    unpaired = asyncio.Event()

    client = create_client(
        settings,
        on_device_session_invalid=unpaired.set,
        middlewares=[LoggingMiddleware()],
    )

    async with client:
        if not client.get_tokens()["device_token"]:
            pairing = await client.generate_pairing_code(str(uuid.getnode()))
            logger.info("Enter pairing code %s in the host dashboard", pairing.get("code"))
            return

        info = await client.get_device_info()
        logger.info("Paired with property %s", info.get("property", {}).get("name"))

        content = await client.get_device_content()
        for content_type, items in content.get("content", {}).items():
            logger.info("%s: %d item(s)", content_type, len(items))

        client.start_device_heartbeat()
        await unpaired.wait()
        logger.info("Pairing revoked, restart to pair again")


if __name__ == "__main__":
    asyncio.run(run_device())
