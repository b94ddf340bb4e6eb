"""Example: push an image into a local registry and print its progress."""

import asyncio
import logging
import sys

from registry_dashboard import (
    CommandRunner,
    PushOrchestrator,
    RegistryClient,
    SessionRegistry,
)
from registry_dashboard.core.types import EventType

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def print_events(channel):
    """Print session events until the push closes the stream."""
    while True:
        event = await channel.get()
        if event is None:
            return
        if event.type is EventType.LOG:
            print(event.message)
        elif event.type is EventType.STATUS:
            logger.info("Status: %s", event.value.value)
        else:
            return


async def main(image: str, registry_host: str = "localhost:5000"):
    """Push an image, streaming its log like the dashboard UI does."""
    async with RegistryClient(f"http://{registry_host}") as client:
        if not await client.check_registry_v2():
            logger.error("Registry at %s is not reachable", registry_host)
            return 1

    sessions = SessionRegistry()
    channel = sessions.register("example")
    orchestrator = PushOrchestrator(CommandRunner("docker"), sessions, registry_host)

    printer = asyncio.create_task(print_events(channel))
    result = await orchestrator.push(image, "example")
    # A failed push sends no close event
    channel.terminate()
    await printer

    if not result.ok:
        logger.error("%s: %s", result.error, result.detail)
        return 1
    logger.info("✓ Pushed %s", result.destination)
    return 0


if __name__ == "__main__":
    image = sys.argv[1] if len(sys.argv) > 1 else "busybox:latest"
    sys.exit(asyncio.run(main(image)))
