import asyncio
import logging

from smoothlock import LockStateEngine
from smoothlock.const import COMMAND_FAILED, POLL_FAILED
from smoothlock.entity import UPDATE
from smoothlock.settings import Settings

_LOGGER = logging.getLogger(__name__)


async def main():
    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    config = settings.to_engine_config()
    _LOGGER.debug("Demo started for %s", config.device_root)

    def state_callback(event: dict) -> None:
        _LOGGER.info(
            "Lock is %s, target %s", event["current"].name, event["target"].name
        )

    engine = LockStateEngine(config)
    engine.on(UPDATE, state_callback)
    engine.on(POLL_FAILED, lambda event: _LOGGER.warning("Poll failed: %s", event["error"]))
    engine.on(COMMAND_FAILED, lambda event: _LOGGER.warning("Command failed: %s", event["target"].name))

    async with engine:
        _LOGGER.info("Accessory: %s", engine.accessory_info)
        # Keep alive; the poller and listener run in the background
        while True:
            await asyncio.sleep(3600)


if __name__ == "__main__":
    asyncio.run(main())
