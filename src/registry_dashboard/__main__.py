"""Run the dashboard server: ``python -m registry_dashboard``."""

import logging

from aiohttp import web

from .config import DashboardConfig
from .exceptions import ConfigError
from .server import create_app

logger = logging.getLogger("registry_dashboard")


def main() -> None:
    try:
        config = DashboardConfig.from_env()
    except ConfigError as e:
        raise SystemExit(f"Invalid configuration: {e}") from e

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Registry dashboard on %s:%s (registry %s, proxy %s)",
        config.host,
        config.port,
        config.registry_host,
        config.registry_url,
    )
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
