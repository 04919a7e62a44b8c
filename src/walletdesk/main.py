"""Main entry point - runs the wallet desk API."""

import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from walletdesk.api.app import create_app
from walletdesk.config import Settings, get_settings

logger = logging.getLogger(__name__)


def resolve_log_level(debug: bool, level: str = "INFO") -> int:
    """DEBUG when debugging, otherwise the configured level name."""
    if debug:
        return logging.DEBUG
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(debug: bool, level: str = "INFO") -> int:
    """Configure root logging once for the process.

    Returns:
        The level applied, so the server can log at the same level
    """
    log_level = resolve_log_level(debug, level)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return log_level


class Application:
    """Serves the API until the process is asked to stop."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def server_config(self, app: FastAPI, log_level: Optional[int] = None) -> uvicorn.Config:
        """uvicorn settings, logging at the same level as the application."""
        if log_level is None:
            log_level = resolve_log_level(self.settings.debug, self.settings.log_level)
        return uvicorn.Config(
            app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level=logging.getLevelName(log_level).lower(),
        )

    async def start(self):
        """Start the API server and wait for it to stop."""
        log_level = configure_logging(self.settings.debug, self.settings.log_level)

        logger.info("Starting Wallet Desk...")
        logger.info(f"Environment: {self.settings.environment}")
        logger.info(
            "Chain: %s (%d), dry run: %s",
            self.settings.chain_name,
            self.settings.chain_id,
            self.settings.dry_run,
        )

        # uvicorn handles SIGINT/SIGTERM: it stops accepting requests and runs
        # the lifespan shutdown that stops the account watcher
        server = uvicorn.Server(self.server_config(create_app(), log_level))

        logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")
        try:
            await server.serve()
        except Exception as e:
            logger.error(f"API error: {e}")
            raise
        logger.info("Shutdown complete")


def main():
    """Main entry point."""
    try:
        asyncio.run(Application().start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
