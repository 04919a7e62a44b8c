"""FastAPI application factory."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from walletdesk import __version__
from walletdesk.config import Settings, get_settings
from walletdesk.events import AccountChannel
from walletdesk.providers.factory import Capabilities, get_capabilities
from walletdesk.registry import AssetRegistry
from walletdesk.services.balance_aggregator import BalanceAggregator
from walletdesk.services.session_controller import SessionController
from walletdesk.services.transfer_submitter import TransferSubmitter

logger = logging.getLogger(__name__)


def build_controller(
    settings: Settings,
    capabilities: Capabilities,
    registry: Optional[AssetRegistry] = None,
) -> SessionController:
    """Wire the core services around a set of capabilities."""
    registry = registry or AssetRegistry.from_settings(settings)
    aggregator = BalanceAggregator(
        capabilities.chain,
        registry,
        native_symbol=settings.native_symbol,
        native_decimals=settings.native_decimals,
    )
    submitter = TransferSubmitter(
        capabilities.chain,
        capabilities.signer,
        native_decimals=settings.native_decimals,
    )
    return SessionController(capabilities.wallet, aggregator, submitter)


def _report_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Background task {task.get_name()} stopped: {error!r}")
    else:
        logger.warning(f"Background task {task.get_name()} exited")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the account watcher and the controller's event loop."""
    controller: SessionController = app.state.controller
    channel = AccountChannel()
    tasks = [
        asyncio.create_task(controller.wallet.watch_accounts(channel), name="account-watcher"),
        asyncio.create_task(controller.run(channel), name="account-events"),
    ]
    for task in tasks:
        task.add_done_callback(_report_exit)
    logger.info("Account watcher started (%s)", controller.wallet.name)

    yield

    channel.close()
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    logger.info("Account watcher stopped")


def create_app(controller: Optional[SessionController] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Wallet Desk API",
        description="Balances and transfers for a connected browser wallet",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if controller is None:
        controller = build_controller(settings, get_capabilities())
    app.state.controller = controller

    # Register routes
    from walletdesk.api.routes import assets, health, session

    app.include_router(health.router, tags=["Health"])
    app.include_router(session.router, prefix="/api/v1", tags=["Session"])
    app.include_router(assets.router, prefix="/api/v1", tags=["Assets"])

    return app
