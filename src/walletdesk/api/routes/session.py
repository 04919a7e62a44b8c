"""Wallet session endpoints.

The browser client drives the session through these routes: connect,
forward the wallet's accountsChanged events, pick an asset, transfer.
Every response carries the session snapshot the client renders.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from walletdesk.config import get_settings
from walletdesk.contracts.session import AccountsChangedBody, SelectAssetBody, Session
from walletdesk.contracts.transfers import TransferBody, TransferResponse
from walletdesk.errors import (
    AssetQueryFailed,
    ConnectionFailed,
    InvalidAmount,
    NativeQueryFailed,
    PreconditionFailed,
    TransferFailed,
    WalletDeskError,
)
from walletdesk.services.session_controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session")


def _controller(request: Request) -> SessionController:
    return request.app.state.controller


def _http_error(error: WalletDeskError) -> HTTPException:
    """Map a domain error to an HTTP error."""
    if isinstance(error, (PreconditionFailed, InvalidAmount)):
        status_code = 400
    elif isinstance(error, TransferFailed) and isinstance(error.cause, InvalidAmount):
        # the typed amount was rejected before reaching the wallet
        status_code = 400
    elif isinstance(error, ConnectionFailed):
        status_code = 409
    elif isinstance(error, (TransferFailed, AssetQueryFailed, NativeQueryFailed)):
        status_code = 502
    else:
        status_code = 500
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": str(error)},
    )


@router.get("", response_model=Session)
async def get_session(request: Request) -> Session:
    """Current session snapshot."""
    return _controller(request).snapshot()


@router.post("/connect", response_model=Session)
async def connect(request: Request) -> Session:
    """Connect the wallet and resolve balances for its first account."""
    try:
        return await _controller(request).connect()
    except ConnectionFailed as e:
        raise _http_error(e)


@router.post("/disconnect", response_model=Session)
async def disconnect(request: Request) -> Session:
    return await _controller(request).disconnect()


@router.post("/accounts", response_model=Session)
async def accounts_changed(body: AccountsChangedBody, request: Request) -> Session:
    """Forward the browser wallet's accountsChanged event.

    An empty list disconnects the session.
    """
    return await _controller(request).handle_accounts_changed(body.accounts)


@router.post("/select", response_model=Session)
async def select_asset(body: SelectAssetBody, request: Request) -> Session:
    """Select an asset and refresh its balance."""
    try:
        return await _controller(request).select_asset(body.identifier)
    except (PreconditionFailed, AssetQueryFailed, NativeQueryFailed) as e:
        raise _http_error(e)


@router.post("/refresh", response_model=Session)
async def refresh(request: Request) -> Session:
    """Re-query every balance for the connected account."""
    try:
        return await _controller(request).refresh()
    except PreconditionFailed as e:
        raise _http_error(e)


@router.post("/transfer", response_model=TransferResponse)
async def transfer(body: TransferBody, request: Request) -> TransferResponse:
    """Submit a transfer of the selected asset through the wallet."""
    try:
        tx_hash = await _controller(request).transfer(body.recipient, body.amount)
    except (PreconditionFailed, TransferFailed) as e:
        raise _http_error(e)

    return TransferResponse(
        transaction_id=tx_hash,
        explorer_url=get_settings().tx_url(tx_hash),
        session=_controller(request).snapshot(),
    )
