"""Capability factory.

Selected by the DRY_RUN setting:
- true (default): in-memory chain seeded with a demo account
- false: JSON-RPC node for reads, wallet endpoint for accounts and signing
"""

import logging
from dataclasses import dataclass

from walletdesk.config import Settings, get_settings
from walletdesk.providers.base import ChainQuery, Signer, WalletProvider
from walletdesk.providers.dryrun import DryRunChain, DryRunSigner, DryRunWalletProvider
from walletdesk.providers.rpc import (
    JsonRpcClient,
    RpcChainQuery,
    RpcSigner,
    RpcWalletProvider,
)
from walletdesk.units import to_base_units

logger = logging.getLogger(__name__)

DEMO_ACCOUNT = "0x1111111111111111111111111111111111111111"


@dataclass
class Capabilities:
    """The three external collaborators, built together."""

    wallet: WalletProvider
    chain: ChainQuery
    signer: Signer


# Singleton instance
_capabilities: Capabilities | None = None


def build_dry_run(settings: Settings) -> Capabilities:
    """In-memory capabilities seeded with a demo account holding every token."""
    chain = DryRunChain()
    chain.set_native_balance(DEMO_ACCOUNT, to_base_units("2", settings.native_decimals))
    for token in settings.known_tokens:
        chain.add_token(
            token.address,
            symbol=token.name,
            decimals=18,
            balances={DEMO_ACCOUNT: to_base_units("100", 18)},
        )

    return Capabilities(
        wallet=DryRunWalletProvider([DEMO_ACCOUNT]),
        chain=chain,
        signer=DryRunSigner(chain),
    )


def build_rpc(settings: Settings) -> Capabilities:
    node = JsonRpcClient(settings.rpc_url, timeout=settings.rpc_timeout)
    wallet = JsonRpcClient(settings.wallet_rpc_url, timeout=settings.rpc_timeout)

    return Capabilities(
        wallet=RpcWalletProvider(wallet, poll_interval=settings.account_poll_interval),
        chain=RpcChainQuery(node),
        signer=RpcSigner(wallet),
    )


def get_capabilities() -> Capabilities:
    """Get the configured capabilities."""
    global _capabilities

    if _capabilities is not None:
        return _capabilities

    settings = get_settings()
    if settings.dry_run:
        logger.warning("DRY_RUN enabled - using simulated chain and wallet")
        _capabilities = build_dry_run(settings)
    else:
        logger.info(f"Using RPC {settings.rpc_url} and wallet at {settings.wallet_rpc_url}")
        _capabilities = build_rpc(settings)

    return _capabilities


def reset_capabilities() -> None:
    """Reset capabilities instance (useful for testing)."""
    global _capabilities
    _capabilities = None
