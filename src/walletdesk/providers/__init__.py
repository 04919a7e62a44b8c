"""Capability adapters: wallet, chain query and signer."""

from walletdesk.providers.base import ChainQuery, Signer, WalletProvider
from walletdesk.providers.factory import Capabilities, get_capabilities

__all__ = ["ChainQuery", "Signer", "WalletProvider", "Capabilities", "get_capabilities"]
