"""Balance aggregation for a connected account.

Resolves the native balance and every registry token for one account.
Each asset succeeds or fails on its own: a token whose balance, decimals
or symbol cannot be read is left out, and the rest are still returned.

The result order is fixed: native first, then tokens in registry order.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

from walletdesk.abi import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    SYMBOL_SELECTOR,
    decode_string,
    decode_uint256,
)
from walletdesk.contracts.assets import Asset, AssetFailure
from walletdesk.errors import AssetQueryFailed, NativeQueryFailed
from walletdesk.providers.base import ChainQuery
from walletdesk.registry import NATIVE, AssetRegistry, RegistryEntry
from walletdesk.units import MAX_DECIMALS, NATIVE_DECIMALS, to_display_units

logger = logging.getLogger(__name__)

QueryError = Union[AssetQueryFailed, NativeQueryFailed]


@dataclass
class AssetOutcome:
    """Result of resolving one asset: either an Asset or the error."""

    identifier: str
    name: Optional[str] = None
    asset: Optional[Asset] = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.asset is not None


def successful(outcomes: list[AssetOutcome]) -> list[Asset]:
    """Resolved assets, in outcome order."""
    return [o.asset for o in outcomes if o.ok]


def failures(outcomes: list[AssetOutcome]) -> list[AssetFailure]:
    """Assets that were left out, in outcome order."""
    return [
        AssetFailure(identifier=o.identifier, name=o.name, error=str(o.error))
        for o in outcomes
        if not o.ok
    ]


def decode_decimals(data: str) -> int:
    """Decode a decimals() result, which must fit in a uint8."""
    decimals = decode_uint256(data)
    if decimals > MAX_DECIMALS:
        raise ValueError(f"decimals() out of range: {decimals}")
    return decimals


def _short(address: str) -> str:
    return address[:10] + "..." if len(address) > 10 else address


class BalanceAggregator:
    """Resolves balances for the native asset and every registry token."""

    def __init__(
        self,
        chain: ChainQuery,
        registry: AssetRegistry,
        native_symbol: str = "ETH",
        native_decimals: int = NATIVE_DECIMALS,
    ):
        self.chain = chain
        self.registry = registry
        self.native_symbol = native_symbol
        self.native_decimals = native_decimals

    async def resolve(self, account: str) -> list[Asset]:
        """Get every asset that resolved for ``account``.

        Never raises for query failures; failed assets are omitted.
        """
        return successful(await self.resolve_outcomes(account))

    async def resolve_outcomes(self, account: str) -> list[AssetOutcome]:
        """Resolve all assets concurrently, one outcome per asset.

        Returns:
            Native outcome followed by one outcome per registry entry,
            in registry order
        """
        logger.info("Resolving balances for %s (%d tokens)", _short(account), len(self.registry))

        outcomes = await asyncio.gather(
            self._resolve_native(account),
            *(self._resolve_token(account, entry) for entry in self.registry),
        )

        failed = [o for o in outcomes if not o.ok]
        if failed:
            logger.warning(
                "Resolved %d/%d assets for %s; omitted: %s",
                len(outcomes) - len(failed),
                len(outcomes),
                _short(account),
                ", ".join(o.name or o.identifier for o in failed),
            )
        return list(outcomes)

    async def resolve_one(self, account: str, asset: Asset) -> Asset:
        """Refresh a single asset's balance.

        Re-reads the balance (and decimals, for tokens); keeps the symbol.

        Raises:
            NativeQueryFailed: Native balance read failed
            AssetQueryFailed: Token balance or decimals read failed
        """
        if asset.is_native:
            raw = await self._native_balance(account)
            return self._native_asset(raw)

        try:
            balance_data, decimals_data = await asyncio.gather(
                self.chain.call(asset.identifier, BALANCE_OF_SELECTOR, [account]),
                self.chain.call(asset.identifier, DECIMALS_SELECTOR),
            )
            raw = decode_uint256(balance_data)
            decimals = decode_decimals(decimals_data)
        except Exception as e:
            logger.warning(f"Failed to refresh {asset.symbol} balance: {e}")
            raise AssetQueryFailed(asset.identifier, e) from e

        return asset.model_copy(
            update={
                "decimals": decimals,
                "balance": to_display_units(raw, decimals),
                "balance_raw": raw,
            }
        )

    async def _native_balance(self, account: str) -> int:
        try:
            return int(await self.chain.get_native_balance(account))
        except Exception as e:
            logger.warning(f"Failed to load {self.native_symbol} balance: {e}")
            raise NativeQueryFailed(e) from e

    def _native_asset(self, raw: int) -> Asset:
        return Asset(
            symbol=self.native_symbol,
            identifier=NATIVE,
            name=self.native_symbol,
            decimals=self.native_decimals,
            balance=to_display_units(raw, self.native_decimals),
            balance_raw=raw,
        )

    async def _resolve_native(self, account: str) -> AssetOutcome:
        try:
            raw = await self._native_balance(account)
        except NativeQueryFailed as e:
            return AssetOutcome(identifier=NATIVE, name=self.native_symbol, error=e)
        return AssetOutcome(identifier=NATIVE, name=self.native_symbol, asset=self._native_asset(raw))

    async def _resolve_token(self, account: str, entry: RegistryEntry) -> AssetOutcome:
        results = await asyncio.gather(
            self.chain.call(entry.address, BALANCE_OF_SELECTOR, [account]),
            self.chain.call(entry.address, DECIMALS_SELECTOR),
            self.chain.call(entry.address, SYMBOL_SELECTOR),
            return_exceptions=True,
        )

        try:
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            balance_data, decimals_data, symbol_data = results
            raw = decode_uint256(balance_data)
            decimals = decode_decimals(decimals_data)
            symbol = decode_string(symbol_data)
        except Exception as e:
            logger.warning(f"Failed to load token {entry.name}: {e}")
            return AssetOutcome(
                identifier=entry.address,
                name=entry.name,
                error=AssetQueryFailed(entry.address, e),
            )

        return AssetOutcome(
            identifier=entry.address,
            name=entry.name,
            asset=Asset(
                symbol=symbol or entry.name,
                identifier=entry.address,
                name=entry.name,
                decimals=decimals,
                balance=to_display_units(raw, decimals),
                balance_raw=raw,
            ),
        )
