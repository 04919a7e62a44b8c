"""Dry-run capabilities: an in-memory chain, wallet and signer.

Used when DRY_RUN is enabled and in tests. Transfers move balances
inside the simulated chain so a refreshed balance reflects them.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from typing import Optional, Sequence

from walletdesk.abi import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    SYMBOL_SELECTOR,
    TRANSFER_SELECTOR,
    AbiArg,
    encode_string_result,
    encode_uint256_result,
)
from walletdesk.events import AccountChannel
from walletdesk.providers.base import ChainQuery, Signer, WalletProvider

logger = logging.getLogger(__name__)


class DryRunError(Exception):
    """Injected failure from the simulated chain or wallet."""


@dataclass
class SimulatedToken:
    """Token contract state."""

    symbol: str
    decimals: int
    balances: dict[str, int] = field(default_factory=dict)


class DryRunChain(ChainQuery):
    """In-memory chain state.

    Failures can be injected per (contract, selector) or for native
    balance reads, to exercise partial-failure paths.
    """

    def __init__(self):
        self.native_balances: dict[str, int] = {}
        self.tokens: dict[str, SimulatedToken] = {}
        self.failing_calls: set[tuple[str, str]] = set()
        self.fail_native = False
        self.calls: list[tuple[str, str]] = []

    def set_native_balance(self, address: str, amount: int) -> None:
        self.native_balances[address.lower()] = amount

    def add_token(
        self,
        address: str,
        symbol: str,
        decimals: int,
        balances: Optional[dict[str, int]] = None,
    ) -> SimulatedToken:
        token = SimulatedToken(
            symbol=symbol,
            decimals=decimals,
            balances={k.lower(): v for k, v in (balances or {}).items()},
        )
        self.tokens[address.lower()] = token
        return token

    def fail_call(self, contract_address: str, selector: str) -> None:
        self.failing_calls.add((contract_address.lower(), selector))

    def token_balance(self, contract_address: str, holder: str) -> int:
        token = self.tokens[contract_address.lower()]
        return token.balances.get(holder.lower(), 0)

    async def get_native_balance(self, address: str) -> int:
        await asyncio.sleep(0)
        self.calls.append(("native", address.lower()))
        if self.fail_native:
            raise DryRunError("native balance unavailable")
        return self.native_balances.get(address.lower(), 0)

    async def call(
        self,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        await asyncio.sleep(0)
        key = contract_address.lower()
        self.calls.append((key, selector))

        if (key, selector) in self.failing_calls:
            raise DryRunError(f"call {selector} on {contract_address} reverted")

        token = self.tokens.get(key)
        if token is None:
            # no code at address
            return "0x"

        if selector == BALANCE_OF_SELECTOR:
            return encode_uint256_result(token.balances.get(str(args[0]).lower(), 0))
        if selector == DECIMALS_SELECTOR:
            return encode_uint256_result(token.decimals)
        if selector == SYMBOL_SELECTOR:
            return encode_string_result(token.symbol)

        raise DryRunError(f"Unsupported selector {selector}")


class DryRunSigner(Signer):
    """Applies transfers to a DryRunChain and returns fake hashes."""

    def __init__(self, chain: DryRunChain):
        self.chain = chain
        self.reject_next = False
        self.sent: list[dict] = []

    def _approve(self) -> None:
        if self.reject_next:
            self.reject_next = False
            raise DryRunError("User rejected the request")

    async def send_native(self, sender: str, to: str, amount: int) -> str:
        await asyncio.sleep(0)
        self._approve()

        balances = self.chain.native_balances
        available = balances.get(sender.lower(), 0)
        if amount > available:
            raise DryRunError("insufficient funds for transfer")

        balances[sender.lower()] = available - amount
        balances[to.lower()] = balances.get(to.lower(), 0) + amount
        return self._record({"from": sender, "to": to, "value": amount})

    async def send_contract_call(
        self,
        sender: str,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        await asyncio.sleep(0)
        self._approve()

        token = self.chain.tokens.get(contract_address.lower())
        if token is None:
            raise DryRunError(f"No contract at {contract_address}")
        if selector != TRANSFER_SELECTOR:
            raise DryRunError(f"Unsupported selector {selector}")

        to, amount = str(args[0]).lower(), int(args[1])
        available = token.balances.get(sender.lower(), 0)
        if amount > available:
            raise DryRunError("execution reverted: transfer amount exceeds balance")

        token.balances[sender.lower()] = available - amount
        token.balances[to] = token.balances.get(to, 0) + amount
        return self._record(
            {"from": sender, "to": contract_address, "selector": selector, "args": list(args)}
        )

    def _record(self, tx: dict) -> str:
        tx_hash = "0x" + secrets.token_hex(32)
        tx["hash"] = tx_hash
        self.sent.append(tx)
        logger.info(f"[SIMULATED] Broadcast {tx_hash[:18]}... from {tx['from'][:10]}...")
        return tx_hash


class DryRunWalletProvider(WalletProvider):
    """Wallet with a fixed account list that tests can switch."""

    def __init__(self, accounts: Optional[list[str]] = None):
        self.accounts = list(accounts or [])
        self.decline = False
        self._channel: Optional[AccountChannel] = None

    @property
    def name(self) -> str:
        return "dryrun"

    async def request_accounts(self) -> list[str]:
        await asyncio.sleep(0)
        if self.decline:
            raise DryRunError("User rejected the request")
        return list(self.accounts)

    async def watch_accounts(self, channel: AccountChannel) -> None:
        self._channel = channel
        await asyncio.Event().wait()

    async def switch_accounts(self, accounts: list[str]) -> None:
        """Simulate the user switching accounts in the wallet."""
        self.accounts = list(accounts)
        if self._channel is not None:
            await self._channel.publish(self.accounts)
