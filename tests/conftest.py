"""Pytest configuration and fixtures."""

import asyncio
import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["DEBUG"] = "true"

from walletdesk.providers.dryrun import DryRunChain, DryRunSigner, DryRunWalletProvider
from walletdesk.registry import AssetRegistry, RegistryEntry
from walletdesk.services.balance_aggregator import BalanceAggregator
from walletdesk.services.session_controller import SessionController
from walletdesk.services.transfer_submitter import TransferSubmitter
from walletdesk.units import to_base_units

ACCOUNT_A = "0xaAaAaAaaAaAaAaaAaAAAAAAAAaaaAaAaAaaAaaAa"
ACCOUNT_B = "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB"
RECIPIENT = "0x2222222222222222222222222222222222222222"

TOK = "0x1000000000000000000000000000000000000001"
LINK = "0x779877A7B0D9E8603169DdbD7836e478b4624789"


class GatedChain(DryRunChain):
    """DryRunChain whose reads for gated accounts wait on an event."""

    def __init__(self):
        super().__init__()
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, account: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[account.lower()] = event
        return event

    async def _wait(self, account: str) -> None:
        event = self.gates.get(str(account).lower())
        if event is not None:
            await event.wait()

    async def get_native_balance(self, address):
        await self._wait(address)
        return await super().get_native_balance(address)

    async def call(self, contract_address, selector, args=()):
        if args:
            await self._wait(args[0])
        return await super().call(contract_address, selector, args)


def seed(chain: DryRunChain) -> DryRunChain:
    """Account A: 2 ETH, 100 TOK (6 decimals), 5 LINK. Account B: 7 ETH, 3 TOK."""
    chain.set_native_balance(ACCOUNT_A, to_base_units("2", 18))
    chain.set_native_balance(ACCOUNT_B, to_base_units("7", 18))
    chain.add_token(
        TOK,
        symbol="TOK",
        decimals=6,
        balances={ACCOUNT_A: to_base_units("100", 6), ACCOUNT_B: to_base_units("3", 6)},
    )
    chain.add_token(
        LINK,
        symbol="LINK",
        decimals=18,
        balances={ACCOUNT_A: to_base_units("5", 18)},
    )
    return chain


@pytest.fixture
def chain() -> GatedChain:
    """Seeded in-memory chain."""
    return seed(GatedChain())


@pytest.fixture
def registry() -> AssetRegistry:
    return AssetRegistry([
        RegistryEntry(name="TOK", address=TOK),
        RegistryEntry(name="LINK", address=LINK),
    ])


@pytest.fixture
def aggregator(chain, registry) -> BalanceAggregator:
    return BalanceAggregator(chain, registry, native_symbol="ETH", native_decimals=18)


@pytest.fixture
def signer(chain) -> DryRunSigner:
    return DryRunSigner(chain)


@pytest.fixture
def wallet() -> DryRunWalletProvider:
    return DryRunWalletProvider([ACCOUNT_A])


@pytest.fixture
def submitter(chain, signer) -> TransferSubmitter:
    return TransferSubmitter(chain, signer, native_decimals=18)


@pytest.fixture
def controller(wallet, aggregator, submitter) -> SessionController:
    return SessionController(wallet, aggregator, submitter)
