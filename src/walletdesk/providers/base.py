"""Capability interfaces the desk depends on but does not implement.

- WalletProvider: which accounts the user has connected, and when that changes
- ChainQuery: read-only chain state (native balance, contract calls)
- Signer: state-changing transactions, approved by the user in their wallet
"""

from abc import ABC, abstractmethod
from typing import Sequence

from walletdesk.abi import AbiArg
from walletdesk.events import AccountChannel


class WalletProvider(ABC):
    """Browser wallet connection."""

    @abstractmethod
    async def request_accounts(self) -> list[str]:
        """Ask the wallet for the user's accounts.

        May prompt the user. Raises if the user declines.

        Returns:
            Ordered account addresses (first one is active)
        """
        raise NotImplementedError()

    @abstractmethod
    async def watch_accounts(self, channel: AccountChannel) -> None:
        """Publish account-list changes to ``channel`` until cancelled."""
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        raise NotImplementedError()


class ChainQuery(ABC):
    """Read-only chain access. Every call may fail independently."""

    @abstractmethod
    async def get_native_balance(self, address: str) -> int:
        """Native balance of ``address`` in base units (wei)."""
        raise NotImplementedError()

    @abstractmethod
    async def call(
        self,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        """Execute a read-only contract call.

        Args:
            contract_address: Contract to call
            selector: 4-byte function selector (0x-prefixed hex)
            args: Static arguments (addresses or uint256)

        Returns:
            Raw ABI-encoded return data (0x-prefixed hex)
        """
        raise NotImplementedError()


class Signer(ABC):
    """Signing and broadcast through the user's wallet."""

    @abstractmethod
    async def send_native(self, sender: str, to: str, amount: int) -> str:
        """Send ``amount`` base units of the native asset.

        Returns:
            Transaction hash
        """
        raise NotImplementedError()

    @abstractmethod
    async def send_contract_call(
        self,
        sender: str,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        """Send a state-changing contract call with zero value.

        Returns:
            Transaction hash
        """
        raise NotImplementedError()
