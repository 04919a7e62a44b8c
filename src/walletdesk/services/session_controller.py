"""Session controller: owns the wallet session and its transitions.

States: disconnected -> connecting -> connected(account), and
connected(A) -> account_switching -> connected(B) on wallet notifications.

Every asynchronous result is tagged with the generation it started in.
The generation is bumped on connect, account change and disconnect, so a
slow resolution for an account the user already switched away from is
discarded instead of being merged into the new account's state.
"""

import asyncio
import logging
from typing import Optional

from walletdesk.contracts.assets import Asset, AssetFailure
from walletdesk.contracts.session import PendingTransfer, Session, SessionStatus
from walletdesk.errors import (
    AssetQueryFailed,
    ConnectionFailed,
    NativeQueryFailed,
    PreconditionFailed,
    TransferFailed,
)
from walletdesk.events import AccountChannel
from walletdesk.providers.base import WalletProvider
from walletdesk.services.balance_aggregator import BalanceAggregator, failures, successful
from walletdesk.services.transfer_submitter import TransferSubmitter

logger = logging.getLogger(__name__)


def _short(address: Optional[str]) -> str:
    if not address:
        return "-"
    return address[:10] + "..." if len(address) > 10 else address


class SessionController:
    """Connects the wallet, keeps balances current and submits transfers.

    Collaborators are injected so the controller can run against the
    dry-run capabilities in tests.
    """

    def __init__(
        self,
        wallet: WalletProvider,
        aggregator: BalanceAggregator,
        submitter: TransferSubmitter,
    ):
        self.wallet = wallet
        self.aggregator = aggregator
        self.submitter = submitter
        self.session = Session()
        self._generation = 0
        self._selected_identifier: Optional[str] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> Session:
        """Deep copy of the current session for readers."""
        return self.session.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> Session:
        """Request accounts from the wallet and resolve balances.

        Raises:
            ConnectionFailed: Wallet unavailable, user declined, or no accounts
        """
        if self.session.status == SessionStatus.CONNECTED:
            logger.info("Already connected as %s", _short(self.session.account))
            return self.snapshot()

        generation = self._bump()
        self.session.status = SessionStatus.CONNECTING
        self.session.last_error = None
        logger.info("Connecting to %s wallet", self.wallet.name)

        try:
            accounts = await self.wallet.request_accounts()
        except Exception as e:
            logger.error(f"Wallet connection failed: {e}")
            error = ConnectionFailed(e)
            if generation == self._generation:
                self._reset(str(error))
            raise error from e

        if generation != self._generation:
            # an account notification or disconnect arrived during the prompt
            logger.info("Connect result superseded; ignoring")
            return self.snapshot()

        if not accounts:
            error = ConnectionFailed(message="Wallet returned no accounts")
            self._reset(str(error))
            raise error

        account = accounts[0]
        self.session.clear_account_state()
        self.session.account = account
        self.session.status = SessionStatus.CONNECTED
        logger.info("Wallet connected: %s", _short(account))

        await self._resolve_into_session(account, generation)
        return self.snapshot()

    async def disconnect(self) -> Session:
        """Forget the connected account locally."""
        self._bump()
        self._reset(None)
        logger.info("Wallet disconnected")
        return self.snapshot()

    async def handle_accounts_changed(self, accounts: list[str]) -> Session:
        """React to the wallet's account list changing.

        An empty list disconnects. Otherwise the first account becomes
        active; all state of the previous account is cleared before the
        new resolution starts.
        """
        accounts = list(accounts)
        if self.session.status == SessionStatus.DISCONNECTED:
            logger.debug("Ignoring account change while disconnected")
            return self.snapshot()

        generation = self._bump()

        if not accounts:
            logger.info("Wallet reported no accounts; disconnecting")
            self._reset(None)
            return self.snapshot()

        account = accounts[0]
        logger.info(
            "Account changed: %s -> %s", _short(self.session.account), _short(account)
        )
        self.session.status = SessionStatus.ACCOUNT_SWITCHING
        self.session.clear_account_state()
        self.session.account = account
        self.session.last_error = None

        applied = await self._resolve_into_session(account, generation)
        if applied and self._selected_identifier:
            await self._reselect(self._selected_identifier, generation, account)
        return self.snapshot()

    async def run(self, channel: AccountChannel) -> None:
        """Consume account notifications until cancelled.

        Each notification is handled in its own task so that a newer one
        can supersede a resolution that is still in flight.
        """
        async for event in channel:
            self._spawn(self.handle_accounts_changed(list(event.accounts)))

    async def drain(self) -> None:
        """Wait for all in-flight notification handlers."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def refresh(self) -> Session:
        """Re-run full aggregation for the current account."""
        account = self._require_connected()
        await self._resolve_into_session(account, self._generation)
        return self.snapshot()

    async def select_asset(self, identifier: str) -> Session:
        """Select an asset from the resolved list and refresh its balance.

        Raises:
            PreconditionFailed: Not connected, or asset not in the resolved list
            AssetQueryFailed / NativeQueryFailed: Balance refresh failed
        """
        account = self._require_connected()
        asset = self._find(identifier)
        if asset is None:
            error = PreconditionFailed(f"Unknown asset: {identifier}")
            self.session.last_error = str(error)
            raise error

        self.session.selected_asset = asset
        self.session.balance = None
        self._selected_identifier = asset.identifier
        logger.info("Selected %s", asset.symbol)

        await self._refresh_selected(self._generation, account)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    async def transfer(self, recipient: str, amount_text: str) -> str:
        """Submit a transfer of the selected asset.

        ``last_transaction_id`` is only set once the wallet returns a hash,
        and the selected balance is then re-queried from the chain.

        Raises:
            PreconditionFailed: Missing account, asset, recipient or amount
            TransferFailed: Conversion error or wallet rejection
        """
        generation = self._generation
        account = self.session.account
        request_state = self.snapshot()

        try:
            self.submitter.check_preconditions(request_state, recipient, amount_text)
        except PreconditionFailed as e:
            self.session.last_error = str(e)
            raise

        self.session.pending_transfer = PendingTransfer(
            recipient=recipient, amount_text=amount_text
        )
        try:
            tx_hash = await self.submitter.submit(request_state, recipient, amount_text)
        except (PreconditionFailed, TransferFailed) as e:
            if generation == self._generation:
                self.session.pending_transfer = None
                self.session.last_error = str(e)
            raise

        if not self._is_current(generation, account):
            logger.warning(
                "Transfer %s settled after the account changed; not recorded", tx_hash
            )
            return tx_hash

        self.session.pending_transfer = None
        self.session.last_transaction_id = tx_hash
        self.session.last_error = None

        try:
            await self._refresh_selected(generation, account)
        except (AssetQueryFailed, NativeQueryFailed) as e:
            logger.warning(f"Balance refresh after transfer {tx_hash} failed: {e}")

        return tx_hash

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bump(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int, account: Optional[str]) -> bool:
        return generation == self._generation and self.session.account == account

    def _reset(self, error: Optional[str]) -> None:
        self.session.clear_account_state()
        self.session.account = None
        self.session.status = SessionStatus.DISCONNECTED
        self.session.last_error = error
        self._selected_identifier = None

    def _require_connected(self) -> str:
        if self.session.status != SessionStatus.CONNECTED or not self.session.account:
            raise PreconditionFailed("Wallet is not connected")
        return self.session.account

    def _find(self, identifier: str) -> Optional[Asset]:
        key = identifier.lower()
        for asset in self.session.resolved_assets:
            if asset.identifier.lower() == key:
                return asset
        return None

    def _replace(self, asset: Asset) -> None:
        self.session.resolved_assets = [
            asset if a.same_asset(asset) else a for a in self.session.resolved_assets
        ]

    @staticmethod
    def _failure_message(items: list[AssetFailure]) -> Optional[str]:
        if not items:
            return None
        names = ", ".join(f.name or f.identifier for f in items)
        return f"Could not load balances for: {names}"

    async def _resolve_into_session(self, account: str, generation: int) -> bool:
        """Run full aggregation and apply it if still current."""
        outcomes = await self.aggregator.resolve_outcomes(account)

        if not self._is_current(generation, account):
            logger.info("Discarding stale balances for %s", _short(account))
            return False

        self.session.resolved_assets = successful(outcomes)
        self.session.failures = failures(outcomes)
        self.session.status = SessionStatus.CONNECTED
        self.session.last_error = self._failure_message(self.session.failures)

        if self.session.selected_asset is not None:
            match = self._find(self.session.selected_asset.identifier)
            self.session.selected_asset = match
            self.session.balance = match.balance if match else None
        return True

    async def _reselect(self, identifier: str, generation: int, account: str) -> None:
        """Restore the previous selection after an account switch, if available."""
        asset = self._find(identifier)
        if asset is None:
            return
        self.session.selected_asset = asset
        try:
            await self._refresh_selected(generation, account)
        except (AssetQueryFailed, NativeQueryFailed) as e:
            logger.warning(f"Could not refresh {asset.symbol} after account switch: {e}")

    async def _refresh_selected(self, generation: int, account: str) -> None:
        """Re-query just the selected asset's balance."""
        asset = self.session.selected_asset
        if asset is None:
            return

        try:
            refreshed = await self.aggregator.resolve_one(account, asset)
        except (AssetQueryFailed, NativeQueryFailed) as e:
            if self._is_current(generation, account) and self._still_selected(asset):
                self.session.balance = None
                self.session.last_error = str(e)
            raise

        if not (self._is_current(generation, account) and self._still_selected(asset)):
            logger.info("Discarding stale %s balance", asset.symbol)
            return

        self._replace(refreshed)
        self.session.selected_asset = refreshed
        self.session.balance = refreshed.balance

    def _still_selected(self, asset: Asset) -> bool:
        selected = self.session.selected_asset
        return selected is not None and selected.same_asset(asset)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Account change handler failed: {error}")
