"""Transfer submission for the connected wallet.

Converts the typed amount to exact base units and hands the transaction
to the wallet for signing and broadcast. Nothing here holds keys.

Native transfers use the fixed native decimals. Token transfers re-read
``decimals()`` from the contract on every submission instead of trusting
the value cached at aggregation time.
"""

import logging

from walletdesk.abi import DECIMALS_SELECTOR, TRANSFER_SELECTOR, is_address
from walletdesk.contracts.session import Session
from walletdesk.contracts.transfers import TransferRequest
from walletdesk.errors import AssetQueryFailed, PreconditionFailed, TransferFailed
from walletdesk.providers.base import ChainQuery, Signer
from walletdesk.services.balance_aggregator import decode_decimals
from walletdesk.units import NATIVE_DECIMALS

logger = logging.getLogger(__name__)


class TransferSubmitter:
    """Builds and submits native and token transfers."""

    def __init__(
        self,
        chain: ChainQuery,
        signer: Signer,
        native_decimals: int = NATIVE_DECIMALS,
    ):
        self.chain = chain
        self.signer = signer
        self.native_decimals = native_decimals

    def check_preconditions(self, session: Session, recipient: str, amount_text: str) -> None:
        """Validate session state and form fields.

        Raises:
            PreconditionFailed: If anything required is missing
        """
        if not session.account:
            raise PreconditionFailed("No wallet account connected")
        if session.selected_asset is None:
            raise PreconditionFailed("No asset selected")
        if not recipient or not recipient.strip():
            raise PreconditionFailed("Recipient address is required")
        if not is_address(recipient.strip()):
            raise PreconditionFailed(f"Invalid recipient address: {recipient}")
        if not amount_text or not amount_text.strip():
            raise PreconditionFailed("Amount is required")

    async def build_request(
        self,
        session: Session,
        recipient: str,
        amount_text: str,
    ) -> TransferRequest:
        """Convert the form into a TransferRequest.

        Raises:
            PreconditionFailed: Missing account, asset or fields
            InvalidAmount: Amount does not convert exactly
            AssetQueryFailed: Token decimals could not be re-read
        """
        self.check_preconditions(session, recipient, amount_text)
        asset = session.selected_asset

        if asset.is_native:
            decimals = self.native_decimals
        else:
            decimals = await self._current_decimals(asset.identifier)

        return TransferRequest.from_amount(asset, recipient.strip(), amount_text, decimals)

    async def submit(self, session: Session, recipient: str, amount_text: str) -> str:
        """Submit a transfer of the selected asset.

        Does not modify ``session``.

        Args:
            session: Current session (account and selected asset)
            recipient: Recipient address
            amount_text: Amount in display units, as typed

        Returns:
            Transaction hash from the wallet

        Raises:
            PreconditionFailed: Before any capability call
            TransferFailed: Conversion, decimals re-read or wallet failure
        """
        self.check_preconditions(session, recipient, amount_text)

        try:
            request = await self.build_request(session, recipient, amount_text)
        except PreconditionFailed:
            raise
        except Exception as e:
            logger.warning(f"Transfer rejected before signing: {e}")
            raise TransferFailed(e) from e

        asset = request.asset
        logger.info(
            "Transferring %s base units of %s to %s...",
            request.amount_base_units,
            asset.symbol,
            request.recipient[:10],
        )

        try:
            if asset.is_native:
                tx_hash = await self.signer.send_native(
                    session.account, request.recipient, request.amount_base_units
                )
            else:
                tx_hash = await self.signer.send_contract_call(
                    session.account,
                    asset.identifier,
                    TRANSFER_SELECTOR,
                    [request.recipient, request.amount_base_units],
                )
        except Exception as e:
            logger.error(f"Failed to transfer {asset.symbol}: {e}")
            raise TransferFailed(e) from e

        logger.info("Transfer submitted: %s", tx_hash)
        return tx_hash

    async def _current_decimals(self, token_address: str) -> int:
        try:
            return decode_decimals(await self.chain.call(token_address, DECIMALS_SELECTOR))
        except Exception as e:
            raise AssetQueryFailed(token_address, e) from e
