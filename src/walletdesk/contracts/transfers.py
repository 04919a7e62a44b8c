"""Transfer contracts.

A ``TransferRequest`` always carries an exact base-unit amount produced
by the decimal converter. API callers send the human amount as text.
"""

from typing import Optional

from pydantic import BaseModel, Field

from walletdesk.contracts.assets import Asset
from walletdesk.contracts.session import Session
from walletdesk.errors import InvalidAmount
from walletdesk.units import UINT256_MAX, to_base_units


class TransferRequest(BaseModel):
    """A fully converted transfer ready for signing."""

    asset: Asset
    recipient: str
    amount_base_units: int = Field(..., ge=0, le=UINT256_MAX)

    @classmethod
    def from_amount(
        cls,
        asset: Asset,
        recipient: str,
        amount_text: str,
        decimals: int,
    ) -> "TransferRequest":
        """Convert a human amount and build the request.

        Raises:
            InvalidAmount: If the text does not convert exactly, or the
                result does not fit in a uint256
        """
        amount = to_base_units(amount_text, decimals)
        if amount > UINT256_MAX:
            raise InvalidAmount(amount_text, "amount exceeds uint256")
        return cls(asset=asset, recipient=recipient, amount_base_units=amount)


class TransferBody(BaseModel):
    """Transfer form submitted by the client."""

    recipient: str = Field(default="", description="Recipient address")
    amount: str = Field(default="", description="Amount in display units, as typed")


class TransferResponse(BaseModel):
    """Result of a submitted transfer."""

    success: bool = True
    transaction_id: str = Field(..., description="Transaction hash")
    explorer_url: Optional[str] = Field(None, description="Link to explorer")
    session: Optional[Session] = Field(None, description="Session after the transfer")
