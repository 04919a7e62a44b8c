"""Session state contracts."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from walletdesk.contracts.assets import Asset, AssetFailure
from walletdesk.units import format_amount


class SessionStatus(str, Enum):
    """Wallet connection states."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ACCOUNT_SWITCHING = "account_switching"


class PendingTransfer(BaseModel):
    """Transfer form values while the transfer is in flight."""

    recipient: str
    amount_text: str


class Session(BaseModel):
    """Everything the client needs to render the wallet view.

    ``selected_asset``, when set, is always one of ``resolved_assets``
    for the current ``account``.
    """

    status: SessionStatus = Field(default=SessionStatus.DISCONNECTED)
    account: Optional[str] = Field(None, description="Connected account address")
    resolved_assets: list[Asset] = Field(
        default_factory=list, description="Native first, then tokens in registry order"
    )
    selected_asset: Optional[Asset] = Field(None, description="Asset chosen for transfer")
    balance: Optional[Decimal] = Field(
        None, description="Freshly queried balance of the selected asset"
    )
    pending_transfer: Optional[PendingTransfer] = None
    last_transaction_id: Optional[str] = Field(None, description="Last submitted tx hash")
    last_error: Optional[str] = Field(None, description="User-visible failure message")
    failures: list[AssetFailure] = Field(
        default_factory=list, description="Assets omitted from the last resolution"
    )

    @field_serializer("balance", when_used="json-unless-none")
    def serialize_balance(self, value: Decimal) -> str:
        return format_amount(value)

    def clear_account_state(self) -> None:
        """Drop everything attributed to the current account."""
        self.resolved_assets = []
        self.selected_asset = None
        self.balance = None
        self.pending_transfer = None
        self.last_transaction_id = None
        self.failures = []


class AccountsChangedBody(BaseModel):
    """Account list forwarded from the browser wallet's accountsChanged event."""

    accounts: list[str] = Field(default_factory=list)


class SelectAssetBody(BaseModel):
    """Asset chosen in the client's asset dropdown."""

    identifier: str = Field(..., description="Contract address or 'native'")
