"""Data contracts shared by the services and the HTTP API."""

from walletdesk.contracts.assets import (
    Asset,
    AssetFailure,
    RegistryEntryInfo,
    RegistryListResponse,
)
from walletdesk.contracts.session import (
    AccountsChangedBody,
    PendingTransfer,
    SelectAssetBody,
    Session,
    SessionStatus,
)
from walletdesk.contracts.transfers import (
    TransferBody,
    TransferRequest,
    TransferResponse,
)

__all__ = [
    # Asset contracts
    "Asset",
    "AssetFailure",
    "RegistryEntryInfo",
    "RegistryListResponse",
    # Session contracts
    "AccountsChangedBody",
    "PendingTransfer",
    "SelectAssetBody",
    "Session",
    "SessionStatus",
    # Transfer contracts
    "TransferBody",
    "TransferRequest",
    "TransferResponse",
]
