"""Core services: balance aggregation, transfer submission, session control."""

from walletdesk.services.balance_aggregator import AssetOutcome, BalanceAggregator
from walletdesk.services.session_controller import SessionController
from walletdesk.services.transfer_submitter import TransferSubmitter

__all__ = [
    "AssetOutcome",
    "BalanceAggregator",
    "SessionController",
    "TransferSubmitter",
]
