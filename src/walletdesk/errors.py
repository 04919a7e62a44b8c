"""Error kinds raised by the wallet desk core.

Every failure is caught at the boundary of the component that caused it
and converted to one of these. None of them is fatal to the process.
"""

from typing import Optional


class WalletDeskError(Exception):
    """Base class for all wallet desk errors."""


class InvalidAmount(WalletDeskError, ValueError):
    """Amount text is malformed, negative or more precise than the asset allows."""

    def __init__(self, amount_text: str, reason: str):
        self.amount_text = amount_text
        self.reason = reason
        super().__init__(f"Invalid amount {amount_text!r}: {reason}")


class AssetQueryFailed(WalletDeskError):
    """One token's balance/decimals/symbol read failed."""

    def __init__(self, identifier: str, cause: Optional[BaseException] = None):
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Query for asset {identifier} failed: {cause}")


class NativeQueryFailed(WalletDeskError):
    """The native balance read failed."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.identifier = "native"
        self.cause = cause
        super().__init__(f"Native balance query failed: {cause}")


class PreconditionFailed(WalletDeskError):
    """An operation was attempted without the state or fields it needs."""


class TransferFailed(WalletDeskError):
    """The transfer could not be converted, signed or broadcast."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Transfer failed: {cause}")


class ConnectionFailed(WalletDeskError):
    """The wallet is unavailable or the user declined the connection."""

    def __init__(self, cause: Optional[BaseException] = None, message: str = ""):
        self.cause = cause
        super().__init__(message or f"Wallet connection failed: {cause}")
