"""Asset contracts: resolved balances and per-asset failures."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from walletdesk.registry import NATIVE
from walletdesk.units import format_amount


class Asset(BaseModel):
    """A resolved asset with its balance for one account."""

    symbol: str = Field(..., description="Asset symbol (ETH, LINK, etc.)")
    identifier: str = Field(
        ..., description="Contract address, or 'native' for the chain's own currency"
    )
    name: Optional[str] = Field(None, description="Registry display name")
    decimals: int = Field(..., ge=0, description="Asset decimals")
    balance: Decimal = Field(..., description="Balance in display units")
    balance_raw: int = Field(..., ge=0, description="Balance in base units")

    @property
    def is_native(self) -> bool:
        return self.identifier == NATIVE

    def same_asset(self, other: "Asset") -> bool:
        """Identity comparison (contract addresses are case-insensitive)."""
        return self.identifier.lower() == other.identifier.lower()

    @field_serializer("balance", when_used="json")
    def serialize_balance(self, value: Decimal) -> str:
        return format_amount(value)


class AssetFailure(BaseModel):
    """An asset that was left out of the last resolution."""

    identifier: str = Field(..., description="Contract address or 'native'")
    name: Optional[str] = Field(None, description="Registry display name")
    error: str = Field(..., description="Why the asset could not be resolved")


class RegistryEntryInfo(BaseModel):
    """A configured token contract."""

    name: str
    address: str


class RegistryListResponse(BaseModel):
    """Configured token registry, in display order."""

    native_symbol: str
    native_decimals: int
    tokens: list[RegistryEntryInfo] = Field(default_factory=list)
    total: int = Field(default=0, description="Number of configured tokens")
