"""Application configuration using pydantic-settings.

All values come from environment variables (or a local .env file).
The token registry is configured as a JSON list, e.g.

    KNOWN_TOKENS='[{"name": "LINK", "address": "0x7798..."}]'
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenConfig(BaseModel):
    """A fungible asset the desk should look up for every account."""

    name: str = Field(..., description="Display name used in logs and the registry listing")
    address: str = Field(..., description="Token contract address")


DEFAULT_TOKENS = [
    TokenConfig(name="LINK", address="0x779877A7B0D9E8603169DdbD7836e478b4624789"),
    TokenConfig(name="WETH", address="0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14"),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level when debug is off")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="127.0.0.1", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Capabilities
    # ======================
    dry_run: bool = Field(
        default=True, description="Use the in-memory chain and wallet (no real transactions)"
    )
    chain_id: int = Field(default=11155111, description="EVM chain ID the wallet is on")
    chain_name: str = Field(default="sepolia", description="Chain name for display")
    rpc_url: str = Field(
        default="https://rpc.sepolia.org", description="Read-only JSON-RPC endpoint"
    )
    wallet_rpc_url: str = Field(
        default="http://127.0.0.1:1248",
        description="Wallet provider JSON-RPC endpoint (accounts and signing)",
    )
    rpc_timeout: float = Field(default=30.0, description="HTTP timeout for RPC calls (seconds)")
    account_poll_interval: float = Field(
        default=2.0, description="How often to poll the wallet for account changes (seconds)"
    )
    explorer_url: str = Field(
        default="https://sepolia.etherscan.io", description="Block explorer base URL"
    )

    # ======================
    # Assets
    # ======================
    native_symbol: str = Field(default="ETH", description="Native asset symbol")
    native_decimals: int = Field(default=18, description="Native asset decimals")
    known_tokens: list[TokenConfig] = Field(
        default_factory=lambda: list(DEFAULT_TOKENS),
        description="Ordered list of token contracts to query",
    )

    def tx_url(self, tx_hash: Optional[str]) -> Optional[str]:
        """Explorer link for a transaction hash."""
        if not tx_hash or not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def get_safe_dict(self) -> dict:
        """Return settings dict suitable for the health endpoint."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chain": {
                "id": self.chain_id,
                "name": self.chain_name,
                "rpc": self._redact_url(self.rpc_url),
                "wallet_rpc": self._redact_url(self.wallet_rpc_url),
                "native": self.native_symbol,
            },
            "tokens": [t.name for t in self.known_tokens],
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Hide API keys embedded in RPC URLs (e.g. .../v3/<key>)."""
        if "://" not in url:
            return url
        proto, rest = url.split("://", 1)
        host, _, path = rest.partition("/")
        if "@" in host:
            host = "***@" + host.rsplit("@", 1)[1]
        if len(path) > 20:
            path = path[:8] + "***"
        return f"{proto}://{host}/{path}" if path else f"{proto}://{host}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
