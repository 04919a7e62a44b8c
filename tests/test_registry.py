"""Tests for the asset registry, settings and capability factory."""

import pytest

from conftest import LINK, TOK
from walletdesk.config import Settings, TokenConfig
from walletdesk.providers.dryrun import DryRunChain
from walletdesk.providers.factory import (
    DEMO_ACCOUNT,
    build_dry_run,
    get_capabilities,
    reset_capabilities,
)
from walletdesk.registry import NATIVE, AssetRegistry, RegistryEntry


class TestAssetRegistry:
    def test_keeps_order(self):
        registry = AssetRegistry([
            RegistryEntry(name="LINK", address=LINK),
            RegistryEntry(name="TOK", address=TOK),
        ])

        assert [e.name for e in registry] == ["LINK", "TOK"]
        assert len(registry) == 2

    def test_rejects_duplicates(self):
        with pytest.raises(ValueError, match="Duplicate"):
            AssetRegistry([
                RegistryEntry(name="LINK", address=LINK),
                RegistryEntry(name="LINK2", address=LINK.lower()),
            ])

    def test_rejects_invalid_address(self):
        with pytest.raises(ValueError):
            AssetRegistry([RegistryEntry(name="ETH", address=NATIVE)])

    def test_from_settings(self):
        settings = Settings(known_tokens=[TokenConfig(name="TOK", address=TOK)])

        registry = AssetRegistry.from_settings(settings)

        assert [e.address for e in registry] == [TOK]


class TestSettings:
    def test_tx_url(self):
        settings = Settings(explorer_url="https://sepolia.etherscan.io/")

        assert settings.tx_url("0xabc") == "https://sepolia.etherscan.io/tx/0xabc"
        assert settings.tx_url(None) is None

    def test_safe_dict_redacts_rpc_key(self):
        settings = Settings(rpc_url="https://sepolia.infura.io/v3/0123456789abcdef0123456789abcdef")

        rpc = settings.get_safe_dict()["chain"]["rpc"]

        assert "0123456789abcdef0123456789abcdef" not in rpc
        assert rpc.startswith("https://sepolia.infura.io/")

    def test_known_tokens_from_env(self, monkeypatch):
        monkeypatch.setenv("KNOWN_TOKENS", f'[{{"name": "TOK", "address": "{TOK}"}}]')

        settings = Settings()

        assert [t.name for t in settings.known_tokens] == ["TOK"]


class TestCapabilityFactory:
    @pytest.mark.asyncio
    async def test_dry_run_is_seeded(self):
        capabilities = build_dry_run(Settings())

        assert isinstance(capabilities.chain, DryRunChain)
        assert await capabilities.wallet.request_accounts() == [DEMO_ACCOUNT]
        assert await capabilities.chain.get_native_balance(DEMO_ACCOUNT) == 2 * 10**18

    def test_singleton(self):
        reset_capabilities()
        try:
            assert get_capabilities() is get_capabilities()
        finally:
            reset_capabilities()
