"""JSON-RPC capabilities over HTTP.

Reads go to a regular node endpoint. Accounts and signing go to the
wallet provider's endpoint (e.g. Frame on http://127.0.0.1:1248), which
asks the user to approve each transaction before broadcasting it.
"""

import asyncio
import itertools
import logging
from typing import Any, Optional, Sequence

import httpx

from walletdesk.abi import AbiArg, encode_call
from walletdesk.events import AccountChannel
from walletdesk.providers.base import ChainQuery, Signer, WalletProvider

logger = logging.getLogger(__name__)

# EIP-1193 error codes
USER_REJECTED = 4001

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INTERNAL_ERROR = -32603


class RpcError(Exception):
    """JSON-RPC error object, or a malformed response."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC error {code}: {message}")

    @property
    def user_rejected(self) -> bool:
        return self.code == USER_REJECTED


class JsonRpcClient:
    """Minimal JSON-RPC 2.0 client."""

    _ids = itertools.count(1)

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """Send one request and return its ``result``.

        Raises:
            RpcError: On an error object, a body that is not a JSON-RPC
                response, or a response without a result
            httpx.HTTPError: On transport failures and non-2xx status codes
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError as e:
                raise RpcError(PARSE_ERROR, f"Invalid JSON in response to {method}: {e}") from e

        if not isinstance(data, dict):
            raise RpcError(PARSE_ERROR, f"Unexpected response to {method}: {str(data)[:66]}")
        if "error" in data and data["error"]:
            error = data["error"]
            if not isinstance(error, dict):
                raise RpcError(INTERNAL_ERROR, str(error))
            try:
                code = int(error.get("code", -32000))
            except (TypeError, ValueError):
                code = -32000
            raise RpcError(code, str(error.get("message", "unknown error")))
        if "result" not in data:
            raise RpcError(INTERNAL_ERROR, f"No result in response to {method}")

        logger.debug("RPC %s -> %s", method, str(data["result"])[:66])
        return data["result"]


class RpcChainQuery(ChainQuery):
    """Chain reads via eth_getBalance / eth_call."""

    def __init__(self, client: JsonRpcClient):
        self.client = client

    async def get_native_balance(self, address: str) -> int:
        result = await self.client.request("eth_getBalance", [address, "latest"])
        return int(result, 16)

    async def call(
        self,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        data = encode_call(selector, args)
        return await self.client.request(
            "eth_call",
            [{"to": contract_address, "data": data}, "latest"],
        )


class RpcSigner(Signer):
    """Transactions via the wallet's eth_sendTransaction.

    Gas and fees are left to the wallet.
    """

    def __init__(self, client: JsonRpcClient):
        self.client = client

    async def send_native(self, sender: str, to: str, amount: int) -> str:
        tx = {
            "from": sender,
            "to": to,
            "value": hex(amount),
        }
        return await self._send(tx)

    async def send_contract_call(
        self,
        sender: str,
        contract_address: str,
        selector: str,
        args: Sequence[AbiArg] = (),
    ) -> str:
        tx = {
            "from": sender,
            "to": contract_address,
            "value": "0x0",
            "data": encode_call(selector, args),
        }
        return await self._send(tx)

    async def _send(self, tx: dict) -> str:
        logger.info("Requesting wallet signature for tx to %s...", tx["to"][:10])
        tx_hash = await self.client.request("eth_sendTransaction", [tx])
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise RpcError(INTERNAL_ERROR, f"Unexpected transaction hash: {tx_hash!r}")
        return tx_hash


def _account_list(result: Any) -> list[str]:
    if result is None:
        return []
    if not isinstance(result, list) or not all(isinstance(a, str) for a in result):
        raise RpcError(INTERNAL_ERROR, f"Unexpected account list: {str(result)[:66]}")
    return list(result)


class RpcWalletProvider(WalletProvider):
    """Wallet accounts via eth_requestAccounts, with polling for changes."""

    def __init__(self, client: JsonRpcClient, poll_interval: float = 2.0):
        self.client = client
        self.poll_interval = poll_interval
        self._last_accounts: Optional[list[str]] = None

    @property
    def name(self) -> str:
        return "rpc"

    async def request_accounts(self) -> list[str]:
        accounts = _account_list(await self.client.request("eth_requestAccounts"))
        self._last_accounts = accounts
        return list(accounts)

    async def watch_accounts(self, channel: AccountChannel) -> None:
        """Poll eth_accounts and publish whenever the list changes."""
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                accounts = _account_list(await self.client.request("eth_accounts"))
            except (RpcError, httpx.HTTPError) as e:
                logger.warning(f"Account poll failed: {e}")
                continue

            if self._last_accounts is not None and accounts != self._last_accounts:
                logger.info("Wallet accounts changed (%d accounts)", len(accounts))
                await channel.publish(accounts)
            self._last_accounts = accounts
