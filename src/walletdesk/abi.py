"""Minimal ERC-20 ABI encoding and decoding.

Only the four functions the desk uses are supported, so calldata is built
by hand: a 4-byte selector followed by 32-byte words.
"""

import re
from typing import Sequence, Union

# ERC-20 function selectors
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
DECIMALS_SELECTOR = "0x313ce567"  # decimals()
SYMBOL_SELECTOR = "0x95d89b41"  # symbol()
TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_WORD = 64  # hex chars per 32-byte word

AbiArg = Union[str, int]


def is_address(value: object) -> bool:
    """Check for a 0x-prefixed 20-byte hex address."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def encode_address(address: str) -> str:
    if not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return address.lower().replace("0x", "").zfill(_WORD)


def encode_uint256(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected an integer, got {value!r}")
    if value < 0 or value >= 2**256:
        raise ValueError(f"Value out of uint256 range: {value}")
    return hex(value)[2:].zfill(_WORD)


def encode_call(selector: str, args: Sequence[AbiArg] = ()) -> str:
    """Build calldata for a call with static address/uint256 arguments."""
    words = []
    for arg in args:
        if isinstance(arg, str):
            words.append(encode_address(arg))
        else:
            words.append(encode_uint256(arg))
    return selector + "".join(words)


def _strip(data: str) -> str:
    if not isinstance(data, str):
        raise ValueError(f"Expected hex string, got {type(data).__name__}")
    return data[2:] if data.startswith("0x") else data


def decode_uint256(data: str) -> int:
    """Decode the first word of a return value as an unsigned integer.

    An empty result (``0x``) means the target has no code or reverted
    silently, and is rejected.
    """
    body = _strip(data)
    if len(body) < _WORD:
        raise ValueError(f"Return data too short for uint256: {data!r}")
    return int(body[:_WORD], 16)


def decode_string(data: str) -> str:
    """Decode a dynamic ABI string.

    Some older tokens return ``bytes32`` for ``symbol()``; a single word
    is decoded as a null-padded string.
    """
    body = _strip(data)
    if len(body) == _WORD:
        raw = bytes.fromhex(body).rstrip(b"\x00")
        return raw.decode("utf-8", errors="replace")
    if len(body) < 2 * _WORD:
        raise ValueError(f"Return data too short for string: {data!r}")

    offset = int(body[:_WORD], 16) * 2
    length = int(body[offset:offset + _WORD], 16) * 2
    start = offset + _WORD
    if start + length > len(body):
        raise ValueError("String length exceeds return data")
    return bytes.fromhex(body[start:start + length]).decode("utf-8", errors="replace")


def encode_uint256_result(value: int) -> str:
    """Encode a uint256 return value (used by the dry-run chain)."""
    return "0x" + encode_uint256(value)


def encode_string_result(value: str) -> str:
    """Encode a dynamic string return value (used by the dry-run chain)."""
    raw = value.encode("utf-8")
    padded_len = ((len(raw) + 31) // 32) * 32
    data = raw.hex().ljust(padded_len * 2, "0")
    return "0x" + encode_uint256(32) + encode_uint256(len(raw)) + data
