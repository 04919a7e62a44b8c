"""Tests for the ERC-20 calldata codec."""

import pytest

from walletdesk.abi import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    TRANSFER_SELECTOR,
    decode_string,
    decode_uint256,
    encode_call,
    encode_string_result,
    encode_uint256_result,
    is_address,
)

HOLDER = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


class TestEncoding:
    """Tests for calldata encoding."""

    def test_balance_of_calldata(self):
        data = encode_call(BALANCE_OF_SELECTOR, [HOLDER])

        assert data == (
            "0x70a08231"
            "000000000000000000000000abcdef0123456789abcdef0123456789abcdef01"
        )

    def test_no_argument_call(self):
        assert encode_call(DECIMALS_SELECTOR) == "0x313ce567"

    def test_transfer_calldata(self):
        data = encode_call(TRANSFER_SELECTOR, [HOLDER, 10_000_000])

        assert data.startswith("0xa9059cbb")
        assert len(data) == 10 + 2 * 64
        assert data.endswith("0" * 58 + "989680")  # 10_000_000 == 0x989680

    def test_uint256_overflow_rejected(self):
        with pytest.raises(ValueError):
            encode_call(TRANSFER_SELECTOR, [HOLDER, 2**256])

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            encode_call(TRANSFER_SELECTOR, [HOLDER, -1])

    def test_malformed_address_rejected(self):
        with pytest.raises(ValueError):
            encode_call(BALANCE_OF_SELECTOR, ["0x1234"])


class TestDecoding:
    """Tests for return data decoding."""

    def test_uint256(self):
        assert decode_uint256(encode_uint256_result(18)) == 18

    def test_empty_result_rejected(self):
        """A call to an address without code returns 0x."""
        with pytest.raises(ValueError):
            decode_uint256("0x")

    def test_dynamic_string(self):
        data = (
            "0x"
            "0000000000000000000000000000000000000000000000000000000000000020"
            "0000000000000000000000000000000000000000000000000000000000000004"
            "4c494e4b00000000000000000000000000000000000000000000000000000000"
        )
        assert decode_string(data) == "LINK"

    def test_bytes32_symbol(self):
        """Legacy tokens (e.g. MKR) return bytes32 from symbol()."""
        data = "0x4d4b520000000000000000000000000000000000000000000000000000000000"
        assert decode_string(data) == "MKR"

    def test_string_result_helper(self):
        assert decode_string(encode_string_result("TOK")) == "TOK"
        assert decode_string(encode_string_result("")) == ""

    def test_truncated_string_rejected(self):
        with pytest.raises(ValueError):
            decode_string("0x0000")


class TestIsAddress:
    def test_valid(self):
        assert is_address(HOLDER)

    @pytest.mark.parametrize("value", ["", "0x", "native", HOLDER[:-1], HOLDER + "0", None, 123])
    def test_invalid(self, value):
        assert not is_address(value)
