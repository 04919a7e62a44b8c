"""Conversion between human decimal amounts and integer base units.

Every amount that leaves the desk in a transfer goes through
``to_base_units``. It never touches floating point: the text is split
into its whole and fractional digits and combined with integer math.
"""

import re
from decimal import Decimal

from walletdesk.errors import InvalidAmount

NATIVE_DECIMALS = 18
MAX_DECIMALS = 255  # decimals() is a uint8
UINT256_MAX = 2**256 - 1

_AMOUNT_RE = re.compile(r"^(?P<whole>\d*)(?:\.(?P<frac>\d*))?$", re.ASCII)


def _check_decimals(amount_text: str, decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmount(amount_text, f"unsupported precision {decimals!r}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise InvalidAmount(amount_text, f"unsupported precision {decimals}")


def to_base_units(amount_text: str, decimals: int) -> int:
    """Convert a decimal string to an exact integer amount of base units.

    Args:
        amount_text: Plain non-negative decimal, e.g. "1.5" or "0.000001"
        decimals: Asset precision

    Returns:
        ``amount_text * 10**decimals`` as an int

    Raises:
        InvalidAmount: Empty, non-numeric, signed, exponent notation, or
            more significant fractional digits than ``decimals``
    """
    if amount_text is None:
        raise InvalidAmount("", "amount is required")
    _check_decimals(amount_text, decimals)

    text = amount_text.strip()
    if not text:
        raise InvalidAmount(amount_text, "amount is required")

    match = _AMOUNT_RE.match(text)
    if not match:
        if text.startswith("-"):
            raise InvalidAmount(amount_text, "amount must not be negative")
        raise InvalidAmount(amount_text, "not a decimal number")

    whole = match.group("whole") or ""
    frac = match.group("frac") or ""
    if not whole and not frac:
        raise InvalidAmount(amount_text, "not a decimal number")

    # trailing zeros carry no value
    frac = frac.rstrip("0")
    if len(frac) > decimals:
        raise InvalidAmount(
            amount_text,
            f"at most {decimals} fractional digits allowed, got {len(frac)}",
        )

    scale = 10**decimals
    whole_units = int(whole) * scale if whole else 0
    frac_units = int(frac.ljust(decimals, "0")) if frac else 0
    return whole_units + frac_units


def to_display_units(raw: int, decimals: int) -> Decimal:
    """Convert base units to a display Decimal (raw / 10**decimals).

    Built from the integer's digits directly, so no context rounding applies.
    """
    raw = int(raw)
    sign = 1 if raw < 0 else 0
    digits = tuple(int(d) for d in str(abs(raw)))
    return Decimal((sign, digits, -int(decimals)))


def format_amount(value: Decimal) -> str:
    """Render a display amount without exponent or redundant trailing zeros."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
