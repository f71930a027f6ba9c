"""Parsing and normalization of transfer request inputs."""

import re
from dataclasses import dataclass
from typing import Optional, Union

from eth_utils import is_hex_address, to_canonical_address

from policysigner.errors import InvalidAmount, InvalidNonce, InvalidRecipient

MAX_NONCE = 2**64 - 1
MAX_NONCE_DIGITS = len(str(MAX_NONCE))

_DECIMAL_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class TransferRequest:
    """A validated transfer: who gets paid, how much, at which nonce."""

    recipient: bytes  # 20-byte canonical address
    amount: int       # wei
    nonce: int = 0

    @property
    def recipient_hex(self) -> str:
        return normalize_address(self.recipient)


def normalize_address(address: Union[bytes, str]) -> str:
    """Return the lowercase 0x-prefixed form used for whitelist matching.

    Raw bytes are hex encoded. Strings are lowercased and given a ``0x``
    prefix if they lack one; they are not otherwise validated.
    """
    if isinstance(address, (bytes, bytearray)):
        return "0x" + bytes(address).hex()

    value = address.lower()
    if not value.startswith("0x"):
        value = "0x" + value
    return value


def parse_recipient(value: Union[bytes, str]) -> bytes:
    """Parse a recipient into its 20-byte canonical address.

    Accepts hex with or without ``0x`` in any letter case. Checksum casing
    is not enforced.

    Raises:
        InvalidRecipient: If the value is not a 20-byte hex address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise InvalidRecipient(f"expected 20 address bytes, got {len(value)}")
        return bytes(value)

    if not isinstance(value, str) or not value:
        raise InvalidRecipient("recipient address is required")

    candidate = value.strip()
    if not is_hex_address(candidate):
        raise InvalidRecipient(f"not a 20-byte hex address: {value!r}")

    return to_canonical_address(candidate)


def _digits(value: str) -> Optional[str]:
    """Strip whitespace and leading zeros from a decimal string, or None."""
    text = value.strip()
    if not _DECIMAL_RE.fullmatch(text):
        return None
    return text.lstrip("0") or "0"


def _preview(value: object) -> str:
    text = repr(value)
    return text if len(text) <= 40 else text[:37] + "..."


def parse_amount(value: Union[int, str]) -> int:
    """Parse a decimal wei amount.

    Raises:
        InvalidAmount: If the value is negative, not a base-10 integer, or
            too long to convert
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"amount must be an integer, got {value!r}")

    digits = _digits(value) if isinstance(value, str) else None
    if isinstance(value, int):
        amount = value
    elif digits is not None:
        try:
            amount = int(digits)
        except ValueError as e:
            raise InvalidAmount(f"amount has too many digits ({len(digits)})") from e
    else:
        raise InvalidAmount(f"amount must be a non-negative decimal integer, got {_preview(value)}")

    if amount < 0:
        raise InvalidAmount(f"amount must be non-negative, got {amount}")
    return amount


def parse_nonce(value: Union[int, str]) -> int:
    """Parse an account nonce (unsigned 64-bit)."""
    if isinstance(value, bool):
        raise InvalidNonce(f"nonce must be an integer, got {value!r}")

    if isinstance(value, str):
        digits = _digits(value)
        if digits is None or len(digits) > MAX_NONCE_DIGITS:
            raise InvalidNonce(f"nonce must be an unsigned 64-bit integer, got {_preview(value)}")
        value = int(digits)

    if not isinstance(value, int) or not 0 <= value <= MAX_NONCE:
        raise InvalidNonce(f"nonce must be an unsigned 64-bit integer, got {_preview(value)}")
    return value


def parse_transfer(recipient: Union[bytes, str], amount: Union[int, str], nonce: Union[int, str] = 0) -> TransferRequest:
    """Build a validated TransferRequest from raw operator input."""
    return TransferRequest(
        recipient=parse_recipient(recipient),
        amount=parse_amount(amount),
        nonce=parse_nonce(nonce),
    )
