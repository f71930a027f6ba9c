"""Serialization boundary for signed transactions."""

from typing import Optional

from eth_utils import keccak

from policysigner.signing.base import ChainTransactionCodec
from policysigner.signing.ethereum import EthereumCodec
from policysigner.transaction.models import SignedTransaction


def serialize(signed: SignedTransaction, codec: Optional[ChainTransactionCodec] = None) -> bytes:
    """Encode a signed transaction to its canonical broadcastable bytes."""
    return (codec or EthereumCodec()).encode(signed)


def to_display_hex(raw: bytes) -> str:
    """Lowercase hex with no prefix or separators, for human-facing output."""
    return bytes(raw).hex()


def transaction_hash(raw: bytes) -> str:
    """Keccak-256 of the raw transaction, as 0x hex."""
    return "0x" + keccak(bytes(raw)).hex()
