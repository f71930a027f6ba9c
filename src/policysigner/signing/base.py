"""Base interface for chain transaction codecs.

Signing flow:
1. Build unsigned transaction
2. Codec signs it with a signing key, bound to a chain ID
3. Codec encodes the signed transaction to its canonical bytes

Implementations should NEVER expose raw private keys. Signing returns the
signature components only.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum

from policysigner.keys import SigningKey
from policysigner.transaction.models import (
    SignedTransaction,
    TransactionSignature,
    UnsignedTransaction,
)

logger = logging.getLogger(__name__)


class CodecType(str, Enum):
    """Transaction encoding family."""
    ETHEREUM_LEGACY = "ethereum_legacy"   # EIP-155 replay-protected legacy tx


class ChainTransactionCodec(ABC):
    """Narrow seam over a chain's signature primitive and wire encoding."""

    def __init__(self, codec_type: CodecType):
        self.codec_type = codec_type

    @abstractmethod
    def sign(self, unsigned: UnsignedTransaction, key: SigningKey, chain_id: int) -> TransactionSignature:
        """Sign an unsigned transaction for ``chain_id``.

        Args:
            unsigned: Transaction to sign
            key: Signing capability
            chain_id: Replay-protection domain

        Returns:
            TransactionSignature with v, r, s
        """
        pass

    @abstractmethod
    def encode(self, signed: SignedTransaction) -> bytes:
        """Encode a signed transaction to its canonical wire bytes."""
        pass

    @abstractmethod
    def decode(self, raw: bytes) -> SignedTransaction:
        """Decode canonical wire bytes back into a SignedTransaction."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.codec_type.value})"
