from policysigner.transaction.builder import GAS_LIMIT, GAS_PRICE_WEI, build_unsigned
from policysigner.transaction.models import (
    SignedTransaction,
    TransactionSignature,
    UnsignedTransaction,
)

__all__ = [
    "GAS_LIMIT",
    "GAS_PRICE_WEI",
    "SignedTransaction",
    "TransactionSignature",
    "UnsignedTransaction",
    "build_unsigned",
]
