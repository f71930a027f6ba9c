"""Builds unsigned value-transfer transactions.

Only native value is moved, never contract calls, so gas parameters are
fixed rather than estimated.
"""

from policysigner.transaction.models import UnsignedTransaction

# Intrinsic gas of a plain value transfer
GAS_LIMIT = 21000

# 1 gwei
GAS_PRICE_WEI = 1_000_000_000


def build_unsigned(nonce: int, recipient: bytes, amount: int, chain_id: int) -> UnsignedTransaction:
    """Assemble an unsigned transfer.

    Args:
        nonce: Account nonce (>= 0)
        recipient: 20-byte recipient address
        amount: Value in wei (>= 0)
        chain_id: Target chain; bound later by the signature

    Returns:
        UnsignedTransaction with fixed gas parameters and empty data
    """
    if nonce < 0 or amount < 0:
        raise ValueError("nonce and amount must be non-negative")
    if chain_id <= 0:
        raise ValueError(f"chain_id must be positive, got {chain_id}")
    if len(recipient) != 20:
        raise ValueError("recipient must be 20 bytes")

    return UnsignedTransaction(
        nonce=nonce,
        to=bytes(recipient),
        value=amount,
        gas_limit=GAS_LIMIT,
        gas_price=GAS_PRICE_WEI,
        data=b"",
    )
