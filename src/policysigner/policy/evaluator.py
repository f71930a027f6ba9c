"""Policy evaluation.

Checks run in a fixed order:
1. Recipient must be whitelisted
2. Amount must not exceed ``max_amount_wei`` (inclusive limit)

The whitelist is checked first so an unauthorized recipient never learns
anything about the amount limit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from policysigner.errors import InvalidAmount
from policysigner.inputs import normalize_address, parse_recipient
from policysigner.policy.models import Policy


class DenyReason(str, Enum):
    """Why a transfer was denied."""
    RECIPIENT_NOT_WHITELISTED = "recipient not in whitelist"
    AMOUNT_EXCEEDS_LIMIT = "amount exceeds max policy limit"


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy evaluation."""
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason.value)


def evaluate(policy: Policy, recipient: Union[bytes, str], amount: int) -> Decision:
    """Decide whether ``policy`` permits sending ``amount`` wei to ``recipient``.

    Args:
        policy: Parsed policy
        recipient: 20-byte address, or a hex address string
        amount: Transfer amount in wei

    Returns:
        Decision.allow() or Decision.deny(reason)

    Raises:
        InvalidRecipient: If a string recipient is not a valid address
        InvalidAmount: If amount is negative or not an integer
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(f"amount must be a non-negative integer, got {amount!r}")

    recipient_hex = normalize_address(parse_recipient(recipient))

    if not policy.allows_recipient(recipient_hex):
        return Decision.deny(DenyReason.RECIPIENT_NOT_WHITELISTED)

    if amount > policy.max_amount_wei:
        return Decision.deny(DenyReason.AMOUNT_EXCEEDS_LIMIT)

    return Decision.allow()
