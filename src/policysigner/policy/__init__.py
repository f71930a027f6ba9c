"""Transfer authorization policy.

- Policy: whitelist + max amount rule set
- evaluate(): pure allow/deny decision
"""

from policysigner.policy.evaluator import Decision, DenyReason, evaluate
from policysigner.policy.models import Policy, load_policy, parse_policy, read_policy_bytes

__all__ = [
    "Decision",
    "DenyReason",
    "Policy",
    "evaluate",
    "load_policy",
    "parse_policy",
    "read_policy_bytes",
]
