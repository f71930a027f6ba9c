"""Policy-gated Ethereum transaction signer.

Checks a transfer against a whitelist/limit policy, then builds, signs and
serializes it. No signature is produced for a transfer the policy denies.
"""

from policysigner.errors import (
    InvalidAmount,
    InvalidNonce,
    InvalidRecipient,
    InvalidRequest,
    KeyLoadError,
    PolicyLoadError,
    PolicyViolation,
    SerializationError,
    SignerError,
    SigningError,
)
from policysigner.pipeline import PipelineStage, SignRequest, SigningPipeline, SigningResult

__version__ = "0.1.0"

__all__ = [
    "InvalidAmount",
    "InvalidNonce",
    "InvalidRecipient",
    "InvalidRequest",
    "KeyLoadError",
    "PipelineStage",
    "PolicyLoadError",
    "PolicyViolation",
    "SerializationError",
    "SignRequest",
    "SignerError",
    "SigningError",
    "SigningPipeline",
    "SigningResult",
]
