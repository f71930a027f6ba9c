"""Error taxonomy for the signing pipeline.

Every error is terminal. Each one records the pipeline stage it aborted at
and maps to a distinct process exit code. Messages must never contain
private key material.
"""

from typing import Optional


class SignerError(Exception):
    """Base class for all pipeline failures."""

    exit_code = 1
    label = "signer error"

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        self.stage = stage
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class KeyLoadError(SignerError):
    """Private key material is missing or malformed."""

    exit_code = 3
    label = "key error"


class PolicyLoadError(SignerError):
    """Policy source could not be read or parsed."""

    exit_code = 4
    label = "policy load error"


class PolicyViolation(SignerError):
    """The transfer was denied by policy.

    Attributes:
        reason: The specific denial reason (whitelist or amount limit)
    """

    exit_code = 5
    label = "policy violation"

    def __init__(self, reason: str, stage: Optional[str] = None):
        self.reason = reason
        super().__init__(reason, stage)


class SigningError(SignerError):
    """The signature primitive failed."""

    exit_code = 6
    label = "signing error"


class SerializationError(SignerError):
    """The signed transaction could not be encoded."""

    exit_code = 7
    label = "serialization error"


class InvalidRequest(SignerError):
    """Transfer request input failed validation."""

    exit_code = 8
    label = "invalid request"


class InvalidAmount(InvalidRequest):
    label = "invalid amount"


class InvalidRecipient(InvalidRequest):
    label = "invalid recipient"


class InvalidNonce(InvalidRequest):
    label = "invalid nonce"
