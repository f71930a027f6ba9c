"""Policy data model and its parsing contract.

A policy is a JSON document such as::

    {
        "max_amount_wei": 1000000000000000000,
        "whitelist": ["0x8ba1f109551bD432803012645Ac136ddd64DBA72"]
    }

``max_amount_wei`` is required and must be a non-negative JSON integer.
``whitelist`` may be empty or absent, which denies every transfer.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from eth_utils import is_hex_address
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from policysigner.errors import PolicyLoadError
from policysigner.inputs import normalize_address

logger = logging.getLogger(__name__)


class Policy(BaseModel):
    """Authorization rules for outgoing transfers. Immutable once parsed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    max_amount_wei: int = Field(..., ge=0, strict=True, description="Inclusive per-transfer limit in wei")
    whitelist: tuple[StrictStr, ...] = Field(
        default=(), description="Allowed recipients, normalized to lowercase 0x hex"
    )

    @field_validator("whitelist", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("whitelist")
    @classmethod
    def _normalize_entries(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        entries = []
        for entry in value:
            entry = entry.strip()
            if not is_hex_address(entry):
                raise ValueError(f"not a 20-byte hex address: {entry[:50]!r}")
            entries.append(normalize_address(entry))
        return tuple(entries)

    def allows_recipient(self, recipient_hex: str) -> bool:
        """Check a normalized recipient against the whitelist."""
        return any(entry == recipient_hex for entry in self.whitelist)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "policy"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_policy(data: Union[bytes, str, Mapping]) -> Policy:
    """Parse a policy from raw JSON bytes/text or an already decoded mapping.

    Raises:
        PolicyLoadError: On malformed JSON, a missing or negative
            ``max_amount_wei``, or a malformed whitelist. The underlying
            error is chained as ``__cause__``.
    """
    try:
        if isinstance(data, Mapping):
            policy = Policy.model_validate(dict(data))
        elif isinstance(data, (bytes, bytearray, str)):
            policy = Policy.model_validate_json(data)
        else:
            raise TypeError(f"unsupported policy source type: {type(data).__name__}")
    except ValidationError as e:
        raise PolicyLoadError(f"invalid policy: {_describe(e)}") from e
    except TypeError as e:
        raise PolicyLoadError(f"invalid policy: {e}") from e

    logger.debug(
        "Loaded policy: %d whitelist entries, max_amount_wei=%d",
        len(policy.whitelist),
        policy.max_amount_wei,
    )
    return policy


def read_policy_bytes(path: Union[str, Path]) -> bytes:
    """Read a policy file from disk."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise PolicyLoadError(f"cannot read policy file {path}: {e.strerror or e}") from e


def load_policy(path: Union[str, Path]) -> Policy:
    """Read and parse a policy JSON file."""
    return parse_policy(read_policy_bytes(path))
