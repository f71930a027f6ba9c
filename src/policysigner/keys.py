"""Private key loading.

Decodes hex key material into a SigningKey. The raw key is kept inside the
wrapped eth_account LocalAccount and is never exposed through repr, str or
error messages.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys

from policysigner.errors import KeyLoadError

logger = logging.getLogger(__name__)

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class SigningKey:
    """Opaque signing capability for one secp256k1 key."""

    def __init__(self, account: LocalAccount):
        self._account = account

    @property
    def address(self) -> str:
        """Checksummed sender address."""
        return self._account.address

    @property
    def public_key(self) -> str:
        """Uncompressed public key as 0x hex (64 bytes, no prefix byte)."""
        return keys.PrivateKey(bytes(self._account.key)).public_key.to_hex()

    @property
    def account(self) -> LocalAccount:
        return self._account

    def __repr__(self) -> str:
        return f"SigningKey(address={self.address})"


def load_signing_key(key_material: Optional[str]) -> SigningKey:
    """Decode hex private key material.

    Args:
        key_material: 32-byte key as hex, with or without ``0x``

    Raises:
        KeyLoadError: If the material is empty, not hex, the wrong length,
            or outside the curve order
    """
    if key_material is None or not key_material.strip():
        raise KeyLoadError("private key is required")

    hex_key = key_material.strip()
    if hex_key[:2].lower() == "0x":
        hex_key = hex_key[2:]

    try:
        raw = bytes.fromhex(hex_key)
    except ValueError:
        # from None: the offending text may be key material
        raise KeyLoadError("private key is not valid hex") from None

    if len(raw) != 32:
        raise KeyLoadError(f"private key must be 32 bytes, got {len(raw)}")

    if not 0 < int.from_bytes(raw, "big") < SECP256K1_N:
        raise KeyLoadError("private key is outside the secp256k1 range")

    try:
        account = Account.from_key(raw)
    except Exception as e:
        raise KeyLoadError(f"private key rejected: {type(e).__name__}") from None

    logger.debug(f"Loaded signing key for {account.address}")
    return SigningKey(account)
