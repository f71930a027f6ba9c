"""Ethereum legacy transaction codec.

Signs with eth_account using EIP-155 replay protection and encodes as the
RLP list ``[nonce, gasPrice, gas, to, value, data, v, r, s]``, which is the
canonical form nodes accept via ``eth_sendRawTransaction``.
"""

import logging

import rlp
from rlp.exceptions import DecodingError
from eth_account import Account
from eth_utils import big_endian_to_int

from policysigner.keys import SigningKey
from policysigner.signing.base import ChainTransactionCodec, CodecType
from policysigner.transaction.models import (
    SignedTransaction,
    TransactionSignature,
    UnsignedTransaction,
)

logger = logging.getLogger(__name__)

# EIP-155: v = chain_id * 2 + 35 + recovery_id
EIP155_V_OFFSET = 35


def chain_id_from_v(v: int) -> int:
    """Recover the chain ID encoded in an EIP-155 ``v`` value."""
    if v < EIP155_V_OFFSET:
        raise ValueError(f"v={v} is not EIP-155 replay protected")
    return (v - EIP155_V_OFFSET) // 2


class EthereumCodec(ChainTransactionCodec):
    """EIP-155 legacy transaction codec backed by eth_account and rlp."""

    def __init__(self):
        super().__init__(CodecType.ETHEREUM_LEGACY)

    def sign(self, unsigned: UnsignedTransaction, key: SigningKey, chain_id: int) -> TransactionSignature:
        """Sign with the key's LocalAccount."""
        signed = key.account.sign_transaction(unsigned.to_dict(chain_id))

        signature = TransactionSignature(v=signed.v, r=signed.r, s=signed.s)
        if chain_id_from_v(signature.v) != chain_id:
            raise ValueError("signature is not bound to the requested chain")

        logger.debug(f"Signed legacy tx nonce={unsigned.nonce} for chain {chain_id}")
        return signature

    def encode(self, signed: SignedTransaction) -> bytes:
        tx = signed.unsigned
        sig = signed.signature
        return rlp.encode([
            tx.nonce,
            tx.gas_price,
            tx.gas_limit,
            tx.to,
            tx.value,
            tx.data,
            sig.v,
            sig.r,
            sig.s,
        ])

    def decode(self, raw: bytes) -> SignedTransaction:
        """Decode raw bytes and recover the sender.

        Raises:
            ValueError: If the bytes are not a signed EIP-155 legacy transaction
        """
        if not raw:
            raise ValueError("empty transaction")
        try:
            fields = rlp.decode(bytes(raw))
        except DecodingError as e:
            raise ValueError(f"not a valid RLP transaction: {e}") from e

        if not isinstance(fields, list) or len(fields) != 9:
            raise ValueError("expected a 9-field legacy transaction")
        if any(not isinstance(item, bytes) for item in fields):
            raise ValueError("legacy transaction fields must be byte strings")

        nonce, gas_price, gas_limit, to, value, data, v, r, s = fields
        if len(to) != 20:
            raise ValueError("contract creation and short recipients are not supported")

        signature = TransactionSignature(
            v=big_endian_to_int(v),
            r=big_endian_to_int(r),
            s=big_endian_to_int(s),
        )
        unsigned = UnsignedTransaction(
            nonce=big_endian_to_int(nonce),
            to=to,
            value=big_endian_to_int(value),
            gas_limit=big_endian_to_int(gas_limit),
            gas_price=big_endian_to_int(gas_price),
            data=data,
        )

        chain_id = chain_id_from_v(signature.v)
        try:
            sender = Account.recover_transaction(bytes(raw))
        except Exception as e:
            raise ValueError(f"cannot recover sender: {e}") from e

        return SignedTransaction(
            unsigned=unsigned,
            signature=signature,
            chain_id=chain_id,
            sender=sender,
        )
