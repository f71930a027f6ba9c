"""Transaction records passed between the builder, codec and serializer."""

from dataclasses import dataclass, field

from eth_utils import to_checksum_address


@dataclass(frozen=True)
class UnsignedTransaction:
    """A legacy value transfer, before signing.

    Attributes:
        nonce: Sender account nonce
        to: Recipient as 20 raw address bytes
        value: Amount in wei
        gas_limit: Gas limit (21000 for a plain transfer)
        gas_price: Gas price in wei
        data: Call data, always empty for value transfers
    """
    nonce: int
    to: bytes
    value: int
    gas_limit: int
    gas_price: int
    data: bytes = b""

    @property
    def to_checksum(self) -> str:
        return to_checksum_address(self.to)

    def to_dict(self, chain_id: int) -> dict:
        """Transaction dict in the shape eth_account expects."""
        return {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
            "to": self.to_checksum,
            "value": self.value,
            "data": "0x" + self.data.hex(),
            "chainId": chain_id,
        }


@dataclass(frozen=True)
class TransactionSignature:
    """ECDSA signature components. ``v`` is EIP-155 encoded."""
    v: int
    r: int
    s: int


@dataclass(frozen=True)
class SignedTransaction:
    """An unsigned transaction plus its chain-bound signature."""
    unsigned: UnsignedTransaction
    signature: TransactionSignature
    chain_id: int
    sender: str = field(default="", compare=False)
