"""Transaction signing codecs.

- ChainTransactionCodec: sign/encode/decode seam
- EthereumCodec: EIP-155 legacy transactions via eth_account + rlp
"""

from policysigner.signing.base import ChainTransactionCodec, CodecType
from policysigner.signing.ethereum import EthereumCodec, chain_id_from_v

__all__ = [
    "ChainTransactionCodec",
    "CodecType",
    "EthereumCodec",
    "chain_id_from_v",
]
