"""Policy-gated signing pipeline.

Stages run strictly in order, once, with no retries:

    START -> KEY_LOADED -> POLICY_LOADED -> POLICY_APPROVED -> TX_BUILT
          -> TX_SIGNED -> SERIALIZED -> DONE

The first failure aborts the run. The raised SignerError carries the stage
whose transition failed, and nothing is returned. The signing key is never
handed to the codec before the policy has approved the transfer.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from policysigner.config import Settings
from policysigner.errors import (
    PolicyLoadError,
    PolicyViolation,
    SerializationError,
    SignerError,
    SigningError,
)
from policysigner.inputs import parse_transfer
from policysigner.keys import load_signing_key
from policysigner.policy import evaluate, parse_policy, read_policy_bytes
from policysigner.serialization import serialize, to_display_hex, transaction_hash
from policysigner.signing.base import ChainTransactionCodec
from policysigner.signing.ethereum import EthereumCodec
from policysigner.transaction import SignedTransaction, build_unsigned

logger = logging.getLogger(__name__)

PolicySource = Callable[[], Union[bytes, str, Mapping]]


class PipelineStage(str, Enum):
    """States of a signing run."""
    START = "start"
    KEY_LOADED = "key_loaded"
    POLICY_LOADED = "policy_loaded"
    POLICY_APPROVED = "policy_approved"
    TX_BUILT = "tx_built"
    TX_SIGNED = "tx_signed"
    SERIALIZED = "serialized"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class SignRequest:
    """Raw operator input for one transfer."""
    private_key: str = field(repr=False)
    recipient: str
    amount: Union[int, str]
    nonce: Union[int, str] = 0


@dataclass(frozen=True)
class SigningResult:
    """Output of a completed run."""
    signed: SignedTransaction
    raw: bytes
    tx_hash: str
    stages: tuple[PipelineStage, ...]

    @property
    def hex(self) -> str:
        return to_display_hex(self.raw)

    @property
    def sender(self) -> str:
        return self.signed.sender


def file_policy_source(path: Union[str, Path]) -> PolicySource:
    """Policy source that reads ``path`` on each call."""
    return lambda: read_policy_bytes(path)


class SigningPipeline:
    """Runs load-key, load-policy, evaluate, build, sign, serialize.

    Holds configuration only, so one instance may serve many runs.
    """

    def __init__(
        self,
        settings: Settings,
        codec: Optional[ChainTransactionCodec] = None,
        policy_source: Optional[PolicySource] = None,
    ):
        self.settings = settings
        self.codec = codec or EthereumCodec()
        self.policy_source = policy_source or file_policy_source(settings.policy_file)

    def run(self, request: SignRequest) -> SigningResult:
        """Execute one signing run.

        Returns:
            SigningResult with the signed transaction and its raw bytes

        Raises:
            SignerError: Subclass matching the failed stage, with ``stage`` set
        """
        stages = [PipelineStage.START]
        stage = PipelineStage.KEY_LOADED
        chain_id = self.settings.chain_id

        try:
            key = load_signing_key(request.private_key)
            stages.append(stage)
            logger.debug(f"Stage {stage.value}: signer {key.address}")

            stage = PipelineStage.POLICY_LOADED
            policy = self._load_policy()
            stages.append(stage)
            logger.debug(f"Stage {stage.value}: {len(policy.whitelist)} whitelist entries")

            stage = PipelineStage.POLICY_APPROVED
            transfer = parse_transfer(request.recipient, request.amount, request.nonce)
            decision = evaluate(policy, transfer.recipient, transfer.amount)
            if not decision.allowed:
                logger.info(
                    "Policy denied transfer of %d wei to %s: %s",
                    transfer.amount,
                    transfer.recipient_hex,
                    decision.reason,
                )
                raise PolicyViolation(decision.reason)
            stages.append(stage)
            logger.debug(f"Stage {stage.value}: {transfer.amount} wei to {transfer.recipient_hex}")

            stage = PipelineStage.TX_BUILT
            unsigned = build_unsigned(transfer.nonce, transfer.recipient, transfer.amount, chain_id)
            stages.append(stage)

            stage = PipelineStage.TX_SIGNED
            try:
                signature = self.codec.sign(unsigned, key, chain_id)
            except Exception as e:
                raise SigningError(f"failed to sign tx: {type(e).__name__}: {e}") from e
            signed = SignedTransaction(
                unsigned=unsigned,
                signature=signature,
                chain_id=chain_id,
                sender=key.address,
            )
            stages.append(stage)
            logger.debug(f"Stage {stage.value}: chain {chain_id}")

            stage = PipelineStage.SERIALIZED
            try:
                raw = bytes(serialize(signed, self.codec))
            except Exception as e:
                raise SerializationError(f"failed to serialize tx: {type(e).__name__}: {e}") from e
            stages.append(stage)

        except SignerError as e:
            e.stage = stage.value
            logger.info(f"Pipeline {PipelineStage.ABORTED.value} at {stage.value}: {e}")
            raise

        stages.append(PipelineStage.DONE)
        tx_hash = transaction_hash(raw)
        logger.info(f"Signed tx {tx_hash} from {key.address} on chain {chain_id}")

        return SigningResult(
            signed=signed,
            raw=raw,
            tx_hash=tx_hash,
            stages=tuple(stages),
        )

    def _load_policy(self):
        try:
            source = self.policy_source()
        except PolicyLoadError:
            raise
        except Exception as e:
            raise PolicyLoadError(f"cannot read policy: {type(e).__name__}: {e}") from e
        return parse_policy(source)
