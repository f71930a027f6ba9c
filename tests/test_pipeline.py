"""Tests for the signing pipeline."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from eth_account import Account

from policysigner.config import Settings
from policysigner.errors import (
    InvalidAmount,
    InvalidRecipient,
    KeyLoadError,
    PolicyLoadError,
    PolicyViolation,
    SerializationError,
    SigningError,
)
from policysigner.pipeline import PipelineStage, SignRequest, SigningPipeline
from policysigner.serialization import serialize
from policysigner.signing import EthereumCodec

from tests.conftest import MAX_AMOUNT, STRANGER, WHITELISTED, WHITELISTED_LOWER


@pytest.fixture
def spy_codec() -> MagicMock:
    """Codec double that records calls but delegates to the real codec."""
    return MagicMock(wraps=EthereumCodec())


def _request(private_key, recipient=WHITELISTED_LOWER, amount="1000", nonce=0) -> SignRequest:
    return SignRequest(private_key=private_key, recipient=recipient, amount=amount, nonce=nonce)


class TestEndToEnd:
    """The four reference scenarios."""

    def test_whitelisted_at_limit_is_signed(self, pipeline, private_key, signer_address):
        """Test a case-differing whitelisted recipient at the limit reaches DONE."""
        result = pipeline.run(_request(private_key, WHITELISTED_LOWER, str(MAX_AMOUNT)))

        assert result.stages[-1] == PipelineStage.DONE
        assert result.hex == result.hex.lower()
        assert bytes.fromhex(result.hex) == result.raw

        decoded = EthereumCodec().decode(result.raw)
        assert decoded.unsigned.value == MAX_AMOUNT
        assert decoded.unsigned.to == bytes.fromhex(WHITELISTED_LOWER[2:])
        assert decoded.unsigned.gas_limit == 21000
        assert decoded.unsigned.gas_price == 1_000_000_000
        assert decoded.chain_id == 1
        assert decoded.sender == signer_address
        assert Account.recover_transaction(result.raw) == signer_address
        assert result.sender == signer_address

    def test_unknown_recipient_is_denied(self, settings, policy_bytes, private_key, spy_codec):
        """Test a non-whitelisted recipient aborts at POLICY_APPROVED without signing."""
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        with pytest.raises(PolicyViolation) as exc_info:
            pipeline.run(_request(private_key, STRANGER, "1"))

        assert exc_info.value.reason == "recipient not in whitelist"
        assert exc_info.value.stage == PipelineStage.POLICY_APPROVED.value
        spy_codec.sign.assert_not_called()
        spy_codec.encode.assert_not_called()

    def test_over_limit_is_denied(self, settings, policy_bytes, private_key, spy_codec):
        """Test one wei over the limit aborts with the amount reason."""
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        with pytest.raises(PolicyViolation) as exc_info:
            pipeline.run(_request(private_key, WHITELISTED_LOWER, str(MAX_AMOUNT + 1)))

        assert exc_info.value.reason == "amount exceeds max policy limit"
        assert exc_info.value.stage == "policy_approved"
        spy_codec.sign.assert_not_called()

    def test_policy_without_max_amount_aborts(self, settings, private_key, spy_codec):
        """Test a malformed policy aborts at POLICY_LOADED before evaluation."""
        source = json.dumps({"whitelist": [WHITELISTED]}).encode()
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: source)

        with pytest.raises(PolicyLoadError) as exc_info:
            # amount is invalid too; policy loading must fail first
            pipeline.run(_request(private_key, WHITELISTED, "-5"))

        assert exc_info.value.stage == PipelineStage.POLICY_LOADED.value
        spy_codec.sign.assert_not_called()


class TestStageOrdering:
    """Tests for the stage sequence and abort points."""

    def test_full_trail(self, pipeline, private_key):
        """Test every stage is visited once, in order."""
        result = pipeline.run(_request(private_key, amount="1"))

        assert result.stages == (
            PipelineStage.START,
            PipelineStage.KEY_LOADED,
            PipelineStage.POLICY_LOADED,
            PipelineStage.POLICY_APPROVED,
            PipelineStage.TX_BUILT,
            PipelineStage.TX_SIGNED,
            PipelineStage.SERIALIZED,
            PipelineStage.DONE,
        )

    def test_bad_key_aborts_before_policy(self, settings, private_key):
        """Test key loading comes first and the policy is never read."""
        source = MagicMock(return_value=b"{}")
        pipeline = SigningPipeline(settings, policy_source=source)

        with pytest.raises(KeyLoadError) as exc_info:
            pipeline.run(_request("0xdeadbeef"))

        assert exc_info.value.stage == "key_loaded"
        source.assert_not_called()

    def test_missing_policy_file(self, tmp_path, private_key):
        """Test an unreadable policy file aborts at POLICY_LOADED."""
        settings = Settings(policy_file=str(tmp_path / "missing.json"))

        with pytest.raises(PolicyLoadError) as exc_info:
            SigningPipeline(settings).run(_request(private_key))

        assert exc_info.value.stage == "policy_loaded"

    def test_policy_source_errors_are_wrapped(self, settings, private_key):
        """Test arbitrary source failures become PolicyLoadError."""
        def broken():
            raise ConnectionError("policy service down")

        with pytest.raises(PolicyLoadError) as exc_info:
            SigningPipeline(settings, policy_source=broken).run(_request(private_key))

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_accepts_mapping_source(self, settings, private_key):
        """Test a pre-parsed policy structure is accepted."""
        pipeline = SigningPipeline(
            settings,
            policy_source=lambda: {"max_amount_wei": 5, "whitelist": [WHITELISTED]},
        )

        assert pipeline.run(_request(private_key, amount="5")).signed.unsigned.value == 5

    @pytest.mark.parametrize("amount", ["-1", "1.0", "ten", ""])
    def test_invalid_amount_never_evaluated(self, settings, policy_bytes, private_key, spy_codec, amount):
        """Test unparsable amounts abort before evaluation."""
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        with pytest.raises(InvalidAmount) as exc_info:
            pipeline.run(_request(private_key, amount=amount))

        assert exc_info.value.stage == "policy_approved"
        spy_codec.sign.assert_not_called()

    def test_invalid_recipient(self, pipeline, private_key):
        with pytest.raises(InvalidRecipient):
            pipeline.run(_request(private_key, recipient="0xnope"))

    def test_signing_failure(self, settings, policy_bytes, private_key):
        """Test codec sign errors abort at TX_SIGNED and nothing is encoded."""
        codec = MagicMock()
        codec.sign.side_effect = RuntimeError("curve failure")
        pipeline = SigningPipeline(settings, codec=codec, policy_source=lambda: policy_bytes)

        with pytest.raises(SigningError) as exc_info:
            pipeline.run(_request(private_key))

        assert exc_info.value.stage == "tx_signed"
        assert "curve failure" in str(exc_info.value)
        codec.sign.assert_called_once()
        codec.encode.assert_not_called()

    def test_serialization_failure(self, settings, policy_bytes, private_key):
        """Test codec encode errors abort at SERIALIZED."""
        codec = MagicMock(wraps=EthereumCodec())
        codec.encode.side_effect = ValueError("bad encoding")
        pipeline = SigningPipeline(settings, codec=codec, policy_source=lambda: policy_bytes)

        with pytest.raises(SerializationError) as exc_info:
            pipeline.run(_request(private_key))

        assert exc_info.value.stage == "serialized"

    def test_sign_called_once_with_chain(self, tmp_path, policy_bytes, private_key, spy_codec):
        """Test the configured chain ID is passed to the codec exactly once."""
        settings = Settings(chain_id=137, policy_file=str(tmp_path / "unused.json"))
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        result = pipeline.run(_request(private_key, nonce=4))

        spy_codec.sign.assert_called_once()
        assert spy_codec.sign.call_args.args[2] == 137
        assert result.signed.chain_id == 137
        assert result.signed.unsigned.nonce == 4

    def test_oversized_amount_is_invalid_request(self, settings, policy_bytes, private_key, spy_codec):
        """Test an amount too long to convert aborts like any other bad amount."""
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        with pytest.raises(InvalidAmount) as exc_info:
            pipeline.run(_request(private_key, amount="9" * 5000))

        assert exc_info.value.stage == "policy_approved"
        spy_codec.sign.assert_not_called()

    def test_zero_padded_nonce_is_signed(self, pipeline, private_key):
        """Test a nonce padded past the int() digit limit still signs."""
        result = pipeline.run(_request(private_key, nonce="0" * 5000 + "3"))

        assert result.signed.unsigned.nonce == 3

    def test_serializes_through_serialize_with_pipeline_codec(self, settings, policy_bytes, private_key, spy_codec):
        """Test the raw bytes come from serialize() using the configured codec."""
        pipeline = SigningPipeline(settings, codec=spy_codec, policy_source=lambda: policy_bytes)

        with patch("policysigner.pipeline.serialize", wraps=serialize) as serialize_spy:
            result = pipeline.run(_request(private_key))

        serialize_spy.assert_called_once_with(result.signed, spy_codec)
        spy_codec.encode.assert_called_once_with(result.signed)
        assert result.raw == serialize(result.signed)

    def test_denial_logs_nothing_at_warning(self, settings, policy_bytes, private_key, caplog):
        """Test an aborted run leaves reporting to the caller."""
        pipeline = SigningPipeline(settings, policy_source=lambda: policy_bytes)

        with caplog.at_level(logging.DEBUG, logger="policysigner"):
            with pytest.raises(PolicyViolation):
                pipeline.run(_request(private_key, recipient=STRANGER))

        assert caplog.records
        assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []


class TestPipelineReuse:
    """Tests that runs do not share state."""

    def test_runs_are_independent(self, pipeline, private_key):
        """Test a denied run does not affect a later allowed run."""
        with pytest.raises(PolicyViolation):
            pipeline.run(_request(private_key, STRANGER))

        first = pipeline.run(_request(private_key, amount="7"))
        second = pipeline.run(_request(private_key, amount="7"))

        assert first.raw == second.raw
        assert first.tx_hash == second.tx_hash

    def test_request_repr_hides_key(self, private_key):
        assert private_key not in repr(_request(private_key))
