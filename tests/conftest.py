"""Pytest configuration and fixtures."""

import json
import os

import pytest
from eth_account import Account

# Keep the developer's environment out of settings
for _name in list(os.environ):
    if _name.startswith("SIGNER_"):
        del os.environ[_name]
os.environ["SIGNER_ENVIRONMENT"] = "test"

from policysigner.config import Settings
from policysigner.pipeline import SigningPipeline

# Well-known throwaway key from the eth-account documentation
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

WHITELISTED = "0xAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA1"
WHITELISTED_LOWER = WHITELISTED.lower()
STRANGER = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb2"
MAX_AMOUNT = 1000


@pytest.fixture
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def signer_address() -> str:
    return Account.from_key(TEST_PRIVATE_KEY).address


@pytest.fixture
def policy_dict() -> dict:
    return {"max_amount_wei": MAX_AMOUNT, "whitelist": [WHITELISTED]}


@pytest.fixture
def policy_bytes(policy_dict) -> bytes:
    return json.dumps(policy_dict).encode()


@pytest.fixture
def policy_file(tmp_path, policy_bytes):
    path = tmp_path / "policy.json"
    path.write_bytes(policy_bytes)
    return path


@pytest.fixture
def settings(policy_file) -> Settings:
    return Settings(chain_id=1, policy_file=str(policy_file))


@pytest.fixture
def pipeline(settings) -> SigningPipeline:
    return SigningPipeline(settings)
