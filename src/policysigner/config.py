"""Application configuration using pydantic-settings.

Settings are built once at process start with load_settings() and handed to
the pipeline explicitly. There is no cached module-level instance.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Signer settings loaded from SIGNER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ======================
    # Chain
    # ======================
    chain_id: int = Field(default=1, gt=0, description="EIP-155 chain ID (1 = Ethereum mainnet)")

    # ======================
    # Policy
    # ======================
    policy_file: str = Field(default="policy.json", description="Path to policy JSON file")

    # ======================
    # Key
    # ======================
    private_key: Optional[SecretStr] = Field(
        default=None, description="Hex private key, used when --key is not given"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def has_private_key(self) -> bool:
        return bool(self.private_key and self.private_key.get_secret_value().strip())

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "chain_id": self.chain_id,
            "policy_file": self.policy_file,
            "private_key": "***" if self.has_private_key else "(not set)",
        }


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, applying explicit overrides.

    Overrides whose value is None are ignored so unset CLI flags fall back
    to the environment.
    """
    return Settings(**{name: value for name, value in overrides.items() if value is not None})
