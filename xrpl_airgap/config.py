"""Environment-backed settings for :mod:`xrpl_airgap`."""

from __future__ import annotations

import logging

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xrpl_airgap.errors import ConfigurationError
from xrpl_airgap.signer import WalletSigner

__all__ = ["TESTNET_RPC_URL", "XRPLDemoSettings", "load_settings"]

TESTNET_RPC_URL = "https://s.altnet.rippletest.net:51234/"


class XRPLDemoSettings(BaseSettings):
    """Configuration read from the environment and an optional ``.env`` file.

    Attributes:
        user1_seed: Seed of the sender / token issuer.
        user2_seed: Seed of the receiver / trustline holder.
        rpc_url: JSON-RPC endpoint for connection A (gathering).
        relay_rpc_url: JSON-RPC endpoint for connection B (relay).
            Defaults to ``rpc_url``.
        timeout: Per-request transport timeout in seconds.
        settle_seconds: Pause between demo steps so transactions validate.
        verify_attempts: How many times the verifier polls for a
            validated record.
        log_level: Level for the ``xrpl_airgap`` logger.
    """

    user1_seed: SecretStr = Field(alias="USER1_SEED")
    user2_seed: SecretStr = Field(alias="USER2_SEED")
    rpc_url: str = Field(default=TESTNET_RPC_URL, alias="XRPL_RPC_URL")
    relay_rpc_url: str | None = Field(default=None, alias="XRPL_RELAY_RPC_URL")
    timeout: float = Field(default=30.0, gt=0, alias="XRPL_TIMEOUT")
    settle_seconds: float = Field(default=10.0, ge=0, alias="XRPL_SETTLE_SECONDS")
    verify_attempts: int = Field(default=5, ge=1, alias="XRPL_VERIFY_ATTEMPTS")
    log_level: str = Field(default="INFO", alias="XRPL_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("user1_seed", "user2_seed")
    @classmethod
    def _non_empty_seed(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("seed must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def effective_relay_url(self) -> str:
        return self.relay_rpc_url or self.rpc_url

    def signers(self) -> tuple[WalletSigner, WalletSigner]:
        """Derive both wallets. Pure key derivation, no network.

        Raises:
            ConfigurationError: If either seed cannot be decoded.
        """
        return (
            WalletSigner.from_seed(self.user1_seed.get_secret_value().strip()),
            WalletSigner.from_seed(self.user2_seed.get_secret_value().strip()),
        )


def load_settings(**overrides: object) -> XRPLDemoSettings:
    """Return validated settings.

    Raises:
        ConfigurationError: If USER1_SEED / USER2_SEED are missing or any
            value fails validation. Secrets are never echoed.
    """
    try:
        return XRPLDemoSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(f"invalid configuration ({problems})") from exc
