"""
XRPL signer protocol: the secrets boundary.

Defines the interface the offline workflow uses to sign transactions.
The workflow never sees private keys directly: it passes a complete
transaction dict, and the signer returns a signed blob.

Output format: signed transaction blob as hex string. The submitter
relays the blob without parsing more than its expiration bound.

Concrete implementations:
    - WalletSigner (xrpl-py Wallet derived from a seed)

Signing is synchronous and performs no I/O. There is no
autofill path: a transaction without Sequence, Fee or LastLedgerSequence
is rejected instead of being completed from the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from xrpl.core.addresscodec import XRPLAddressCodecException
from xrpl.core.binarycodec import XRPLBinaryCodecException
from xrpl.core.keypairs import XRPLKeypairsException
from xrpl.models.exceptions import XRPLModelException
from xrpl.models.transactions.transaction import Transaction
from xrpl.transaction import sign
from xrpl.wallet import Wallet

from xrpl_airgap.errors import ConfigurationError, EncodingError
from xrpl_airgap.tx import require_signing_fields

_XRPL_ENCODING_ERRORS = (
    XRPLModelException,
    XRPLBinaryCodecException,
    XRPLAddressCodecException,
    XRPLKeypairsException,
)


@dataclass(frozen=True)
class SignResult:
    """Result of signing a transaction.

    Attributes:
        signed_tx_blob_hex: Hex-encoded signed transaction blob,
            ready for submission via XRPLClient.submit().
        tx_hash: Transaction hash computed during signing (64 hex chars).
        key_id: Public identifier of the signing key used.
            Safe for logging. Never a secret.
    """

    signed_tx_blob_hex: str
    tx_hash: str
    key_id: str

    def preview(self, length: int = 64) -> str:
        """Leading characters of the blob, for log lines."""
        return self.signed_tx_blob_hex[:length]


@runtime_checkable
class XRPLSigner(Protocol):
    """Interface for XRPL transaction signing.

    Implementations manage key material internally. Callers never see
    private keys: only the signed blob and a public key identifier.
    """

    @property
    def account(self) -> str:
        """XRPL r-address associated with this signer."""
        ...

    @property
    def key_id(self) -> str:
        """Public identifier of the signing key (safe for logging)."""
        ...

    def sign(self, tx_dict: dict[str, object]) -> SignResult:
        """Sign a complete XRPL transaction dict.

        Raises:
            EncodingError: If the transaction dict is incomplete or malformed.
        """
        ...


class WalletSigner:
    """XRPLSigner backed by an xrpl-py Wallet."""

    def __init__(self, wallet: Wallet) -> None:
        self._wallet = wallet

    @classmethod
    def from_seed(cls, seed: str) -> WalletSigner:
        """Derive a signer from a family seed ("s...").

        Raises:
            ConfigurationError: If the seed cannot be decoded.
        """
        try:
            wallet = Wallet.from_seed(seed)
        except (XRPLAddressCodecException, XRPLKeypairsException, ValueError) as exc:
            raise ConfigurationError(f"seed cannot be decoded: {exc}") from exc
        return cls(wallet)

    @property
    def account(self) -> str:
        return self._wallet.classic_address

    @property
    def key_id(self) -> str:
        return self._wallet.public_key

    def sign(self, tx_dict: dict[str, object]) -> SignResult:
        require_signing_fields(tx_dict)
        if tx_dict["Account"] != self.account:
            raise EncodingError(
                f"transaction Account {tx_dict['Account']} does not match signer {self.account}"
            )

        try:
            transaction = Transaction.from_xrpl(dict(tx_dict))
            signed = sign(transaction, self._wallet)
            blob = signed.blob()
            tx_hash = signed.get_hash()
        except _XRPL_ENCODING_ERRORS as exc:
            raise EncodingError(f"cannot encode transaction: {exc}") from exc

        return SignResult(signed_tx_blob_hex=blob, tx_hash=tx_hash, key_id=self.key_id)

    def __repr__(self) -> str:
        return f"WalletSigner(account={self.account!r})"
