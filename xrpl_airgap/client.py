"""
XRPL client protocol: the network boundary.

Defines the interface that the offline workflow depends on, not a
concrete implementation. This keeps gather/submit/verify testable and
keeps ``httpx`` out of orchestration logic.

Concrete implementations:
    - JsonRpcClient (jsonrpc_client.py)
    - FakeClient (tests)

The protocol has four methods, one per JSON-RPC call the demo makes:
    - submit(signed_tx_blob_hex) → SubmitResult
    - get_tx(tx_hash) → TxRecord
    - get_validated_ledger() → LedgerSnapshot
    - get_account_info(account) → AccountInfo

All results are frozen dataclasses built once at the transport boundary.
Callers never index into raw JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Native XRP amounts are drops strings; issued currencies are
# {"currency": ..., "issuer": ..., "value": ...} mappings.
Amount = str | dict[str, str]


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class SubmitResult:
    """Result of relaying a signed transaction blob to the XRPL.

    Attributes:
        accepted: Whether the server accepted the transaction for processing.
            True does NOT mean validated: just that it entered the queue.
        tx_hash: Transaction hash (64 hex chars). Present if the node
            computed one, even on rejection.
        engine_result: XRPL engine result code (e.g. "tesSUCCESS",
            "tefMAX_LEDGER"). None if the server errored before the engine ran.
        error: Server-level error token (e.g. "invalidParams") when the
            request itself was refused.
        detail: Human-readable detail for diagnostics.
    """

    accepted: bool
    tx_hash: str | None = None
    engine_result: str | None = None
    error: str | None = None
    detail: str | None = None


@dataclass(frozen=True)
class TxRecord:
    """A transaction as recorded by the ledger.

    Attributes:
        found: Whether the server knows the hash at all.
        validated: Whether the transaction is in a validated ledger.
        tx_hash: Hash echoed back by the server.
        ledger_index: Ledger the tx was included in (validated only).
        engine_result: Final engine result from the transaction metadata.
        transaction_type: e.g. "Payment", "TrustSet".
        account: Sending r-address.
        destination: Receiving r-address (Payments only).
        amount: Drops string or issued-currency mapping (Payments only).
    """

    found: bool
    validated: bool = False
    tx_hash: str | None = None
    ledger_index: int | None = None
    engine_result: str | None = None
    transaction_type: str | None = None
    account: str | None = None
    destination: str | None = None
    amount: Amount | None = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """The latest validated ledger at query time."""

    ledger_index: int
    close_time_iso: str | None = None


@dataclass(frozen=True)
class AccountInfo:
    """Account root fields needed to build a transaction."""

    account: str
    sequence: int
    balance_drops: str | None = None


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class XRPLClient(Protocol):
    """Interface for XRPL network operations.

    Implementations raise ``ConnectivityError`` when the endpoint cannot
    be reached, and ``NotFoundError`` for unknown accounts. Ledger-level
    outcomes (engine results, txnNotFound) are reported in the results.
    """

    async def submit(self, signed_tx_blob_hex: str) -> SubmitResult:
        """Relay a signed transaction blob."""
        ...

    async def get_tx(self, tx_hash: str) -> TxRecord:
        """Look up a transaction by hash."""
        ...

    async def get_validated_ledger(self) -> LedgerSnapshot:
        """Return the latest validated ledger index."""
        ...

    async def get_account_info(self, account: str) -> AccountInfo:
        """Return the account's next sequence number as of the validated ledger."""
        ...
