"""
Ledger-side verification of transfers.

Compares a validated transaction record against what was signed:
TransactionType, Account, Destination and Amount. Issued-currency
amounts must match on currency code, issuer and value exactly: the
value is compared as a string, so "100" and "100.0" differ.

Three entry points:
    - ``compare_transfer()``: pure. Returns the list of mismatches.
    - ``verify()``: impure. Fetches the record, returns True/False.
    - ``require_verified()``: like verify() but raises on mismatch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from xrpl_airgap.client import Amount, TxRecord, XRPLClient
from xrpl_airgap.errors import NotFoundError, VerificationMismatchError
from xrpl_airgap.tx import describe_amount

LOGGER = logging.getLogger(__name__)

_SUCCESS = "tesSUCCESS"


@dataclass(frozen=True)
class ExpectedTransfer:
    """The fields a Payment is expected to carry on the ledger."""

    account: str
    destination: str
    amount: Amount

    @property
    def is_native(self) -> bool:
        return isinstance(self.amount, str)


@dataclass(frozen=True)
class FieldMismatch:
    field: str
    expected: object
    actual: object

    def __str__(self) -> str:
        return f"{self.field}: expected {self.expected!r}, got {self.actual!r}"


def compare_transfer(record: TxRecord, expected: ExpectedTransfer) -> list[FieldMismatch]:
    """Field-by-field comparison of a ledger record with the expected transfer."""
    mismatches: list[FieldMismatch] = []

    def check(name: str, want: object, got: object) -> None:
        if want != got:
            mismatches.append(FieldMismatch(name, want, got))

    check("TransactionResult", _SUCCESS, record.engine_result)
    check("TransactionType", "Payment", record.transaction_type)
    check("Account", expected.account, record.account)
    check("Destination", expected.destination, record.destination)

    wanted = expected.amount
    actual = record.amount
    if isinstance(wanted, str):
        if not isinstance(actual, str):
            mismatches.append(FieldMismatch("Amount", wanted, actual))
        else:
            check("Amount", wanted, actual)
    elif not isinstance(actual, dict):
        mismatches.append(FieldMismatch("Amount", wanted, actual))
    else:
        for key in ("currency", "issuer", "value"):
            check(f"Amount.{key}", wanted[key], actual.get(key))

    return mismatches


async def _fetch_validated(
    client: XRPLClient,
    tx_hash: str,
    attempts: int,
    interval: float,
) -> TxRecord:
    record = TxRecord(found=False)
    for attempt in range(1, max(attempts, 1) + 1):
        record = await client.get_tx(tx_hash)
        if record.found and record.validated:
            return record
        LOGGER.debug(
            "transaction not validated yet (attempt %d/%d)",
            attempt,
            attempts,
            extra={"tx_hash": tx_hash, "found": record.found},
        )
        if attempt < attempts:
            await asyncio.sleep(interval)

    if not record.found:
        raise NotFoundError(f"transaction {tx_hash} not found")
    raise NotFoundError(f"transaction {tx_hash} not validated after {attempts} attempt(s)")


async def verify(
    client: XRPLClient,
    tx_hash: str,
    expected: ExpectedTransfer,
    *,
    attempts: int = 1,
    interval: float = 0.0,
) -> bool:
    """Check a validated ledger record against the expected transfer.

    Args:
        client: Connection to query.
        tx_hash: Hash returned by the submitter.
        expected: Account, destination and amount that were signed.
        attempts: How many times to query while the tx is not yet validated.
        interval: Seconds between attempts.

    Returns:
        True if every field matches, False otherwise.

    Raises:
        NotFoundError: The hash is unknown or never became validated.
        ConnectivityError: The endpoint is unreachable.
    """
    record = await _fetch_validated(client, tx_hash, attempts, interval)
    mismatches = compare_transfer(record, expected)

    for mismatch in mismatches:
        LOGGER.warning("verification mismatch: %s", mismatch, extra={"tx_hash": tx_hash})
    if mismatches:
        return False

    LOGGER.info(
        "verified %s -> %s, %s in ledger %s",
        expected.account,
        expected.destination,
        describe_amount(expected.amount),
        record.ledger_index,
        extra={"tx_hash": tx_hash},
    )
    return True


async def require_verified(
    client: XRPLClient,
    tx_hash: str,
    expected: ExpectedTransfer,
    *,
    attempts: int = 1,
    interval: float = 0.0,
) -> TxRecord:
    """Like ``verify`` but raises VerificationMismatchError on any mismatch."""
    record = await _fetch_validated(client, tx_hash, attempts, interval)
    mismatches = compare_transfer(record, expected)
    if mismatches:
        raise VerificationMismatchError(
            f"transaction {tx_hash} does not match: "
            + "; ".join(str(m) for m in mismatches),
            mismatches,
        )
    LOGGER.info(
        "verified %s in ledger %s",
        describe_amount(expected.amount),
        record.ledger_index,
        extra={"tx_hash": tx_hash},
    )
    return record
