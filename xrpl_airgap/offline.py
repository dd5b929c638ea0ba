"""
Air-gapped signing workflow.

Composes the pure layer (tx.py) and the secrets boundary (signer.py)
with the network boundary (client.py) in three phases:

    - ``gather()``: impure, connection A. Ledger index + account sequence.
    - ``sign_offline()``: pure. No client argument, no I/O.
    - ``submit_blob()``: impure, connection B. Freshness check + relay.

Every signed instance carries ``LastLedgerSequence = ledger_index + 10``.
Once the validated ledger passes that bound the blob is dead: the
submitter raises ExpiredTransactionError and never retries. The only
recovery is a new gather → sign cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from xrpl.core.binarycodec import XRPLBinaryCodecException, decode

from xrpl_airgap.client import Amount, SubmitResult, XRPLClient
from xrpl_airgap.errors import (
    EncodingError,
    EngineOutcome,
    ExpiredTransactionError,
    SubmissionError,
    classify_engine_result,
)
from xrpl_airgap.lifecycle import OfflineTransaction, OfflineTxState
from xrpl_airgap.signer import SignResult, XRPLSigner
from xrpl_airgap.tx import (
    describe_amount,
    issued_amount,
    plan_payment,
    with_network_fields,
    xrp_amount,
)

LOGGER = logging.getLogger(__name__)

# A signed instance expires 10 ledgers (~50 seconds) after gathering.
EXPIRATION_LEDGERS = 10

# Reference transaction cost on testnet, in drops.
MINIMUM_FEE_DROPS = "12"

# Rough ledger close interval, only used for log messages.
SECONDS_PER_LEDGER = 5


# =========================================================================
# OfflineParams
# =========================================================================


@dataclass(frozen=True)
class OfflineParams:
    """Everything the air-gapped side needs besides the key.

    Attributes:
        sequence: Next sequence number of the sending account.
        fee: Transaction cost in drops.
        ledger_index: Validated ledger index when parameters were gathered.
        expiration_bound: Last ledger in which the tx may be included.
    """

    sequence: int
    fee: str
    ledger_index: int
    expiration_bound: int

    @classmethod
    def from_ledger(
        cls, sequence: int, ledger_index: int, fee: str = MINIMUM_FEE_DROPS
    ) -> OfflineParams:
        return cls(
            sequence=sequence,
            fee=fee,
            ledger_index=ledger_index,
            expiration_bound=ledger_index + EXPIRATION_LEDGERS,
        )

    def validate(self, current_ledger: int | None = None) -> None:
        """Check the parameters are safe to sign with.

        Args:
            current_ledger: If given, also reject parameters whose bound
                the ledger has already passed.

        Raises:
            EncodingError: Missing bound, malformed or too-low fee.
            ExpiredTransactionError: current_ledger is past the bound.
        """
        if self.expiration_bound <= 0:
            raise EncodingError("expiration bound (LastLedgerSequence) must be set")
        if self.expiration_bound <= self.ledger_index:
            raise EncodingError(
                f"expiration bound {self.expiration_bound} is not after "
                f"gathering ledger {self.ledger_index}"
            )
        fee = int(xrp_amount(self.fee))
        if fee < int(MINIMUM_FEE_DROPS):
            raise EncodingError(f"fee {fee} drops is below minimum {MINIMUM_FEE_DROPS}")

        if current_ledger is not None and current_ledger > self.expiration_bound:
            raise ExpiredTransactionError(
                f"parameters expired: ledger {current_ledger} > bound {self.expiration_bound}",
                current_ledger=current_ledger,
                expiration_bound=self.expiration_bound,
            )

    def remaining_ledgers(self, current_ledger: int) -> int:
        """Ledgers left before expiry. Negative once expired."""
        return self.expiration_bound - current_ledger


# =========================================================================
# gather(): impure
# =========================================================================


async def gather(
    client: XRPLClient,
    account: str,
    *,
    fee: str = MINIMUM_FEE_DROPS,
) -> OfflineParams:
    """Collect the network state an offline signer needs.

    Raises:
        ConnectivityError: If either query cannot complete.
        NotFoundError: If the account does not exist.
    """
    snapshot = await client.get_validated_ledger()
    info = await client.get_account_info(account)

    params = OfflineParams.from_ledger(info.sequence, snapshot.ledger_index, fee)
    params.validate(current_ledger=snapshot.ledger_index)

    LOGGER.info(
        "gathered offline parameters: sequence=%d fee=%s ledger=%d expires_at=%d (~%ds)",
        params.sequence,
        params.fee,
        params.ledger_index,
        params.expiration_bound,
        EXPIRATION_LEDGERS * SECONDS_PER_LEDGER,
        extra={"account": account},
    )
    return params


# =========================================================================
# sign_offline(): pure
# =========================================================================


def sign_offline(
    signer: XRPLSigner,
    destination: str,
    amount: Amount,
    params: OfflineParams,
) -> SignResult:
    """Build and sign a Payment using only pre-gathered parameters.

    Takes no client: nothing in here can reach the network.

    Raises:
        EncodingError: If any field is missing or malformed.
    """
    params.validate()

    tx = with_network_fields(
        plan_payment(signer.account, destination, amount),
        sequence=params.sequence,
        fee=params.fee,
        last_ledger_sequence=params.expiration_bound,
    )
    result = signer.sign(tx)

    LOGGER.info(
        "signed offline: %s -> %s, %s, expires at ledger %d",
        signer.account,
        destination,
        describe_amount(amount),
        params.expiration_bound,
        extra={"tx_hash": result.tx_hash, "blob_preview": result.preview()},
    )
    return result


def read_expiration_bound(signed_blob: str) -> int:
    """Decode a signed blob and return its LastLedgerSequence.

    Raises:
        EncodingError: If the blob cannot be decoded or carries no bound.
    """
    try:
        fields = decode(signed_blob)
    except (XRPLBinaryCodecException, ValueError, IndexError, KeyError) as exc:
        raise EncodingError(f"signed blob cannot be decoded: {exc}") from exc

    bound = fields.get("LastLedgerSequence")
    if bound is None:
        raise EncodingError("signed blob carries no LastLedgerSequence")
    return int(bound)


# =========================================================================
# submit_blob(): impure
# =========================================================================


async def submit_blob(client: XRPLClient, signed_blob: str) -> SubmitResult:
    """Relay a signed blob, at most once.

    Checks the blob's expiration bound against the relay connection's
    view of the validated ledger first; a stale blob is never sent.

    Raises:
        EncodingError: The blob is undecodable or has no bound.
        ExpiredTransactionError: The ledger passed the bound, either
            before relay or per the engine result.
        SubmissionError: The server or engine rejected the blob.
        ConnectivityError: The endpoint is unreachable.
    """
    bound = read_expiration_bound(signed_blob)
    snapshot = await client.get_validated_ledger()
    current = snapshot.ledger_index

    if current > bound:
        raise ExpiredTransactionError(
            f"transaction expired: validated ledger {current} > bound {bound}",
            current_ledger=current,
            expiration_bound=bound,
        )

    LOGGER.info(
        "relaying signed blob: ledger=%d bound=%d (%d ledgers left)",
        current,
        bound,
        bound - current,
        extra={"blob_preview": signed_blob[:64]},
    )
    result = await client.submit(signed_blob)

    if result.error is not None:
        raise SubmissionError(f"server refused blob: {result.detail or result.error}")

    outcome = classify_engine_result(result.engine_result)
    if outcome is EngineOutcome.EXPIRED:
        raise ExpiredTransactionError(
            f"transaction expired: {result.engine_result}",
            current_ledger=current,
            expiration_bound=bound,
            engine_result=result.engine_result,
        )
    if outcome is EngineOutcome.REJECTED or not result.accepted:
        detail = f"; {result.detail}" if result.detail else ""
        raise SubmissionError(
            f"transaction rejected: {result.engine_result}{detail}",
            engine_result=result.engine_result,
        )

    LOGGER.info(
        "blob accepted: %s",
        result.engine_result,
        extra={"tx_hash": result.tx_hash},
    )
    return result


# =========================================================================
# Workflows
# =========================================================================


@dataclass
class OfflineOutcome:
    """What one gather → sign → submit cycle produced."""

    params: OfflineParams
    signed: SignResult
    submitted: SubmitResult
    tracker: OfflineTransaction = field(default_factory=OfflineTransaction)

    @property
    def tx_hash(self) -> str:
        return self.submitted.tx_hash or self.signed.tx_hash


def sign_tracked(
    signer: XRPLSigner,
    destination: str,
    amount: Amount,
    params: OfflineParams,
) -> tuple[SignResult, OfflineTransaction]:
    """``sign_offline`` plus a fresh tracker moved to SIGNED.

    Pure like ``sign_offline``; callers can close every connection first.
    """
    tracker = OfflineTransaction()
    signed = sign_offline(signer, destination, amount, params)
    tracker.tx_hash = signed.tx_hash
    tracker.advance(OfflineTxState.SIGNED)
    return signed, tracker


async def relay_tracked(
    relay: XRPLClient,
    signed: SignResult,
    tracker: OfflineTransaction,
) -> SubmitResult:
    """``submit_blob`` that records SUBMITTED, EXPIRED or REJECTED on ``tracker``."""
    try:
        submitted = await submit_blob(relay, signed.signed_tx_blob_hex)
    except ExpiredTransactionError:
        tracker.advance(OfflineTxState.EXPIRED)
        raise
    except SubmissionError:
        tracker.advance(OfflineTxState.REJECTED)
        raise
    tracker.advance(OfflineTxState.SUBMITTED)
    return submitted


async def _run_offline_cycle(
    online: XRPLClient,
    relay: XRPLClient,
    signer: XRPLSigner,
    destination: str,
    amount: Amount,
) -> OfflineOutcome:
    params = await gather(online, signer.account)
    signed, tracker = sign_tracked(signer, destination, amount, params)
    submitted = await relay_tracked(relay, signed, tracker)
    return OfflineOutcome(params=params, signed=signed, submitted=submitted, tracker=tracker)


async def offline_xrp_workflow(
    online: XRPLClient,
    relay: XRPLClient,
    signer: XRPLSigner,
    destination: str,
    drops: int | str,
) -> OfflineOutcome:
    """Gather on ``online``, sign with no I/O, relay on ``relay``."""
    return await _run_offline_cycle(online, relay, signer, destination, xrp_amount(drops))


async def offline_token_workflow(
    online: XRPLClient,
    relay: XRPLClient,
    signer: XRPLSigner,
    destination: str,
    currency: str,
    value: str,
) -> OfflineOutcome:
    """Like ``offline_xrp_workflow`` for a token issued by the signer."""
    amount = issued_amount(currency, signer.account, value)
    return await _run_offline_cycle(online, relay, signer, destination, amount)
