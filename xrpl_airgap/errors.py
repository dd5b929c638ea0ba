"""
Error taxonomy and XRPL engine result classification.

Every failure the demo can hit is an ``XRPLDemoError`` subclass, so the
CLI can catch one base class and map it to an exit code. Nothing here is
retried: expiration in particular is terminal for a signed instance.

XRPL engine result prefixes:
    - tes: success (tesSUCCESS)
    - tec: claimed cost (tecPATH_DRY, tecNO_DST, etc.), tx included but "failed"
    - tef: local failure (tefPAST_SEQ, tefMAX_LEDGER, etc.), not forwarded
    - tem: malformed (temBAD_FEE, etc.), not forwarded
    - ter: retry (terQUEUED, etc.), held by the server, may still apply

Reference:
    https://xrpl.org/docs/references/protocol/transactions/transaction-results
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from xrpl_airgap.verification import FieldMismatch


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class XRPLDemoError(Exception):
    """Base class for every error surfaced to the orchestrator."""


class ConfigurationError(XRPLDemoError):
    """Seeds or settings are missing or unusable. Raised before any I/O."""


class ConnectivityError(XRPLDemoError):
    """The JSON-RPC endpoint could not be reached or answered garbage."""


class EncodingError(XRPLDemoError):
    """Transaction fields or a signed blob are missing or malformed."""


class NotFoundError(XRPLDemoError):
    """The ledger has no (validated) record of a transaction or account."""


class SubmissionError(XRPLDemoError):
    """The ledger rejected a blob for a reason other than expiration."""

    def __init__(self, message: str, engine_result: str | None = None) -> None:
        super().__init__(message)
        self.engine_result = engine_result


class ExpiredTransactionError(XRPLDemoError):
    """The validated ledger moved past the blob's LastLedgerSequence."""

    def __init__(
        self,
        message: str,
        *,
        current_ledger: int | None = None,
        expiration_bound: int | None = None,
        engine_result: str | None = None,
    ) -> None:
        super().__init__(message)
        self.current_ledger = current_ledger
        self.expiration_bound = expiration_bound
        self.engine_result = engine_result


class VerificationMismatchError(XRPLDemoError):
    """The ledger record differs from what was signed."""

    def __init__(self, message: str, mismatches: list[FieldMismatch]) -> None:
        super().__init__(message)
        self.mismatches = mismatches


class InvalidTransitionError(XRPLDemoError):
    """An offline transaction tried to move to a state it cannot reach."""


# ---------------------------------------------------------------------------
# Engine result classification
# ---------------------------------------------------------------------------


class EngineOutcome(str, Enum):
    """Coarse outcome of a submit, derived from the engine result code."""

    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    REJECTED = "REJECTED"

    def __str__(self) -> str:
        return self.value


# Results that mean "LastLedgerSequence already passed". A tec* code was
# applied to a ledger, so tecEXPIRED (an expired offer, escrow or check) is
# a rejection, never ledger-bound expiry.
_EXPIRED_RESULTS = {"tefMAX_LEDGER"}
_EXPIRED_MARKERS = ("EXPIRED", "LATE")
_APPLIED_PREFIX = "tec"

# Coarse prefix-based mapping. ter* is held by the server, not rejected.
_PREFIX_MAP: dict[str, EngineOutcome] = {
    "tes": EngineOutcome.ACCEPTED,
    "ter": EngineOutcome.ACCEPTED,
    "tem": EngineOutcome.REJECTED,  # malformed: won't ever succeed
    "tef": EngineOutcome.REJECTED,  # local failure: won't be forwarded
    "tec": EngineOutcome.REJECTED,  # claimed cost: included but "failed"
}


def classify_engine_result(engine_result: str | None) -> EngineOutcome:
    """Map an XRPL engine result code to an EngineOutcome.

    Args:
        engine_result: XRPL engine result string (e.g. "tesSUCCESS",
            "tefMAX_LEDGER"). None means the engine never responded.

    Returns:
        EngineOutcome. Unknown codes and None are REJECTED: the
        submitter never guesses that an unrecognized result succeeded.
    """
    if engine_result is None:
        return EngineOutcome.REJECTED

    if engine_result in _EXPIRED_RESULTS:
        return EngineOutcome.EXPIRED
    if not engine_result.startswith(_APPLIED_PREFIX) and any(
        marker in engine_result for marker in _EXPIRED_MARKERS
    ):
        return EngineOutcome.EXPIRED

    for prefix, outcome in _PREFIX_MAP.items():
        if engine_result.startswith(prefix):
            return outcome

    return EngineOutcome.REJECTED
