"""
Offline transaction lifecycle.

A single offline-signed transaction moves through:

    PARAMS_GATHERED → SIGNED → SUBMITTED → {VERIFIED | EXPIRED | REJECTED}

plus two shortcuts from SIGNED, taken when the submitter refuses the blob
before the ledger sees it: SIGNED → EXPIRED (freshness check failed) and
SIGNED → REJECTED (server refused the request).

Terminal states have no outgoing transitions. An expired instance is
never revived: recovery means a new instance starting from
PARAMS_GATHERED with fresh parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from xrpl_airgap.errors import InvalidTransitionError


class OfflineTxState(str, Enum):
    PARAMS_GATHERED = "PARAMS_GATHERED"
    SIGNED = "SIGNED"
    SUBMITTED = "SUBMITTED"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    REJECTED = "REJECTED"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES = frozenset(
    {OfflineTxState.VERIFIED, OfflineTxState.EXPIRED, OfflineTxState.REJECTED}
)

_TRANSITIONS: dict[OfflineTxState, frozenset[OfflineTxState]] = {
    OfflineTxState.PARAMS_GATHERED: frozenset({OfflineTxState.SIGNED}),
    OfflineTxState.SIGNED: frozenset(
        {OfflineTxState.SUBMITTED, OfflineTxState.EXPIRED, OfflineTxState.REJECTED}
    ),
    OfflineTxState.SUBMITTED: TERMINAL_STATES,
    OfflineTxState.VERIFIED: frozenset(),
    OfflineTxState.EXPIRED: frozenset(),
    OfflineTxState.REJECTED: frozenset(),
}


def can_transition(current: OfflineTxState, target: OfflineTxState) -> bool:
    return target in _TRANSITIONS[current]


@dataclass
class OfflineTransaction:
    """Tracks one signed instance through its lifecycle.

    Attributes:
        state: Current state. Starts at PARAMS_GATHERED.
        tx_hash: Set once the transaction is signed.
        history: Every state entered, in order.
    """

    state: OfflineTxState = OfflineTxState.PARAMS_GATHERED
    tx_hash: str | None = None
    history: list[OfflineTxState] = field(
        default_factory=lambda: [OfflineTxState.PARAMS_GATHERED]
    )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: OfflineTxState) -> None:
        """Move to ``target``.

        Raises:
            InvalidTransitionError: If the transition table forbids it.
        """
        if not can_transition(self.state, target):
            raise InvalidTransitionError(f"cannot move from {self.state} to {target}")
        self.state = target
        self.history.append(target)
