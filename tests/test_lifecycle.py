"""
Tests for the offline transaction state machine.

Test plan:
- happy path PARAMS_GATHERED → SIGNED → SUBMITTED → VERIFIED
- SIGNED → EXPIRED / REJECTED shortcuts
- no state returns to an earlier one
- terminal states have no way out
"""

import pytest

from xrpl_airgap.errors import InvalidTransitionError
from xrpl_airgap.lifecycle import (
    TERMINAL_STATES,
    OfflineTransaction,
    OfflineTxState,
    can_transition,
)

S = OfflineTxState


class TestTransitions:
    def test_happy_path(self) -> None:
        tx = OfflineTransaction()
        tx.advance(S.SIGNED)
        tx.advance(S.SUBMITTED)
        tx.advance(S.VERIFIED)
        assert tx.is_terminal
        assert tx.history == [S.PARAMS_GATHERED, S.SIGNED, S.SUBMITTED, S.VERIFIED]

    @pytest.mark.parametrize("terminal", [S.EXPIRED, S.REJECTED])
    def test_signed_can_end_before_relay(self, terminal: OfflineTxState) -> None:
        tx = OfflineTransaction()
        tx.advance(S.SIGNED)
        tx.advance(terminal)
        assert tx.state is terminal

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES))
    def test_submitted_reaches_every_terminal(self, terminal: OfflineTxState) -> None:
        assert can_transition(S.SUBMITTED, terminal)

    def test_cannot_skip_signing(self) -> None:
        tx = OfflineTransaction()
        with pytest.raises(InvalidTransitionError):
            tx.advance(S.SUBMITTED)
        assert tx.state is S.PARAMS_GATHERED

    @pytest.mark.parametrize("current", list(S))
    def test_never_back_to_params_gathered(self, current: OfflineTxState) -> None:
        assert not can_transition(current, S.PARAMS_GATHERED)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES))
    def test_terminal_states_are_final(self, terminal: OfflineTxState) -> None:
        for target in S:
            assert not can_transition(terminal, target)

    def test_expired_cannot_be_resubmitted(self) -> None:
        tx = OfflineTransaction()
        tx.advance(S.SIGNED)
        tx.advance(S.EXPIRED)
        with pytest.raises(InvalidTransitionError, match="EXPIRED"):
            tx.advance(S.SUBMITTED)

    def test_state_str(self) -> None:
        assert str(S.SIGNED) == "SIGNED"
