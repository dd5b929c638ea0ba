"""Shared fixtures: real xrpl-py wallets, a fake client, a network kill switch."""

from __future__ import annotations

import socket

import httpx
import pytest
from xrpl.wallet import Wallet

from xrpl_airgap.client import AccountInfo, LedgerSnapshot, SubmitResult, TxRecord
from xrpl_airgap.signer import WalletSigner

SAMPLE_TX_HASH = "A" * 64


class FakeClient:
    """Minimal XRPLClient: a settable ledger index and canned results."""

    def __init__(
        self,
        *,
        ledger_index: int = 1000,
        sequence: int = 7,
        submit_result: SubmitResult | None = None,
        tx_records: list[TxRecord] | None = None,
    ) -> None:
        self.ledger_index = ledger_index
        self.sequence = sequence
        self.submit_result = submit_result or SubmitResult(
            accepted=True, tx_hash=SAMPLE_TX_HASH, engine_result="tesSUCCESS"
        )
        self.tx_records = list(tx_records or [TxRecord(found=False)])
        self.submit_calls: list[str] = []
        self.get_tx_calls: list[str] = []
        self.account_calls: list[str] = []

    async def submit(self, signed_tx_blob_hex: str) -> SubmitResult:
        self.submit_calls.append(signed_tx_blob_hex)
        return self.submit_result

    async def get_tx(self, tx_hash: str) -> TxRecord:
        self.get_tx_calls.append(tx_hash)
        if len(self.tx_records) > 1:
            return self.tx_records.pop(0)
        return self.tx_records[0]

    async def get_validated_ledger(self) -> LedgerSnapshot:
        return LedgerSnapshot(ledger_index=self.ledger_index)

    async def get_account_info(self, account: str) -> AccountInfo:
        self.account_calls.append(account)
        return AccountInfo(account=account, sequence=self.sequence)


@pytest.fixture()
def sender() -> WalletSigner:
    return WalletSigner(Wallet.create())


@pytest.fixture()
def receiver() -> WalletSigner:
    return WalletSigner(Wallet.create())


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make every socket connect and every httpx request fail loudly."""

    def refuse(*args: object, **kwargs: object) -> None:
        raise AssertionError("network access attempted")

    async def refuse_async(*args: object, **kwargs: object) -> None:
        raise AssertionError("network access attempted")

    monkeypatch.setattr(socket.socket, "connect", refuse)
    monkeypatch.setattr(socket.socket, "connect_ex", refuse)
    monkeypatch.setattr(socket, "create_connection", refuse)
    monkeypatch.setattr(httpx.Client, "send", refuse)
    monkeypatch.setattr(httpx.AsyncClient, "send", refuse_async)
