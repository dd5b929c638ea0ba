"""
The demo sequence.

Part 1 (online, connection A):
    1. User1 sends XRP to User2, verified on the ledger.
    2. User2 trusts User1 for TST, User1 issues TST to User2, verified.

Part 2 (air-gapped):
    3. Gather parameters on connection A, then close it.
    4. Sign with no connection open at all.
    5. Open connection B, relay the blob, verify on B.

Any error aborts the sequence; nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field

from xrpl_airgap.client import XRPLClient
from xrpl_airgap.config import XRPLDemoSettings
from xrpl_airgap.connection import connect, warn_if_shared_endpoint
from xrpl_airgap.errors import SubmissionError, XRPLDemoError
from xrpl_airgap.lifecycle import OfflineTransaction, OfflineTxState
from xrpl_airgap.offline import gather, relay_tracked, sign_tracked
from xrpl_airgap.signer import XRPLSigner
from xrpl_airgap.transfers import send_issued_token, send_xrp, setup_trustline
from xrpl_airgap.tx import issued_amount, xrp_amount
from xrpl_airgap.verification import ExpectedTransfer, require_verified

LOGGER = logging.getLogger(__name__)

XRP_TRANSFER_DROPS = 100
TOKEN_CURRENCY = "TST"
TRUST_LIMIT = "1000"
TOKEN_AMOUNT = "100"
OFFLINE_TRANSFER_DROPS = 75

ConnectFn = Callable[..., AbstractAsyncContextManager[XRPLClient]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class DemoReport:
    """Hashes of every transaction the demo verified, in order."""

    verified: list[str] = field(default_factory=list)
    offline: OfflineTransaction | None = None


@dataclass
class _Context:
    settings: XRPLDemoSettings
    connect: ConnectFn
    sleep: SleepFn
    report: DemoReport

    async def settle(self) -> None:
        if self.settings.settle_seconds:
            LOGGER.info("waiting %.0fs for the ledger to settle", self.settings.settle_seconds)
            await self.sleep(self.settings.settle_seconds)

    async def verify(self, client: XRPLClient, tx_hash: str | None, expected: ExpectedTransfer) -> None:
        if not tx_hash:
            raise SubmissionError("server accepted the transaction but returned no hash")
        await require_verified(
            client,
            tx_hash,
            expected,
            attempts=self.settings.verify_attempts,
            interval=self.settings.settle_seconds / 2,
        )
        self.report.verified.append(tx_hash)


async def _xrp_transfer(ctx: _Context, client: XRPLClient, user1: XRPLSigner, user2: XRPLSigner) -> None:
    LOGGER.info("== 1: XRP transfer ==")
    result = await send_xrp(client, user1, user2.account, XRP_TRANSFER_DROPS)
    await ctx.settle()
    await ctx.verify(
        client,
        result.tx_hash,
        ExpectedTransfer(user1.account, user2.account, xrp_amount(XRP_TRANSFER_DROPS)),
    )


async def _token_transfer(ctx: _Context, client: XRPLClient, user1: XRPLSigner, user2: XRPLSigner) -> None:
    LOGGER.info("== 2: issued token transfer ==")
    trust = await setup_trustline(client, user2, user1.account, TOKEN_CURRENCY, TRUST_LIMIT)
    LOGGER.info("trustline submitted", extra={"tx_hash": trust.tx_hash})
    await ctx.settle()

    result = await send_issued_token(client, user1, user2.account, TOKEN_CURRENCY, TOKEN_AMOUNT)
    await ctx.settle()
    await ctx.verify(
        client,
        result.tx_hash,
        ExpectedTransfer(
            user1.account,
            user2.account,
            issued_amount(TOKEN_CURRENCY, user1.account, TOKEN_AMOUNT),
        ),
    )


async def _offline_transfer(ctx: _Context, user1: XRPLSigner, user2: XRPLSigner) -> None:
    LOGGER.info("== 3: offline signing and relay ==")
    settings = ctx.settings
    warn_if_shared_endpoint(settings.rpc_url, settings.effective_relay_url)

    async with ctx.connect(settings.rpc_url, name="A", timeout=settings.timeout) as online:
        params = await gather(online, user1.account)

    amount = xrp_amount(OFFLINE_TRANSFER_DROPS)
    signed, tracker = sign_tracked(user1, user2.account, amount, params)
    ctx.report.offline = tracker

    async with ctx.connect(settings.effective_relay_url, name="B", timeout=settings.timeout) as relay:
        submitted = await relay_tracked(relay, signed, tracker)

        await ctx.settle()
        try:
            await ctx.verify(
                relay,
                submitted.tx_hash or signed.tx_hash,
                ExpectedTransfer(user1.account, user2.account, amount),
            )
        except XRPLDemoError:
            tracker.advance(OfflineTxState.REJECTED)
            raise
        tracker.advance(OfflineTxState.VERIFIED)


async def run_demo(
    settings: XRPLDemoSettings,
    *,
    connect_fn: ConnectFn = connect,
    sleep: SleepFn = asyncio.sleep,
) -> DemoReport:
    """Run Part 1 then Part 2. Raises the first XRPLDemoError hit."""
    user1, user2 = settings.signers()
    LOGGER.info("user1 (sender/issuer): %s", user1.account)
    LOGGER.info("user2 (receiver): %s", user2.account)

    ctx = _Context(settings=settings, connect=connect_fn, sleep=sleep, report=DemoReport())

    async with connect_fn(settings.rpc_url, name="A", timeout=settings.timeout) as client:
        await _xrp_transfer(ctx, client, user1, user2)
        await ctx.settle()
        await _token_transfer(ctx, client, user1, user2)
        await ctx.settle()

    await _offline_transfer(ctx, user1, user2)

    LOGGER.info("all demos completed: %d transactions verified", len(ctx.report.verified))
    return ctx.report


__all__ = ["DemoReport", "run_demo"]
