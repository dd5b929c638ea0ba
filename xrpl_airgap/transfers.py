"""
Online transfers (demo Part 1).

XRP payment, trustline setup and token issuance over a single
connection. Network parameters are gathered on the same connection
right before signing, so these are the online counterpart of the
offline workflow and share its submitter and its expiration bound.
"""

from __future__ import annotations

import logging

from xrpl_airgap.client import SubmitResult, XRPLClient
from xrpl_airgap.offline import gather, submit_blob
from xrpl_airgap.signer import XRPLSigner
from xrpl_airgap.tx import (
    issued_amount,
    plan_payment,
    plan_trust_set,
    with_network_fields,
    xrp_amount,
)

LOGGER = logging.getLogger(__name__)


async def _sign_and_submit(
    client: XRPLClient,
    signer: XRPLSigner,
    tx: dict[str, object],
) -> SubmitResult:
    params = await gather(client, signer.account)
    complete = with_network_fields(
        tx,
        sequence=params.sequence,
        fee=params.fee,
        last_ledger_sequence=params.expiration_bound,
    )
    signed = signer.sign(complete)
    return await submit_blob(client, signed.signed_tx_blob_hex)


async def send_xrp(
    client: XRPLClient,
    signer: XRPLSigner,
    destination: str,
    drops: int | str,
) -> SubmitResult:
    """Send native XRP from the signer's account."""
    amount = xrp_amount(drops)
    LOGGER.info("sending %s drops %s -> %s", amount, signer.account, destination)
    return await _sign_and_submit(
        client, signer, plan_payment(signer.account, destination, amount)
    )


async def setup_trustline(
    client: XRPLClient,
    signer: XRPLSigner,
    issuer: str,
    currency: str,
    limit: str,
) -> SubmitResult:
    """Let the signer's account hold up to ``limit`` of ``currency`` from ``issuer``."""
    LOGGER.info(
        "opening trustline %s -> %s for %s %s", signer.account, issuer, limit, currency
    )
    return await _sign_and_submit(
        client, signer, plan_trust_set(signer.account, issuer, currency, limit)
    )


async def send_issued_token(
    client: XRPLClient,
    signer: XRPLSigner,
    destination: str,
    currency: str,
    value: str,
) -> SubmitResult:
    """Issue ``value`` of ``currency`` from the signer (the issuer) to ``destination``.

    The destination must already trust the signer for this currency.
    """
    amount = issued_amount(currency, signer.account, value)
    LOGGER.info(
        "issuing %s %s %s -> %s", value, currency, signer.account, destination
    )
    return await _sign_and_submit(
        client, signer, plan_payment(signer.account, destination, amount)
    )
