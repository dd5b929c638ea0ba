"""
XRPL JSON-RPC client: real network implementation of XRPLClient.

Translates rippled JSON-RPC responses into the typed results from
client.py. Uses an injectable transport (JsonRpcTransport) so the HTTP
layer can be swapped for test fakes without changing parsing logic.

No retry loops. No secrets. No XRPL logic beyond response parsing.

Response parsing targets rippled JSON-RPC conventions:
    - Successful responses: {"result": {"status": "success", ...}}
    - Error responses: {"result": {"status": "error", "error": "...", ...}}
    - submit responses include: engine_result, accepted, tx_json
    - tx responses include: validated, ledger_index, meta, hash
      (API v2 nests the transaction under tx_json, v1 inlines it)
    - ledger responses include: ledger_index, ledger.close_time_iso
    - account_info responses include: account_data.Sequence
"""

from __future__ import annotations

import itertools
import logging
from types import TracebackType
from typing import Any

import httpx

from xrpl_airgap.client import AccountInfo, LedgerSnapshot, SubmitResult, TxRecord
from xrpl_airgap.errors import ConnectivityError, NotFoundError
from xrpl_airgap.transport import HttpxTransport, JsonRpcTransport

LOGGER = logging.getLogger(__name__)


class JsonRpcClient:
    """XRPL JSON-RPC client implementing the XRPLClient protocol.

    Usable as an async context manager; leaving the block closes the
    transport whether or not the body raised.

    Args:
        url: The rippled JSON-RPC endpoint URL.
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
        name: Label used in log lines ("A", "B", ...).
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
        *,
        name: str = "default",
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()
        self._name = name
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    @property
    def name(self) -> str:
        return self._name

    async def __aenter__(self) -> JsonRpcClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()
        LOGGER.debug("connection closed", extra={"connection": self._name})

    # -----------------------------------------------------------------
    # XRPLClient protocol methods
    # -----------------------------------------------------------------

    async def submit(self, signed_tx_blob_hex: str) -> SubmitResult:
        """Relay a signed transaction blob via the ``submit`` method."""
        response = await self._call("submit", {"tx_blob": signed_tx_blob_hex})
        return _parse_submit_response(response)

    async def get_tx(self, tx_hash: str) -> TxRecord:
        """Query a transaction via the ``tx`` method."""
        response = await self._call("tx", {"transaction": tx_hash, "binary": False})
        return _parse_tx_response(response)

    async def get_validated_ledger(self) -> LedgerSnapshot:
        """Query the latest validated ledger via the ``ledger`` method."""
        response = await self._call(
            "ledger",
            {"ledger_index": "validated", "transactions": False, "expand": False},
        )
        return _parse_ledger_response(response)

    async def get_account_info(self, account: str) -> AccountInfo:
        """Query account root fields via the ``account_info`` method."""
        response = await self._call(
            "account_info",
            {"account": account, "ledger_index": "validated", "strict": True},
        )
        return _parse_account_info_response(response, account)

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        payload = {
            "method": method,
            "params": [params],
            "id": next(self._ids),
        }
        LOGGER.debug(
            "json-rpc request",
            extra={"connection": self._name, "method": method},
        )
        try:
            response = await self._transport.post_json(self._url, payload)
        except httpx.HTTPError as exc:
            raise ConnectivityError(
                f"{method} request to {self._url} failed: {exc}"
            ) from exc
        except ValueError as exc:
            # Body was not JSON.
            raise ConnectivityError(
                f"{method} response from {self._url} is not JSON: {exc}"
            ) from exc

        if not isinstance(response, dict) or not isinstance(response.get("result"), dict):
            raise ConnectivityError(f"{method} response has no result object")
        return response


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _server_error(result: dict[str, Any]) -> str | None:
    if result.get("status") == "error":
        return str(result.get("error") or "unknown server error")
    return None


def _parse_submit_response(response: dict[str, Any]) -> SubmitResult:
    """Parse a rippled submit JSON-RPC response into SubmitResult.

    Handles:
        - Successful submit (engine_result present)
        - Server-level errors (status == "error")
        - Missing engine_result (accepted=False with detail)
    """
    result = response.get("result", {})

    error = _server_error(result)
    if error is not None:
        return SubmitResult(
            accepted=False,
            error=error,
            detail=result.get("error_message") or error,
        )

    engine_result = result.get("engine_result")
    if engine_result is None:
        return SubmitResult(
            accepted=False,
            error="noEngineResult",
            detail="no engine_result in submit response",
        )

    tx_hash = None
    tx_json = result.get("tx_json")
    if isinstance(tx_json, dict):
        tx_hash = tx_json.get("hash")

    # Some server versions don't include "accepted": fall back to the
    # engine_result prefix (tesSUCCESS and ter* are "accepted").
    accepted = result.get("accepted", False)
    if not accepted:
        accepted = engine_result == "tesSUCCESS" or engine_result.startswith("ter")

    return SubmitResult(
        accepted=bool(accepted),
        tx_hash=tx_hash,
        engine_result=engine_result,
        detail=result.get("engine_result_message"),
    )


def _parse_tx_response(response: dict[str, Any]) -> TxRecord:
    """Parse a rippled tx JSON-RPC response into TxRecord.

    Handles:
        - Transaction found and validated
        - Transaction found but not yet validated
        - Transaction not found (txnNotFound error)
        - Other server errors (ConnectivityError)
    """
    result = response.get("result", {})

    error = _server_error(result)
    if error == "txnNotFound":
        return TxRecord(found=False)
    if error is not None:
        raise ConnectivityError(
            f"tx query failed: {result.get('error_message') or error}"
        )

    # API v2 nests the transaction fields under tx_json; v1 inlines them.
    fields = result.get("tx_json")
    if not isinstance(fields, dict):
        fields = result

    validated = bool(result.get("validated", False))
    ledger_index = result.get("ledger_index")

    engine_result = None
    meta = result.get("meta")
    if isinstance(meta, dict):
        engine_result = meta.get("TransactionResult")

    amount = fields.get("Amount", fields.get("DeliverMax"))
    if isinstance(amount, dict):
        amount = {str(k): str(v) for k, v in amount.items()}
    elif amount is not None:
        amount = str(amount)

    return TxRecord(
        found=True,
        validated=validated,
        tx_hash=result.get("hash") or fields.get("hash"),
        ledger_index=int(ledger_index) if validated and ledger_index is not None else None,
        engine_result=engine_result,
        transaction_type=fields.get("TransactionType"),
        account=fields.get("Account"),
        destination=fields.get("Destination"),
        amount=amount,
    )


def _parse_ledger_response(response: dict[str, Any]) -> LedgerSnapshot:
    """Parse a rippled ledger JSON-RPC response into LedgerSnapshot."""
    result = response.get("result", {})

    error = _server_error(result)
    if error is not None:
        raise ConnectivityError(
            f"ledger query failed: {result.get('error_message') or error}"
        )

    ledger = result.get("ledger") if isinstance(result.get("ledger"), dict) else {}
    raw_index = result.get("ledger_index", ledger.get("ledger_index"))
    try:
        ledger_index = int(raw_index)
    except (TypeError, ValueError) as exc:
        raise ConnectivityError(
            f"ledger response has no usable ledger_index: {raw_index!r}"
        ) from exc

    return LedgerSnapshot(
        ledger_index=ledger_index,
        close_time_iso=ledger.get("close_time_iso"),
    )


def _parse_account_info_response(response: dict[str, Any], account: str) -> AccountInfo:
    """Parse a rippled account_info JSON-RPC response into AccountInfo."""
    result = response.get("result", {})

    error = _server_error(result)
    if error == "actNotFound":
        raise NotFoundError(f"account {account} not found in validated ledger")
    if error is not None:
        raise ConnectivityError(
            f"account_info query failed: {result.get('error_message') or error}"
        )

    account_data = result.get("account_data")
    if not isinstance(account_data, dict) or "Sequence" not in account_data:
        raise ConnectivityError("account_info response has no account_data.Sequence")

    return AccountInfo(
        account=account_data.get("Account", account),
        sequence=int(account_data["Sequence"]),
        balance_drops=account_data.get("Balance"),
    )
