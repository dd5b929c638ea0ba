"""
Tests for JsonRpcClient: canned JSON-RPC responses, no network.

Uses a FakeTransport that returns pre-built response dicts,
exercising the parsing logic in jsonrpc_client.py.

Test plan:
- Submit: success parses engine_result + tx_hash, tem* not accepted,
  server error reported, missing engine_result handled, ter* accepted
- Tx: not found → found=False, validated v1 and v2 shapes, issued
  amount parsed, not validated drops ledger_index, server error raises
- Ledger: index parsed from result or nested ledger, missing index raises
- Account info: sequence parsed, actNotFound → NotFoundError
- Transport: httpx errors and non-JSON bodies → ConnectivityError
- Lifecycle: context manager closes the transport, request ids increase
- HttpxTransport: lazy client, posts JSON, closes (pytest-httpx)
"""

import json
from typing import Any

import httpx
import pytest
from pytest_httpx import HTTPXMock

from xrpl_airgap.connection import connect, warn_if_shared_endpoint
from xrpl_airgap.errors import ConnectivityError, NotFoundError
from xrpl_airgap.jsonrpc_client import JsonRpcClient
from xrpl_airgap.transport import HttpxTransport

URL = "http://localhost:5005"
ACCOUNT = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
ISSUER = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"

# ---------------------------------------------------------------------------
# Fake transports
# ---------------------------------------------------------------------------


class FakeTransport:
    """Returns canned JSON-RPC responses for testing."""

    def __init__(self, response: Any) -> None:
        self._response = response
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((url, payload))
        return self._response

    async def aclose(self) -> None:
        self.closed = True


class ErrorTransport:
    """Raises an exception on post_json to simulate transport failures."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc
        self.closed = False

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        raise self._exc

    async def aclose(self) -> None:
        self.closed = True


def _client(response: Any) -> tuple[JsonRpcClient, FakeTransport]:
    transport = FakeTransport(response)
    return JsonRpcClient(URL, transport), transport


# ---------------------------------------------------------------------------
# Canned responses
# ---------------------------------------------------------------------------

SUBMIT_SUCCESS = {
    "result": {
        "status": "success",
        "accepted": True,
        "engine_result": "tesSUCCESS",
        "engine_result_message": "The transaction was applied.",
        "tx_json": {"Account": ACCOUNT, "hash": "a" * 64},
    },
}

SUBMIT_TEM_BAD_FEE = {
    "result": {
        "status": "success",
        "accepted": False,
        "engine_result": "temBAD_FEE",
        "engine_result_message": "Invalid fee.",
        "tx_json": {"hash": "b" * 64},
    },
}

SUBMIT_TER_QUEUED = {
    "result": {
        "status": "success",
        "engine_result": "terQUEUED",
        "tx_json": {"hash": "e" * 64},
    },
}

SUBMIT_SERVER_ERROR = {
    "result": {
        "status": "error",
        "error": "invalidParams",
        "error_message": "Missing field 'tx_blob'.",
    },
}

SUBMIT_NO_ENGINE_RESULT = {"result": {"status": "success"}}

TX_VALIDATED_V1 = {
    "result": {
        "status": "success",
        "TransactionType": "Payment",
        "Account": ACCOUNT,
        "Destination": ISSUER,
        "Amount": "75",
        "hash": "a" * 64,
        "validated": True,
        "ledger_index": 46447423,
        "meta": {"TransactionResult": "tesSUCCESS"},
    },
}

TX_VALIDATED_V2 = {
    "result": {
        "status": "success",
        "hash": "c" * 64,
        "validated": True,
        "ledger_index": 100,
        "tx_json": {
            "TransactionType": "Payment",
            "Account": ISSUER,
            "Destination": ACCOUNT,
            "DeliverMax": {"currency": "TST", "issuer": ISSUER, "value": "100"},
        },
        "meta": {"TransactionResult": "tesSUCCESS"},
    },
}

TX_NOT_VALIDATED = {
    "result": {
        "status": "success",
        "TransactionType": "Payment",
        "hash": "a" * 64,
        "validated": False,
        "ledger_index": 46447423,
    },
}

TX_NOT_FOUND = {
    "result": {
        "status": "error",
        "error": "txnNotFound",
        "error_message": "Transaction not found.",
    },
}

TX_SERVER_ERROR = {
    "result": {"status": "error", "error": "internalError"},
}

LEDGER_VALIDATED = {
    "result": {
        "status": "success",
        "validated": True,
        "ledger_index": 1000,
        "ledger": {"ledger_index": "1000", "close_time_iso": "2025-01-15T12:00:00Z"},
    },
}

LEDGER_NESTED_ONLY = {
    "result": {"status": "success", "ledger": {"ledger_index": "1005"}},
}

ACCOUNT_INFO = {
    "result": {
        "status": "success",
        "validated": True,
        "account_data": {"Account": ACCOUNT, "Sequence": 42, "Balance": "99999988"},
    },
}

ACCOUNT_NOT_FOUND = {
    "result": {"status": "error", "error": "actNotFound", "error_message": "Account not found."},
}


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        client, transport = _client(SUBMIT_SUCCESS)
        result = await client.submit("DEADBEEF")
        assert result.accepted is True
        assert result.tx_hash == "a" * 64
        assert result.engine_result == "tesSUCCESS"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_payload_shape(self) -> None:
        client, transport = _client(SUBMIT_SUCCESS)
        await client.submit("DEADBEEF")
        url, payload = transport.calls[0]
        assert url == URL
        assert payload["method"] == "submit"
        assert payload["params"] == [{"tx_blob": "DEADBEEF"}]

    @pytest.mark.asyncio
    async def test_malformed_not_accepted(self) -> None:
        client, _ = _client(SUBMIT_TEM_BAD_FEE)
        result = await client.submit("DEADBEEF")
        assert result.accepted is False
        assert result.engine_result == "temBAD_FEE"
        assert result.tx_hash == "b" * 64

    @pytest.mark.asyncio
    async def test_queued_inferred_accepted(self) -> None:
        client, _ = _client(SUBMIT_TER_QUEUED)
        result = await client.submit("DEADBEEF")
        assert result.accepted is True

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        client, _ = _client(SUBMIT_SERVER_ERROR)
        result = await client.submit("DEADBEEF")
        assert result.accepted is False
        assert result.error == "invalidParams"
        assert result.detail == "Missing field 'tx_blob'."

    @pytest.mark.asyncio
    async def test_missing_engine_result(self) -> None:
        client, _ = _client(SUBMIT_NO_ENGINE_RESULT)
        result = await client.submit("DEADBEEF")
        assert result.accepted is False
        assert result.engine_result is None
        assert result.error is not None


# ---------------------------------------------------------------------------
# tx
# ---------------------------------------------------------------------------


class TestGetTx:
    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        client, _ = _client(TX_NOT_FOUND)
        record = await client.get_tx("a" * 64)
        assert record.found is False
        assert record.validated is False

    @pytest.mark.asyncio
    async def test_validated_v1_fields(self) -> None:
        client, _ = _client(TX_VALIDATED_V1)
        record = await client.get_tx("a" * 64)
        assert record.found is True
        assert record.validated is True
        assert record.ledger_index == 46447423
        assert record.engine_result == "tesSUCCESS"
        assert record.transaction_type == "Payment"
        assert record.account == ACCOUNT
        assert record.destination == ISSUER
        assert record.amount == "75"

    @pytest.mark.asyncio
    async def test_validated_v2_issued_amount(self) -> None:
        client, _ = _client(TX_VALIDATED_V2)
        record = await client.get_tx("c" * 64)
        assert record.tx_hash == "c" * 64
        assert record.account == ISSUER
        assert record.amount == {"currency": "TST", "issuer": ISSUER, "value": "100"}

    @pytest.mark.asyncio
    async def test_not_validated_has_no_ledger_index(self) -> None:
        client, _ = _client(TX_NOT_VALIDATED)
        record = await client.get_tx("a" * 64)
        assert record.found is True
        assert record.validated is False
        assert record.ledger_index is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self) -> None:
        client, _ = _client(TX_SERVER_ERROR)
        with pytest.raises(ConnectivityError, match="internalError"):
            await client.get_tx("a" * 64)


# ---------------------------------------------------------------------------
# ledger / account_info
# ---------------------------------------------------------------------------


class TestLedgerAndAccount:
    @pytest.mark.asyncio
    async def test_validated_ledger(self) -> None:
        client, transport = _client(LEDGER_VALIDATED)
        snapshot = await client.get_validated_ledger()
        assert snapshot.ledger_index == 1000
        assert snapshot.close_time_iso == "2025-01-15T12:00:00Z"
        assert transport.calls[0][1]["params"][0]["ledger_index"] == "validated"

    @pytest.mark.asyncio
    async def test_nested_ledger_index(self) -> None:
        client, _ = _client(LEDGER_NESTED_ONLY)
        snapshot = await client.get_validated_ledger()
        assert snapshot.ledger_index == 1005

    @pytest.mark.asyncio
    async def test_ledger_without_index_raises(self) -> None:
        client, _ = _client({"result": {"status": "success"}})
        with pytest.raises(ConnectivityError):
            await client.get_validated_ledger()

    @pytest.mark.asyncio
    async def test_account_sequence(self) -> None:
        client, transport = _client(ACCOUNT_INFO)
        info = await client.get_account_info(ACCOUNT)
        assert info.sequence == 42
        assert info.balance_drops == "99999988"
        params = transport.calls[0][1]["params"][0]
        assert params == {"account": ACCOUNT, "ledger_index": "validated", "strict": True}

    @pytest.mark.asyncio
    async def test_account_not_found(self) -> None:
        client, _ = _client(ACCOUNT_NOT_FOUND)
        with pytest.raises(NotFoundError):
            await client.get_account_info(ACCOUNT)

    @pytest.mark.asyncio
    async def test_account_info_without_sequence_raises(self) -> None:
        client, _ = _client({"result": {"status": "success", "account_data": {}}})
        with pytest.raises(ConnectivityError):
            await client.get_account_info(ACCOUNT)


# ---------------------------------------------------------------------------
# Transport failures and lifecycle
# ---------------------------------------------------------------------------


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connect_error_becomes_connectivity_error(self) -> None:
        client = JsonRpcClient(URL, ErrorTransport(httpx.ConnectError("refused")))
        with pytest.raises(ConnectivityError, match="submit"):
            await client.submit("DEADBEEF")

    @pytest.mark.asyncio
    async def test_timeout_becomes_connectivity_error(self) -> None:
        client = JsonRpcClient(URL, ErrorTransport(httpx.ReadTimeout("slow")))
        with pytest.raises(ConnectivityError):
            await client.get_validated_ledger()

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        client = JsonRpcClient(URL, ErrorTransport(ValueError("Expecting value")))
        with pytest.raises(ConnectivityError, match="not JSON"):
            await client.get_tx("a" * 64)

    @pytest.mark.asyncio
    async def test_missing_result_object(self) -> None:
        client, _ = _client({"error": "nope"})
        with pytest.raises(ConnectivityError, match="no result"):
            await client.submit("DEADBEEF")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self) -> None:
        transport = FakeTransport(SUBMIT_SUCCESS)
        async with JsonRpcClient(URL, transport) as client:
            await client.submit("DEADBEEF")
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_connect_closes_on_error(self) -> None:
        transport = ErrorTransport(httpx.ConnectError("refused"))
        with pytest.raises(ConnectivityError):
            async with connect(URL, name="A", transport=transport) as client:
                await client.get_validated_ledger()
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_request_ids_increase(self) -> None:
        client, transport = _client(LEDGER_VALIDATED)
        await client.get_validated_ledger()
        await client.get_validated_ledger()
        ids = [payload["id"] for _, payload in transport.calls]
        assert ids == [1, 2]

    @pytest.mark.asyncio
    async def test_separate_clients_do_not_share_ids(self) -> None:
        first, first_transport = _client(LEDGER_VALIDATED)
        second, second_transport = _client(LEDGER_VALIDATED)
        await first.get_validated_ledger()
        await second.get_validated_ledger()
        assert first_transport.calls[0][1]["id"] == 1
        assert second_transport.calls[0][1]["id"] == 1

    def test_shared_endpoint_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="xrpl_airgap.connection"):
            assert warn_if_shared_endpoint(URL, URL + "/") is True
        assert "same endpoint" in caplog.text
        assert warn_if_shared_endpoint(URL, "http://other:5005") is False


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_posts_json_and_closes(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", json=LEDGER_VALIDATED)

        transport = HttpxTransport(timeout=5.0)
        assert transport.is_open is False
        response = await transport.post_json(URL, {"method": "ledger", "params": [{}], "id": 1})
        assert response == LEDGER_VALIDATED
        assert transport.is_open is True

        (request,) = httpx_mock.get_requests()
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content)["method"] == "ledger"

        await transport.aclose()
        assert transport.is_open is False

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", status_code=503)

        client = JsonRpcClient(URL, HttpxTransport())
        with pytest.raises(ConnectivityError):
            await client.get_validated_ledger()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_refused(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))

        async with connect(URL, name="A", timeout=1.0) as client:
            with pytest.raises(ConnectivityError):
                await client.get_validated_ledger()

    @pytest.mark.asyncio
    async def test_connect_block_uses_httpx(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", json=LEDGER_VALIDATED)

        async with connect(URL, name="B") as client:
            snapshot = await client.get_validated_ledger()
        assert snapshot.ledger_index > 0
