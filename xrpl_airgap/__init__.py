"""
XRPL testnet demo client with air-gapped signing.

Public API:

    Pure layer (no I/O):
        - ``plan_payment()``, ``plan_trust_set()``: unsigned tx dicts.
        - ``xrp_amount()``, ``issued_amount()``: canonical amounts.
        - ``sign_offline()``: sign with pre-gathered ``OfflineParams``.
        - ``compare_transfer()``: field-by-field ledger record check.

    Impure layer (network I/O):
        - ``gather()``: ledger index + account sequence.
        - ``submit_blob()``: freshness check + relay, at most once.
        - ``verify()`` / ``require_verified()``: ledger record check.
        - ``send_xrp()``, ``setup_trustline()``, ``send_issued_token()``.
        - ``offline_xrp_workflow()``, ``offline_token_workflow()``.

    Protocols (for dependency injection):
        - ``XRPLClient``: network boundary.
        - ``XRPLSigner``: secrets boundary.
        - ``JsonRpcTransport``: HTTP seam under ``JsonRpcClient``.
"""

from xrpl_airgap.client import (
    AccountInfo,
    LedgerSnapshot,
    SubmitResult,
    TxRecord,
    XRPLClient,
)
from xrpl_airgap.connection import connect
from xrpl_airgap.errors import (
    ConfigurationError,
    ConnectivityError,
    EncodingError,
    ExpiredTransactionError,
    InvalidTransitionError,
    NotFoundError,
    SubmissionError,
    VerificationMismatchError,
    XRPLDemoError,
    classify_engine_result,
)
from xrpl_airgap.jsonrpc_client import JsonRpcClient
from xrpl_airgap.lifecycle import OfflineTransaction, OfflineTxState
from xrpl_airgap.offline import (
    EXPIRATION_LEDGERS,
    MINIMUM_FEE_DROPS,
    OfflineOutcome,
    OfflineParams,
    gather,
    offline_token_workflow,
    offline_xrp_workflow,
    read_expiration_bound,
    relay_tracked,
    sign_offline,
    sign_tracked,
    submit_blob,
)
from xrpl_airgap.signer import SignResult, WalletSigner, XRPLSigner
from xrpl_airgap.transfers import send_issued_token, send_xrp, setup_trustline
from xrpl_airgap.transport import HttpxTransport, JsonRpcTransport
from xrpl_airgap.tx import issued_amount, plan_payment, plan_trust_set, xrp_amount
from xrpl_airgap.verification import (
    ExpectedTransfer,
    FieldMismatch,
    compare_transfer,
    require_verified,
    verify,
)

__version__ = "0.1.0"

__all__ = [
    "AccountInfo",
    "ConfigurationError",
    "ConnectivityError",
    "EXPIRATION_LEDGERS",
    "EncodingError",
    "ExpectedTransfer",
    "ExpiredTransactionError",
    "FieldMismatch",
    "HttpxTransport",
    "InvalidTransitionError",
    "JsonRpcClient",
    "JsonRpcTransport",
    "LedgerSnapshot",
    "MINIMUM_FEE_DROPS",
    "NotFoundError",
    "OfflineOutcome",
    "OfflineParams",
    "OfflineTransaction",
    "OfflineTxState",
    "SignResult",
    "SubmissionError",
    "SubmitResult",
    "TxRecord",
    "VerificationMismatchError",
    "WalletSigner",
    "XRPLClient",
    "XRPLDemoError",
    "XRPLSigner",
    "classify_engine_result",
    "compare_transfer",
    "connect",
    "gather",
    "issued_amount",
    "offline_token_workflow",
    "offline_xrp_workflow",
    "plan_payment",
    "plan_trust_set",
    "read_expiration_bound",
    "relay_tracked",
    "require_verified",
    "send_issued_token",
    "send_xrp",
    "setup_trustline",
    "sign_offline",
    "sign_tracked",
    "submit_blob",
    "verify",
    "xrp_amount",
]
