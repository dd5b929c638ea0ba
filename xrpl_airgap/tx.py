"""
XRPL transaction builders.

Builds unsigned Payment and TrustSet transaction dicts in XRPL JSON form.
These are "transaction recipes": pure, deterministic, no secrets, no
network calls. Sequence, Fee and LastLedgerSequence are added separately
by ``with_network_fields`` once they have been gathered.

The builders enforce:
    - Addresses are valid classic r-addresses
    - Native amounts are canonical drops strings
    - Issued amounts carry a valid currency code, issuer and value
    - No fields that require network state
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from xrpl.core.addresscodec import is_valid_classic_address

from xrpl_airgap.client import Amount
from xrpl_airgap.errors import EncodingError

# 100 billion XRP, the total supply, in drops.
MAX_DROPS = 10**17

# Fields that must be present before a transaction may be signed offline.
SIGNING_FIELDS = ("Account", "Sequence", "Fee", "LastLedgerSequence")

_HEX_DIGITS = set("0123456789ABCDEFabcdef")

# Issued-currency values: 16 significant digits, and the range the ledger
# renders back in plain (non-exponent) decimal notation.
_ISSUED_PRECISION = 16
_ISSUED_MIN_EXPONENT = -6
_ISSUED_MAX_EXPONENT = 15


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def xrp_amount(drops: int | str) -> str:
    """Return the canonical drops string for a native XRP amount.

    Raises:
        EncodingError: If drops is not a positive integer in canonical
            form (no sign, no leading zeros, no decimal point).
    """
    if isinstance(drops, bool):
        raise EncodingError(f"drops must be an integer, got: {drops!r}")
    if isinstance(drops, int):
        text = str(drops)
    elif isinstance(drops, str):
        text = drops
    else:
        raise EncodingError(f"drops must be an int or str, got: {type(drops).__name__}")

    if not text.isdigit() or not text.isascii() or (len(text) > 1 and text[0] == "0"):
        raise EncodingError(f"non-canonical drops amount: {text!r}")
    value = int(text)
    if value <= 0:
        raise EncodingError(f"drops amount must be positive, got: {text!r}")
    if value > MAX_DROPS:
        raise EncodingError(f"drops amount exceeds total supply: {text!r}")
    return text


def validate_currency_code(currency: str) -> str:
    """Check a currency code: 3 ASCII characters (not "XRP") or 40 hex digits."""
    if len(currency) == 40 and set(currency) <= _HEX_DIGITS:
        return currency
    if len(currency) == 3 and currency.isascii() and currency.isprintable():
        if currency.upper() == "XRP":
            raise EncodingError("'XRP' is reserved for the native asset")
        return currency
    raise EncodingError(f"invalid currency code: {currency!r}")


def validate_address(address: str, field: str = "address") -> str:
    if not address or not is_valid_classic_address(address):
        raise EncodingError(f"{field} is not a valid classic address: {address!r}")
    return address


def issued_amount(currency: str, issuer: str, value: str) -> dict[str, str]:
    """Build an issued-currency amount mapping.

    The value must already be in the form the ledger records it: plain
    decimal notation, no leading zeros, no trailing fractional zeros, at
    most 16 significant digits. "100.0", "0100" and "1e2" are rejected
    rather than silently rewritten, so the ledger record can be compared
    against the value character for character.

    Raises:
        EncodingError: On a bad currency code, issuer or value.
    """
    validate_currency_code(currency)
    validate_address(issuer, "issuer")

    if not isinstance(value, str) or value != value.strip() or not value:
        raise EncodingError(f"issued value must be a trimmed string, got: {value!r}")
    if value[0] in "+-":
        raise EncodingError(f"issued value must be unsigned, got: {value!r}")
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise EncodingError(f"issued value is not a decimal: {value!r}") from exc
    if not parsed.is_finite() or parsed <= 0:
        raise EncodingError(f"issued value must be finite and positive, got: {value!r}")

    normalized = parsed.normalize()
    canonical = format(normalized, "f")
    if canonical != value:
        raise EncodingError(f"issued value is not canonical: {value!r} (use {canonical!r})")
    if len(normalized.as_tuple().digits) > _ISSUED_PRECISION:
        raise EncodingError(
            f"issued value has more than {_ISSUED_PRECISION} significant digits: {value!r}"
        )
    if not _ISSUED_MIN_EXPONENT <= normalized.adjusted() <= _ISSUED_MAX_EXPONENT:
        raise EncodingError(f"issued value is out of plain-notation range: {value!r}")

    return {"currency": currency, "issuer": issuer, "value": value}


def describe_amount(amount: Amount) -> str:
    """Short human label for logs: "75 drops" or "100 TST/rIssuer..."."""
    if isinstance(amount, str):
        return f"{amount} drops"
    return f"{amount['value']} {amount['currency']}/{amount['issuer']}"


# ---------------------------------------------------------------------------
# Transaction recipes
# ---------------------------------------------------------------------------


def plan_payment(account: str, destination: str, amount: Amount) -> dict[str, object]:
    """Build an unsigned Payment transaction dict.

    Args:
        account: Sender r-address.
        destination: Receiver r-address.
        amount: Drops string (from ``xrp_amount``) or issued amount
            mapping (from ``issued_amount``).

    Returns:
        Unsigned transaction dict in XRPL JSON format.

    Raises:
        EncodingError: If an address is invalid or account == destination.
    """
    validate_address(account, "account")
    validate_address(destination, "destination")
    if account == destination:
        raise EncodingError("account and destination must differ")

    if isinstance(amount, str):
        amount_field: Amount = xrp_amount(amount)
    else:
        amount_field = issued_amount(amount["currency"], amount["issuer"], amount["value"])

    return {
        "TransactionType": "Payment",
        "Account": account,
        "Destination": destination,
        "Amount": amount_field,
    }


def plan_trust_set(
    account: str,
    issuer: str,
    currency: str,
    limit: str,
) -> dict[str, object]:
    """Build an unsigned TrustSet transaction dict.

    The holder (``account``) allows ``issuer`` to send it up to ``limit``
    units of ``currency``.
    """
    validate_address(account, "account")
    if account == issuer:
        raise EncodingError("an account cannot open a trustline to itself")

    return {
        "TransactionType": "TrustSet",
        "Account": account,
        "LimitAmount": issued_amount(currency, issuer, limit),
    }


def with_network_fields(
    tx: dict[str, object],
    *,
    sequence: int,
    fee: str,
    last_ledger_sequence: int,
) -> dict[str, object]:
    """Return a copy of ``tx`` completed with gathered network parameters."""
    if sequence <= 0:
        raise EncodingError(f"sequence must be positive, got: {sequence}")
    if last_ledger_sequence <= 0:
        raise EncodingError("LastLedgerSequence must be set")
    completed = dict(tx)
    completed["Sequence"] = sequence
    completed["Fee"] = xrp_amount(fee)
    completed["LastLedgerSequence"] = last_ledger_sequence
    return completed


def require_signing_fields(tx: dict[str, object]) -> None:
    """Reject a transaction that would need autofill to be signed."""
    missing = [name for name in SIGNING_FIELDS if tx.get(name) in (None, "")]
    if missing:
        raise EncodingError(
            f"transaction is missing fields required for offline signing: {', '.join(missing)}"
        )
