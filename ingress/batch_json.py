"""
Build DirectDebit files from JSON batch documents.

A batch looks like::

    {
      "message_id": "MSG-2024-05-0001",
      "payment_info_id": "PMT-2024-05-0001",
      "requested_execution_date": "2024-05-06",
      "creditor": {
        "name": "Sportclub De Ploeg",
        "iban": "NL91ABNA0417164300",
        "bic": "ABNANL2A",
        "registration_number": "12345678",
        "location_code": "0000"
      },
      "transactions": [
        {
          "end_to_end_id": "CONTRIB-0001",
          "amount": "25.00",
          "mandate_id": "MANDATE-0001",
          "signature_date": "2023-09-01",
          "debtor_name": "J. Jansen",
          "debtor_iban": "NL02RABO0123456789",
          "debtor_bic": "RABONL2U",
          "description": "Contributie mei 2024"
        }
      ]
    }

The creditor block may instead carry a ready-made ``creditor_id``, and it may
live in a separate creditor profile file (see ``load_creditor_profile``).
Transactions give either ``amount`` (decimal string/number) or
``amount_cents`` (integer).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

from directdebit import DirectDebit, Transaction


DEFAULT_LOCATION_CODE = "0000"


class BatchDeserializeError(ValueError):
    """Raised when a JSON batch cannot be decoded into a DirectDebit."""


def _read_json(path: Union[str, Path], what: str) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{what} not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise BatchDeserializeError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise BatchDeserializeError(f"{what} must be a JSON object: {path}")
    return data


def load_creditor_profile(path: Union[str, Path]) -> dict[str, Any]:
    """Load a creditor profile (the ``creditor`` block of a batch) from its own file."""

    data = _read_json(path, "Creditor profile")
    # Support both a bare profile and one wrapped in {"creditor": {...}}
    return data.get("creditor", data)


def _apply_creditor(dd: DirectDebit, creditor: Any) -> None:
    if not isinstance(creditor, dict):
        raise BatchDeserializeError("creditor must be an object/dict.")

    try:
        dd.set_initiating_party_name(creditor["name"])
        dd.set_creditor_iban(creditor["iban"])
        dd.set_creditor_bic(creditor["bic"])
    except KeyError as e:
        raise BatchDeserializeError(f"Missing required creditor field: {e.args[0]}") from e

    if creditor.get("creditor_id"):
        dd.set_creditor_id(creditor["creditor_id"])
    elif creditor.get("registration_number"):
        dd.set_creditor_id_from_registration(
            creditor["registration_number"],
            creditor.get("location_code", DEFAULT_LOCATION_CODE),
        )
    else:
        raise BatchDeserializeError("creditor needs either 'creditor_id' or 'registration_number'.")


def transaction_from_dict(d: Any) -> Transaction:
    if not isinstance(d, dict):
        raise BatchDeserializeError("Transaction must be an object/dict.")

    tx = Transaction.factory()
    if "amount_cents" in d:
        tx.set_amount_in_cents(d["amount_cents"])
    elif "amount" in d:
        tx.set_amount(d["amount"])
    else:
        raise BatchDeserializeError(f"Transaction {d.get('end_to_end_id')!r} has no 'amount' or 'amount_cents'.")

    # Optional fields stay unset when absent and serialize as empty elements.
    if "end_to_end_id" in d:
        tx.set_end_to_end_id(str(d["end_to_end_id"]))
    if "mandate_id" in d:
        tx.set_transaction_identifier(str(d["mandate_id"]))
    if "signature_date" in d:
        tx.set_signature_date(str(d["signature_date"]))
    if "debtor_name" in d:
        tx.set_debtor_name(d["debtor_name"])
    if "debtor_iban" in d:
        tx.set_debtor_iban(d["debtor_iban"])
    if "debtor_bic" in d:
        tx.set_debtor_bic(d["debtor_bic"])
    if "description" in d:
        tx.set_transaction_description(d["description"])
    return tx


def direct_debit_from_json(
    value: Union[bytes, str],
    *,
    creditor: Optional[dict[str, Any]] = None,
) -> DirectDebit:
    """
    Deserialize a DirectDebit builder from a JSON batch.

    ``creditor`` replaces the batch's own creditor block when given.
    Field format problems surface as ``FormatError`` from the setters.
    """

    if isinstance(value, bytes):
        text = value.decode("utf-8")
    else:
        text = value

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BatchDeserializeError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise BatchDeserializeError("Batch must be a JSON object.")

    return direct_debit_from_dict(data, creditor=creditor)


def direct_debit_from_dict(
    data: dict[str, Any],
    *,
    creditor: Optional[dict[str, Any]] = None,
) -> DirectDebit:
    try:
        message_id = data["message_id"]
        payment_info_id = data["payment_info_id"]
        requested_execution_date = data["requested_execution_date"]
    except KeyError as e:
        raise BatchDeserializeError(f"Missing required batch field: {e.args[0]}") from e

    creditor_block = creditor if creditor is not None else data.get("creditor")
    if creditor_block is None:
        raise BatchDeserializeError("Missing creditor block (in the batch or as a separate profile).")

    transactions = data.get("transactions", [])
    if not isinstance(transactions, list):
        raise BatchDeserializeError("transactions must be a list.")

    dd = (
        DirectDebit()
        .set_message_identification(message_id)
        .set_payment_info_id(payment_info_id)
        .set_requested_execution_date(requested_execution_date)
    )
    _apply_creditor(dd, creditor_block)
    for item in transactions:
        dd.add_transaction(transaction_from_dict(item))
    return dd


def load_batch(
    path: Union[str, Path],
    *,
    creditor: Optional[dict[str, Any]] = None,
) -> DirectDebit:
    """Read a JSON batch file from disk into a DirectDebit builder."""

    return direct_debit_from_dict(_read_json(path, "Batch file"), creditor=creditor)
