from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from formats.creditor_id import calculate_creditor_id, validate_creditor_id
from formats.currency import from_decimal, from_minor_units
from formats.text import MAX_NAME_LENGTH, MAX_REMITTANCE_LENGTH, sanitize, strip_xml_illegal
from formats.validation import (
    MAX_IDENTIFIER_LENGTH,
    FormatError,
    validate_bic,
    validate_bounded_string,
    validate_date,
    validate_iban,
)


CURRENCY = "EUR"

_PASS_THROUGH_FIELDS = ("end_to_end_id", "transaction_identifier", "signature_date", "debtor_iban", "debtor_bic")


def _xml_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return strip_xml_illegal(str(value))


@dataclass(frozen=True, slots=True)
class DirectDebitTransaction:
    """
    One collection from a debtor (``DrctDbtTxInf``), frozen for serialization.

    Names and descriptions are sanitized here. The other text fields are
    carried as given, minus characters an XML document cannot hold.
    """

    end_to_end_id: Optional[str] = None
    amount: Optional[str] = None  # fixed two decimals, EUR
    transaction_identifier: Optional[str] = None  # mandate id
    signature_date: Optional[str] = None
    debtor_name: Optional[str] = None
    debtor_iban: Optional[str] = None
    debtor_bic: Optional[str] = None
    transaction_description: Optional[str] = None

    def __post_init__(self) -> None:
        for name in _PASS_THROUGH_FIELDS:
            object.__setattr__(self, name, _xml_text(getattr(self, name)))
        if self.debtor_name is not None:
            object.__setattr__(self, "debtor_name", sanitize(self.debtor_name, MAX_NAME_LENGTH))
        if self.transaction_description is not None:
            object.__setattr__(
                self,
                "transaction_description",
                sanitize(self.transaction_description, MAX_REMITTANCE_LENGTH),
            )


@dataclass(frozen=True, slots=True)
class DirectDebitMessage:
    """
    A complete pain.008.001.02 collection: one group header, one payment
    information block and its transactions in output order.
    """

    message_identification: str
    creditor_id: str
    initiating_party_name: str
    creditor_iban: str
    creditor_bic: str
    payment_info_id: str
    requested_execution_date: str
    transactions: tuple[DirectDebitTransaction, ...] = ()

    def __post_init__(self) -> None:
        validate_bounded_string(self.message_identification, MAX_IDENTIFIER_LENGTH)
        object.__setattr__(self, "creditor_id", validate_creditor_id(self.creditor_id))
        if not isinstance(self.initiating_party_name, str) or not self.initiating_party_name.strip():
            raise FormatError("initiating_party_name must be a non-empty string.")
        object.__setattr__(self, "initiating_party_name", sanitize(self.initiating_party_name, MAX_NAME_LENGTH))
        validate_iban(self.creditor_iban)
        validate_bic(self.creditor_bic)
        validate_bounded_string(self.payment_info_id, MAX_IDENTIFIER_LENGTH)
        validate_date(self.requested_execution_date)

        if isinstance(self.transactions, list):
            object.__setattr__(self, "transactions", tuple(self.transactions))
        if not isinstance(self.transactions, tuple):
            raise FormatError("transactions must be a tuple of DirectDebitTransaction.")
        for tx in self.transactions:
            if not isinstance(tx, DirectDebitTransaction):
                raise FormatError("transactions must contain only DirectDebitTransaction instances.")

    @property
    def number_of_transactions(self) -> int:
        return len(self.transactions)


class Transaction:
    """
    Fluent builder for a single direct debit transaction.

    Every ``set_*`` method returns the transaction so calls can be chained::

        tx = (
            Transaction.factory()
            .set_end_to_end_id("INV-2024-0001")
            .set_amount("25.00")
            .set_debtor_name("Jörg Müller")
        )
    """

    def __init__(self) -> None:
        self._end_to_end_id: Optional[str] = None
        self._amount: Optional[str] = None
        self._transaction_identifier: Optional[str] = None
        self._signature_date: Optional[str] = None
        self._debtor_name: Optional[str] = None
        self._debtor_iban: Optional[str] = None
        self._debtor_bic: Optional[str] = None
        self._transaction_description: Optional[str] = None

    @classmethod
    def factory(cls) -> Transaction:
        return cls()

    @property
    def end_to_end_id(self) -> Optional[str]:
        return self._end_to_end_id

    def set_end_to_end_id(self, end_to_end_id: str) -> Transaction:
        self._end_to_end_id = _xml_text(end_to_end_id)
        return self

    @property
    def amount(self) -> Optional[str]:
        return self._amount

    def set_amount(self, amount: Union[float, int, str, Decimal]) -> Transaction:
        self._amount = from_decimal(amount)
        return self

    def set_amount_in_cents(self, amount_in_cents: int) -> Transaction:
        self._amount = from_minor_units(amount_in_cents)
        return self

    @property
    def transaction_identifier(self) -> Optional[str]:
        return self._transaction_identifier

    def set_transaction_identifier(self, transaction_identifier: str) -> Transaction:
        self._transaction_identifier = _xml_text(transaction_identifier)
        return self

    @property
    def signature_date(self) -> Optional[str]:
        return self._signature_date

    def set_signature_date(self, signature_date: str) -> Transaction:
        self._signature_date = _xml_text(signature_date)
        return self

    @property
    def debtor_name(self) -> Optional[str]:
        return self._debtor_name

    def set_debtor_name(self, debtor_name: str) -> Transaction:
        self._debtor_name = sanitize(debtor_name, MAX_NAME_LENGTH)
        return self

    @property
    def debtor_iban(self) -> Optional[str]:
        return self._debtor_iban

    def set_debtor_iban(self, debtor_iban: str) -> Transaction:
        self._debtor_iban = _xml_text(debtor_iban)
        return self

    @property
    def debtor_bic(self) -> Optional[str]:
        return self._debtor_bic

    def set_debtor_bic(self, debtor_bic: str) -> Transaction:
        self._debtor_bic = _xml_text(debtor_bic)
        return self

    @property
    def transaction_description(self) -> Optional[str]:
        return self._transaction_description

    def set_transaction_description(self, transaction_description: str) -> Transaction:
        self._transaction_description = sanitize(transaction_description, MAX_REMITTANCE_LENGTH)
        return self

    def build(self) -> DirectDebitTransaction:
        return DirectDebitTransaction(
            end_to_end_id=self._end_to_end_id,
            amount=self._amount,
            transaction_identifier=self._transaction_identifier,
            signature_date=self._signature_date,
            debtor_name=self._debtor_name,
            debtor_iban=self._debtor_iban,
            debtor_bic=self._debtor_bic,
            transaction_description=self._transaction_description,
        )

    def as_xml(self) -> str:
        """Render only this transaction under a bare <Transaction> element (debugging aid)."""

        from egress.directdebit_to_pain008 import transaction_to_xml

        return transaction_to_xml(self.build())


class DirectDebit:
    """
    Fluent builder for a pain.008.001.02 direct debit file.

    Setters validate immediately and raise ``FormatError`` on bad input.
    ``build()`` freezes the collected values into a ``DirectDebitMessage``.
    """

    def __init__(self) -> None:
        self._message_identification: Optional[str] = None
        self._creditor_id: Optional[str] = None
        self._initiating_party_name: Optional[str] = None
        self._creditor_iban: Optional[str] = None
        self._creditor_bic: Optional[str] = None
        self._payment_info_id: Optional[str] = None
        self._requested_execution_date: Optional[str] = None
        self._transactions: list[Transaction] = []

    @property
    def message_identification(self) -> Optional[str]:
        return self._message_identification

    def set_message_identification(self, message_identification: str) -> DirectDebit:
        self._message_identification = validate_bounded_string(message_identification, MAX_IDENTIFIER_LENGTH)
        return self

    @property
    def creditor_id(self) -> Optional[str]:
        return self._creditor_id

    def set_creditor_id(self, creditor_id: str) -> DirectDebit:
        self._creditor_id = validate_creditor_id(creditor_id)
        return self

    def set_creditor_id_from_registration(
        self,
        registration_number: Union[int, str],
        location_code: Union[int, str] = "0000",
    ) -> DirectDebit:
        """Derive a Dutch creditor id from a KvK number (see ``calculate_creditor_id``)."""

        self._creditor_id = calculate_creditor_id(registration_number, location_code)
        return self

    @property
    def initiating_party_name(self) -> Optional[str]:
        return self._initiating_party_name

    def set_initiating_party_name(self, initiating_party_name: str) -> DirectDebit:
        self._initiating_party_name = sanitize(initiating_party_name, MAX_NAME_LENGTH)
        return self

    @property
    def creditor_iban(self) -> Optional[str]:
        return self._creditor_iban

    def set_creditor_iban(self, creditor_iban: str) -> DirectDebit:
        self._creditor_iban = validate_iban(creditor_iban)
        return self

    @property
    def creditor_bic(self) -> Optional[str]:
        return self._creditor_bic

    def set_creditor_bic(self, creditor_bic: str) -> DirectDebit:
        self._creditor_bic = validate_bic(creditor_bic)
        return self

    @property
    def payment_info_id(self) -> Optional[str]:
        return self._payment_info_id

    def set_payment_info_id(self, payment_info_id: str) -> DirectDebit:
        self._payment_info_id = validate_bounded_string(payment_info_id, MAX_IDENTIFIER_LENGTH)
        return self

    @property
    def requested_execution_date(self) -> Optional[str]:
        return self._requested_execution_date

    def set_requested_execution_date(self, requested_execution_date: str) -> DirectDebit:
        self._requested_execution_date = validate_date(requested_execution_date)
        return self

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    def add_transaction(self, transaction: Transaction) -> DirectDebit:
        if not isinstance(transaction, Transaction):
            raise FormatError("Invalid transaction: expected a Transaction instance.")
        self._transactions.append(transaction)
        return self

    def build(self) -> DirectDebitMessage:
        required = (
            ("message_identification", self._message_identification),
            ("creditor_id", self._creditor_id),
            ("initiating_party_name", self._initiating_party_name),
            ("creditor_iban", self._creditor_iban),
            ("creditor_bic", self._creditor_bic),
            ("payment_info_id", self._payment_info_id),
            ("requested_execution_date", self._requested_execution_date),
        )
        missing = [name for name, value in required if not value]
        if missing:
            raise FormatError("Missing required DirectDebit fields: " + ", ".join(missing))

        return DirectDebitMessage(
            message_identification=self._message_identification,
            creditor_id=self._creditor_id,
            initiating_party_name=self._initiating_party_name,
            creditor_iban=self._creditor_iban,
            creditor_bic=self._creditor_bic,
            payment_info_id=self._payment_info_id,
            requested_execution_date=self._requested_execution_date,
            transactions=tuple(tx.build() for tx in self._transactions),
        )

    def as_xml(self, *, created_at: Optional[datetime] = None, pretty_print: bool = False) -> str:
        from egress.directdebit_to_pain008 import direct_debit_to_pain008_xml

        return direct_debit_to_pain008_xml(self.build(), created_at=created_at, pretty_print=pretty_print)

    def __str__(self) -> str:
        return self.as_xml()
