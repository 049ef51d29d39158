"""
Tests for the DirectDebit / Transaction builders and the frozen message they produce.
"""

from __future__ import annotations

import dataclasses

import pytest

from directdebit import DirectDebit, DirectDebitMessage, DirectDebitTransaction, Transaction
from formats import FormatError


def create_test_transaction(
    *,
    end_to_end_id: str = "E2E-TEST-001",
    amount: str = "25.00",
    mandate_id: str = "MANDATE-001",
    debtor_name: str = "J. Jansen",
) -> Transaction:
    """Helper to create a populated Transaction."""
    return (
        Transaction.factory()
        .set_end_to_end_id(end_to_end_id)
        .set_amount(amount)
        .set_transaction_identifier(mandate_id)
        .set_signature_date("2023-09-01")
        .set_debtor_name(debtor_name)
        .set_debtor_iban("NL02RABO0123456789")
        .set_debtor_bic("RABONL2U")
        .set_transaction_description("Contributie mei 2024")
    )


def create_test_direct_debit(*, message_id: str = "MSG-TEST-001") -> DirectDebit:
    """Helper to create a DirectDebit with every required field set."""
    return (
        DirectDebit()
        .set_message_identification(message_id)
        .set_creditor_id("NL69ZZZ123456780000")
        .set_initiating_party_name("Sportclub De Ploeg")
        .set_creditor_iban("NL91ABNA0417164300")
        .set_creditor_bic("ABNANL2A")
        .set_payment_info_id("PMT-TEST-001")
        .set_requested_execution_date("2024-05-06")
    )


class TestTransactionBuilder:
    """Tests for Transaction setters."""

    def test_factory_returns_fresh_instances(self) -> None:
        a = Transaction.factory()
        b = Transaction.factory()
        assert a is not b
        assert a.end_to_end_id is None

    def test_setters_return_self(self) -> None:
        tx = Transaction.factory()
        assert tx.set_end_to_end_id("E2E") is tx
        assert tx.set_amount(1) is tx
        assert tx.set_amount_in_cents(100) is tx
        assert tx.set_transaction_identifier("M") is tx
        assert tx.set_signature_date("2023-01-01") is tx
        assert tx.set_debtor_name("N") is tx
        assert tx.set_debtor_iban("I") is tx
        assert tx.set_debtor_bic("B") is tx
        assert tx.set_transaction_description("D") is tx

    def test_amount_is_stored_with_two_decimals(self) -> None:
        assert Transaction.factory().set_amount(12.5).amount == "12.50"
        assert Transaction.factory().set_amount("7").amount == "7.00"
        assert Transaction.factory().set_amount_in_cents(1999).amount == "19.99"

    def test_debtor_name_is_sanitized(self) -> None:
        tx = Transaction.factory().set_debtor_name("Zoë Müller" + "x" * 100)
        assert tx.debtor_name.startswith("Zoe Muller")
        assert len(tx.debtor_name) == 70

    def test_description_is_truncated_to_140(self) -> None:
        tx = Transaction.factory().set_transaction_description("d" * 200)
        assert tx.transaction_description == "d" * 140

    def test_debtor_side_fields_are_not_validated(self) -> None:
        tx = (
            Transaction.factory()
            .set_debtor_bic("not a bic")
            .set_debtor_iban("X" * 50)
            .set_signature_date("2021-02-30")
        )
        assert tx.debtor_bic == "not a bic"
        assert tx.debtor_iban == "X" * 50
        assert tx.signature_date == "2021-02-30"

    def test_pass_through_fields_drop_xml_control_characters(self) -> None:
        tx = (
            Transaction.factory()
            .set_end_to_end_id("E2E\x0b-1")
            .set_transaction_identifier("MANDATE\x00-1")
            .set_signature_date("2023-09-01\x1f")
            .set_debtor_iban("NL02RABO\x0c0123456789")
            .set_debtor_bic("RABO\x08NL2U")
        )
        assert tx.end_to_end_id == "E2E-1"
        assert tx.transaction_identifier == "MANDATE-1"
        assert tx.signature_date == "2023-09-01"
        assert tx.debtor_iban == "NL02RABO0123456789"
        assert tx.debtor_bic == "RABONL2U"

    def test_build_returns_frozen_copy(self) -> None:
        tx = create_test_transaction()
        record = tx.build()
        assert isinstance(record, DirectDebitTransaction)
        assert record.end_to_end_id == "E2E-TEST-001"
        assert record.amount == "25.00"
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.amount = "1.00"  # type: ignore[misc]


class TestDirectDebitBuilder:
    """Tests for DirectDebit setters and build()."""

    def test_setters_validate_immediately(self) -> None:
        dd = DirectDebit()
        with pytest.raises(FormatError):
            dd.set_creditor_bic("AB12")
        with pytest.raises(FormatError):
            dd.set_creditor_iban("")
        with pytest.raises(FormatError):
            dd.set_creditor_iban("N" * 35)
        with pytest.raises(FormatError):
            dd.set_payment_info_id("P" * 36)
        with pytest.raises(FormatError):
            dd.set_payment_info_id("")
        with pytest.raises(FormatError):
            dd.set_message_identification("")
        with pytest.raises(FormatError):
            dd.set_message_identification("M" * 36)
        with pytest.raises(FormatError):
            dd.set_requested_execution_date("2021-02-29")
        with pytest.raises(FormatError):
            dd.set_creditor_id("NL00ZZZ123456780000")

    def test_failed_setter_leaves_previous_value(self) -> None:
        dd = DirectDebit().set_creditor_bic("ABNANL2A")
        with pytest.raises(FormatError):
            dd.set_creditor_bic("AB12")
        assert dd.creditor_bic == "ABNANL2A"

    def test_creditor_id_from_registration(self) -> None:
        dd = DirectDebit().set_creditor_id_from_registration("12345678")
        assert dd.creditor_id == "NL69ZZZ123456780000"

    def test_initiating_party_name_is_sanitized(self) -> None:
        dd = DirectDebit().set_initiating_party_name("Vereniging Élan " + "z" * 80)
        assert dd.initiating_party_name.startswith("Vereniging Elan ")
        assert len(dd.initiating_party_name) == 70

    def test_add_transaction_rejects_other_objects(self) -> None:
        dd = DirectDebit()
        with pytest.raises(FormatError):
            dd.add_transaction("not a transaction")  # type: ignore[arg-type]
        with pytest.raises(FormatError):
            dd.add_transaction(DirectDebitTransaction())  # type: ignore[arg-type]

    def test_transactions_keep_insertion_order(self) -> None:
        dd = create_test_direct_debit()
        for i in range(3):
            dd.add_transaction(create_test_transaction(end_to_end_id=f"E2E-{i}"))
        assert [tx.end_to_end_id for tx in dd.transactions] == ["E2E-0", "E2E-1", "E2E-2"]
        assert [tx.end_to_end_id for tx in dd.build().transactions] == ["E2E-0", "E2E-1", "E2E-2"]

    def test_build_lists_missing_fields(self) -> None:
        with pytest.raises(FormatError) as exc:
            DirectDebit().set_message_identification("MSG-1").build()
        message = str(exc.value)
        assert "message_identification" not in message
        for name in ("creditor_id", "initiating_party_name", "creditor_iban", "creditor_bic", "payment_info_id"):
            assert name in message

    def test_build_produces_immutable_snapshot(self) -> None:
        dd = create_test_direct_debit().add_transaction(create_test_transaction())
        message = dd.build()

        assert isinstance(message, DirectDebitMessage)
        assert isinstance(message.transactions, tuple)
        assert message.number_of_transactions == 1

        dd.add_transaction(create_test_transaction(end_to_end_id="E2E-LATER"))
        dd.set_message_identification("MSG-CHANGED")
        assert message.number_of_transactions == 1
        assert message.message_identification == "MSG-TEST-001"

        with pytest.raises(dataclasses.FrozenInstanceError):
            message.creditor_bic = "RABONL2U"  # type: ignore[misc]

    def test_empty_transaction_list_is_allowed(self) -> None:
        assert create_test_direct_debit().build().number_of_transactions == 0


class TestDirectDebitMessage:
    """Tests for direct construction of the frozen aggregate."""

    def _kwargs(self, **overrides: object) -> dict[str, object]:
        kwargs: dict[str, object] = dict(
            message_identification="MSG-1",
            creditor_id="NL69ZZZ123456780000",
            initiating_party_name="Sportclub De Ploeg",
            creditor_iban="NL91ABNA0417164300",
            creditor_bic="ABNANL2A",
            payment_info_id="PMT-1",
            requested_execution_date="2024-05-06",
        )
        kwargs.update(overrides)
        return kwargs

    def test_list_of_transactions_is_frozen_to_tuple(self) -> None:
        message = DirectDebitMessage(**self._kwargs(transactions=[DirectDebitTransaction(end_to_end_id="A")]))
        assert message.transactions == (DirectDebitTransaction(end_to_end_id="A"),)

    def test_invalid_fields_are_rejected(self) -> None:
        with pytest.raises(FormatError):
            DirectDebitMessage(**self._kwargs(creditor_bic="AB12"))
        with pytest.raises(FormatError):
            DirectDebitMessage(**self._kwargs(initiating_party_name="   "))
        with pytest.raises(FormatError):
            DirectDebitMessage(**self._kwargs(transactions=("nope",)))

    def test_free_text_is_sanitized(self) -> None:
        message = DirectDebitMessage(**self._kwargs(initiating_party_name="Café " + "c" * 100))
        assert message.initiating_party_name.startswith("Cafe ")
        assert len(message.initiating_party_name) == 70

        tx = DirectDebitTransaction(debtor_name="Hélène", transaction_description="é" * 200)
        assert tx.debtor_name == "Helene"
        assert tx.transaction_description == "e" * 140

    def test_control_characters_are_dropped_from_transactions(self) -> None:
        tx = DirectDebitTransaction(end_to_end_id="E2E\x0b1", debtor_bic="RABO\x0bNL2U", debtor_name="Jan\x0bsen")
        assert tx.end_to_end_id == "E2E1"
        assert tx.debtor_bic == "RABONL2U"
        assert tx.debtor_name == "Jansen"

    def test_creditor_id_is_normalized(self) -> None:
        message = DirectDebitMessage(**self._kwargs(creditor_id=" nl69zzz123456780000"))
        assert message.creditor_id == "NL69ZZZ123456780000"
        assert DirectDebit().set_creditor_id("nl69zzz123456780000 ").creditor_id == "NL69ZZZ123456780000"

    def test_identifiers_with_control_characters_are_rejected(self) -> None:
        with pytest.raises(FormatError):
            DirectDebitMessage(**self._kwargs(message_identification="MSG\x0b1"))
