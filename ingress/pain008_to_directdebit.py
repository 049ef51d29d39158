from __future__ import annotations

from dataclasses import dataclass
import importlib
from typing import Any, Optional, Union

from directdebit import DirectDebitMessage, DirectDebitTransaction
from formats.validation import FormatError


class Pain008ParseError(ValueError):
    """Raised when required pain.008 fields cannot be extracted."""


def _lxml_etree() -> Any:
    """
    Runtime import so this module can be imported in environments where lxml is
    not installed (e.g., for type-checking or partial tooling).
    """

    try:
        return importlib.import_module("lxml.etree")
    except ModuleNotFoundError as e:
        raise RuntimeError("lxml is required. Install it (e.g., `pip install lxml`).") from e


def _local_path(*tags: str) -> str:
    # Namespace-agnostic: match on local-name() so any pain.008 namespace works.
    return "/".join(f"*[local-name()='{tag}']" for tag in tags)


def _first_text(node: Any, *tags: str) -> Optional[str]:
    vals = node.xpath("./" + _local_path(*tags) + "/text()")
    if not vals:
        return None
    txt = str(vals[0]).strip()
    return txt or None


@dataclass(frozen=True, slots=True)
class Pain008Extract:
    msg_id: Optional[str]
    creation_datetime: Optional[str]
    number_of_transactions: Optional[str]
    initiating_party_name: Optional[str]
    payment_info_id: Optional[str]
    payment_method: Optional[str]
    sequence_type: Optional[str]
    requested_collection_date: Optional[str]
    creditor_name: Optional[str]
    creditor_iban: Optional[str]
    creditor_bic: Optional[str]
    creditor_id: Optional[str]
    transactions: tuple[DirectDebitTransaction, ...]


def _extract_transaction(node: Any) -> DirectDebitTransaction:
    amount_nodes = node.xpath("./" + _local_path("InstdAmt"))
    currency = amount_nodes[0].get("Ccy") if amount_nodes else None
    if currency is not None and currency != "EUR":
        raise Pain008ParseError(f"Unsupported InstdAmt currency {currency!r}; only EUR is supported.")

    return DirectDebitTransaction(
        end_to_end_id=_first_text(node, "PmtId", "EndToEndId"),
        amount=_first_text(node, "InstdAmt"),
        transaction_identifier=_first_text(node, "DrctDbtTx", "MndtRltdInf", "MndtId"),
        signature_date=_first_text(node, "DrctDbtTx", "MndtRltdInf", "DtOfSgntr"),
        debtor_bic=_first_text(node, "DbtrAgt", "FinInstnId", "BIC"),
        debtor_name=_first_text(node, "Dbtr", "Nm"),
        debtor_iban=_first_text(node, "DbtrAcct", "Id", "IBAN"),
        transaction_description=_first_text(node, "RmtInf", "Ustrd"),
    )


def extract_pain008_fields(xml: Union[str, bytes]) -> Pain008Extract:
    """
    Extract group header, payment information and transactions from a
    pain.008.001.02 document. Only the first PmtInf block is read.
    """

    if isinstance(xml, str):
        xml_bytes = xml.encode("utf-8")
    else:
        xml_bytes = xml

    etree = _lxml_etree()
    parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
    try:
        root = etree.fromstring(xml_bytes, parser=parser)
    except etree.XMLSyntaxError as e:
        raise Pain008ParseError(f"Invalid XML: {e}") from e

    initn = root.xpath("/" + _local_path("Document", "CstmrDrctDbtInitn"))
    if not initn:
        raise Pain008ParseError("Missing Document/CstmrDrctDbtInitn (not a pain.008 document).")
    initn = initn[0]

    pmt_infs = initn.xpath("./" + _local_path("PmtInf"))
    if not pmt_infs:
        raise Pain008ParseError("Missing PmtInf (no payment information block found).")
    pmt_inf = pmt_infs[0]

    transactions = tuple(
        _extract_transaction(tx) for tx in pmt_inf.xpath("./" + _local_path("DrctDbtTxInf"))
    )

    return Pain008Extract(
        msg_id=_first_text(initn, "GrpHdr", "MsgId"),
        creation_datetime=_first_text(initn, "GrpHdr", "CreDtTm"),
        number_of_transactions=_first_text(initn, "GrpHdr", "NbOfTxs"),
        initiating_party_name=_first_text(initn, "GrpHdr", "InitgPty", "Nm"),
        payment_info_id=_first_text(pmt_inf, "PmtInfId"),
        payment_method=_first_text(pmt_inf, "PmtMtd"),
        sequence_type=_first_text(pmt_inf, "PmtTpInf", "SeqTp"),
        requested_collection_date=_first_text(pmt_inf, "ReqdColltnDt"),
        creditor_name=_first_text(pmt_inf, "Cdtr", "Nm"),
        creditor_iban=_first_text(pmt_inf, "CdtrAcct", "Id", "IBAN"),
        creditor_bic=_first_text(pmt_inf, "CdtrAgt", "FinInstnId", "BIC"),
        creditor_id=_first_text(pmt_inf, "CdtrSchmeId", "Id", "PrvtId", "Othr", "Id"),
        transactions=transactions,
    )


def pain008_xml_to_direct_debit(xml: Union[str, bytes]) -> DirectDebitMessage:
    """
    Convert a pain.008.001.02 XML document back into a DirectDebitMessage.
    """

    data = extract_pain008_fields(xml)

    missing = []
    if not data.msg_id:
        missing.append("GrpHdr/MsgId")
    if not data.number_of_transactions:
        missing.append("GrpHdr/NbOfTxs")
    if not data.initiating_party_name:
        missing.append("GrpHdr/InitgPty/Nm")
    if not data.payment_info_id:
        missing.append("PmtInf/PmtInfId")
    if not data.requested_collection_date:
        missing.append("PmtInf/ReqdColltnDt")
    if not data.creditor_iban:
        missing.append("PmtInf/CdtrAcct/Id/IBAN")
    if not data.creditor_bic:
        missing.append("PmtInf/CdtrAgt/FinInstnId/BIC")
    if not data.creditor_id:
        missing.append("PmtInf/CdtrSchmeId/Id/PrvtId/Othr/Id")
    if missing:
        raise Pain008ParseError("Missing required pain.008 fields: " + ", ".join(missing))

    if data.payment_method != "DD":
        raise Pain008ParseError(f"Unsupported PmtMtd {data.payment_method!r}; expected 'DD'.")
    if data.number_of_transactions != str(len(data.transactions)):
        raise Pain008ParseError(
            f"GrpHdr/NbOfTxs is {data.number_of_transactions} but {len(data.transactions)} DrctDbtTxInf found."
        )

    try:
        return DirectDebitMessage(
            message_identification=data.msg_id,
            creditor_id=data.creditor_id,
            initiating_party_name=data.initiating_party_name,
            creditor_iban=data.creditor_iban,
            creditor_bic=data.creditor_bic,
            payment_info_id=data.payment_info_id,
            requested_execution_date=data.requested_collection_date,
            transactions=data.transactions,
        )
    except FormatError as e:
        raise Pain008ParseError(f"Invalid pain.008 field value: {e}") from e
