"""
Render a DirectDebitMessage as an ISO 20022 pain.008.001.02 document.

Element order is fixed by the schema and banks reject reordered files, so each
block is written by its own function in the order the schema lists it:

    Document/CstmrDrctDbtInitn
        GrpHdr              _append_group_header
        PmtInf              _append_payment_information
            DrctDbtTxInf    append_transaction (one per transaction)
"""

from __future__ import annotations

import importlib
from datetime import datetime
from typing import Any, Optional, Union

from directdebit import DirectDebit, DirectDebitMessage, DirectDebitTransaction
from directdebit.models import CURRENCY


PAIN008_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:pain.008.001.02"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

PAYMENT_METHOD = "DD"
SERVICE_LEVEL = "SEPA"
LOCAL_INSTRUMENT = "CORE"
SEQUENCE_TYPE = "OOFF"
SCHEME_NAME = "SEPA"


def _lxml_etree() -> Any:
    try:
        return importlib.import_module("lxml.etree")
    except ModuleNotFoundError as e:
        raise RuntimeError("lxml is required. Install it (e.g., `pip install lxml`).") from e


def _sub(etree: Any, parent: Any, ns: Optional[str], *path: str, text: Optional[str] = None) -> Any:
    """Create the chain parent/path[0]/path[1]/... and return the innermost element."""

    node = parent
    for tag in path:
        node = etree.SubElement(node, etree.QName(ns, tag) if ns else tag)
    if text is not None:
        node.text = text
    return node


def format_creation_datetime(created_at: datetime) -> str:
    return created_at.strftime("%Y-%m-%dT%H:%M:%S")


def _append_group_header(etree: Any, root: Any, ns: str, message: DirectDebitMessage, created_at: datetime) -> Any:
    grp_hdr = _sub(etree, root, ns, "GrpHdr")  # ISO 1.0
    _sub(etree, grp_hdr, ns, "MsgId", text=message.message_identification)  # 1.1
    _sub(etree, grp_hdr, ns, "CreDtTm", text=format_creation_datetime(created_at))  # 1.2
    _sub(etree, grp_hdr, ns, "NbOfTxs", text=str(message.number_of_transactions))  # 1.6
    _sub(etree, grp_hdr, ns, "InitgPty", "Nm", text=message.initiating_party_name)  # 1.8
    return grp_hdr


def _append_payment_information(etree: Any, root: Any, ns: str, message: DirectDebitMessage) -> Any:
    pmt_inf = _sub(etree, root, ns, "PmtInf")  # ISO 2.0
    _sub(etree, pmt_inf, ns, "PmtInfId", text=message.payment_info_id)  # 2.1
    _sub(etree, pmt_inf, ns, "PmtMtd", text=PAYMENT_METHOD)  # 2.2

    pmt_tp_inf = _sub(etree, pmt_inf, ns, "PmtTpInf")
    _sub(etree, pmt_tp_inf, ns, "SvcLvl", "Cd", text=SERVICE_LEVEL)  # 2.9
    _sub(etree, pmt_tp_inf, ns, "LclInstrm", "Cd", text=LOCAL_INSTRUMENT)  # 2.11, 2.12
    _sub(etree, pmt_tp_inf, ns, "SeqTp", text=SEQUENCE_TYPE)  # 2.14

    _sub(etree, pmt_inf, ns, "ReqdColltnDt", text=message.requested_execution_date)  # 2.18
    _sub(etree, pmt_inf, ns, "Cdtr", "Nm", text=message.initiating_party_name)  # 2.19
    _sub(etree, pmt_inf, ns, "CdtrAcct", "Id", "IBAN", text=message.creditor_iban)  # 2.20
    _sub(etree, pmt_inf, ns, "CdtrAgt", "FinInstnId", "BIC", text=message.creditor_bic)  # 2.21

    # 2.27
    othr = _sub(etree, pmt_inf, ns, "CdtrSchmeId", "Id", "PrvtId", "Othr")
    _sub(etree, othr, ns, "Id", text=message.creditor_id)
    _sub(etree, othr, ns, "SchmeNm", "Prtry", text=SCHEME_NAME)
    return pmt_inf


def append_transaction(parent: Any, tx: DirectDebitTransaction, *, ns: Optional[str] = PAIN008_NAMESPACE) -> Any:
    """
    Append one DrctDbtTxInf block to ``parent`` and return ``parent``.

    Values are written verbatim; they were validated/sanitized when set.
    """

    etree = _lxml_etree()

    node = _sub(etree, parent, ns, "DrctDbtTxInf")  # ISO 2.28
    _sub(etree, node, ns, "PmtId", "EndToEndId", text=tx.end_to_end_id)  # 2.29, 2.31
    instd_amt = _sub(etree, node, ns, "InstdAmt", text=tx.amount)  # 2.44
    instd_amt.set("Ccy", CURRENCY)

    mndt = _sub(etree, node, ns, "DrctDbtTx", "MndtRltdInf")  # 2.46, 2.47
    _sub(etree, mndt, ns, "MndtId", text=tx.transaction_identifier)  # 2.48
    _sub(etree, mndt, ns, "DtOfSgntr", text=tx.signature_date)  # 2.49

    _sub(etree, node, ns, "DbtrAgt", "FinInstnId", "BIC", text=tx.debtor_bic)
    _sub(etree, node, ns, "Dbtr", "Nm", text=tx.debtor_name)  # 2.72
    _sub(etree, node, ns, "DbtrAcct", "Id", "IBAN", text=tx.debtor_iban)  # 2.73
    _sub(etree, node, ns, "RmtInf", "Ustrd", text=tx.transaction_description)  # 2.89
    return parent


def transaction_to_xml(tx: DirectDebitTransaction, *, pretty_print: bool = False) -> str:
    """Partial XML for a single transaction, wrapped in an un-namespaced <Transaction>."""

    etree = _lxml_etree()
    wrapper = etree.Element("Transaction")
    append_transaction(wrapper, tx, ns=None)
    body: str = etree.tostring(wrapper, encoding="unicode", pretty_print=pretty_print)
    return f"{XML_DECLARATION}\n{body}"


def direct_debit_to_pain008_xml(
    message: Union[DirectDebitMessage, DirectDebit],
    *,
    message_namespace: str = PAIN008_NAMESPACE,
    created_at: Optional[datetime] = None,
    pretty_print: bool = False,
) -> str:
    """
    Generate a pain.008.001.02 XML document from a DirectDebitMessage.

    Notes:
    - ``created_at`` becomes GrpHdr/CreDtTm (local time, no offset). It defaults
      to ``datetime.now()``; pass a fixed value for reproducible output.
    - A DirectDebit builder is accepted and built first.
    - Single payment information block, sequence type OOFF, currency EUR.
    """

    if isinstance(message, DirectDebit):
        message = message.build()
    if not isinstance(message, DirectDebitMessage):
        raise TypeError("message must be a DirectDebitMessage or DirectDebit.")

    etree = _lxml_etree()

    ns = message_namespace
    nsmap = {None: ns, "xsi": XSI_NAMESPACE}

    if created_at is None:
        created_at = datetime.now()

    doc = etree.Element(etree.QName(ns, "Document"), nsmap=nsmap)
    root = etree.SubElement(doc, etree.QName(ns, "CstmrDrctDbtInitn"))

    _append_group_header(etree, root, ns, message, created_at)
    pmt_inf = _append_payment_information(etree, root, ns, message)
    for tx in message.transactions:
        append_transaction(pmt_inf, tx, ns=ns)

    body: str = etree.tostring(doc, encoding="unicode", pretty_print=pretty_print)
    return f"{XML_DECLARATION}\n{body}"
