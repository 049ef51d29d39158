"""
Egress: turn direct debit messages into the XML files banks accept.
"""

from .directdebit_to_pain008 import (
    PAIN008_NAMESPACE,
    append_transaction,
    direct_debit_to_pain008_xml,
    transaction_to_xml,
)

__all__ = [
    "PAIN008_NAMESPACE",
    "append_transaction",
    "direct_debit_to_pain008_xml",
    "transaction_to_xml",
]
