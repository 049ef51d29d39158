from .batch_json import (
    BatchDeserializeError,
    direct_debit_from_dict,
    direct_debit_from_json,
    load_batch,
    load_creditor_profile,
    transaction_from_dict,
)
from .pain008_to_directdebit import Pain008Extract, Pain008ParseError, extract_pain008_fields, pain008_xml_to_direct_debit

__all__ = [
    "BatchDeserializeError",
    "Pain008Extract",
    "Pain008ParseError",
    "direct_debit_from_dict",
    "direct_debit_from_json",
    "extract_pain008_fields",
    "load_batch",
    "load_creditor_profile",
    "pain008_xml_to_direct_debit",
    "transaction_from_dict",
]
