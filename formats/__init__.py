"""
Field-level helpers for SEPA messages: validation, amounts, free text and
creditor identifiers. All functions are pure.
"""

from .creditor_id import (
    calculate_creditor_id,
    compute_check_digits,
    is_valid_creditor_id,
    validate_creditor_id,
)
from .currency import from_decimal, from_minor_units
from .text import MAX_NAME_LENGTH, MAX_REMITTANCE_LENGTH, fold_diacritics, sanitize, strip_xml_illegal
from .validation import (
    MAX_IBAN_LENGTH,
    MAX_IDENTIFIER_LENGTH,
    FormatError,
    validate_bic,
    validate_bounded_string,
    validate_currency,
    validate_date,
    validate_iban,
)

__all__ = [
    "FormatError",
    "MAX_IBAN_LENGTH",
    "MAX_IDENTIFIER_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_REMITTANCE_LENGTH",
    "calculate_creditor_id",
    "compute_check_digits",
    "fold_diacritics",
    "from_decimal",
    "from_minor_units",
    "is_valid_creditor_id",
    "sanitize",
    "strip_xml_illegal",
    "validate_bic",
    "validate_bounded_string",
    "validate_creditor_id",
    "validate_currency",
    "validate_date",
    "validate_iban",
]
