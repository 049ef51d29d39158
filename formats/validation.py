from __future__ import annotations

import re
from datetime import date
from typing import Any

from .text import has_xml_illegal_characters


MAX_IBAN_LENGTH = 34
MAX_IDENTIFIER_LENGTH = 35

_BIC_RE = re.compile(r"^[a-z]{4}[a-z]{2}[0-9a-z]{2}([0-9a-z]{3})?\Z", re.IGNORECASE)
_DATE_PART_RE = re.compile(r"[0-9]+")


class FormatError(ValueError):
    """Raised when a field value does not satisfy the SEPA format rules."""


def validate_currency(code: Any) -> str:
    """
    Accept any 3-character currency code. No ISO 4217 membership check.
    """

    if not isinstance(code, str) or len(code) != 3:
        raise FormatError(f"Invalid ISO currency code: {code!r}")
    return code


def validate_bic(code: Any) -> str:
    """
    BIC shape: 4 letter bank code, 2 letter country, 2 alphanumeric location,
    optional 3 alphanumeric branch. Case-insensitive.
    """

    if not isinstance(code, str) or not _BIC_RE.match(code):
        raise FormatError(f"Invalid BIC {code!r}. Accepted: 8 or 11 characters, e.g. 'ABNANL2A' or 'ABNANL2AXXX'.")
    return code


def validate_iban(value: Any) -> str:
    if not isinstance(value, str) or not value or len(value) > MAX_IBAN_LENGTH or has_xml_illegal_characters(value):
        raise FormatError(f"Invalid IBAN value. Accepted: min-length: 1, max-length: {MAX_IBAN_LENGTH}")
    return value


def validate_date(value: Any) -> str:
    """
    Validate a yyyy-mm-dd calendar date (leap years included) and return it unchanged.
    Only ASCII digits are accepted.
    """

    if not isinstance(value, str):
        raise FormatError(f"Invalid date {value!r}. Accepted format: yyyy-mm-dd")
    parts = value.split("-")
    if len(parts) != 3 or not all(_DATE_PART_RE.fullmatch(p) for p in parts):
        raise FormatError(f"Invalid date {value!r}. Accepted format: yyyy-mm-dd")
    year, month, day = (int(p) for p in parts)
    try:
        date(year, month, day)
    except ValueError as e:
        raise FormatError(f"Invalid date {value!r}: {e}") from e
    return value


def validate_bounded_string(value: Any, max_length: int) -> str:
    if not isinstance(value, str) or not value or len(value) > max_length or has_xml_illegal_characters(value):
        raise FormatError(f"Invalid value {value!r}. Accepted: min-length: 1, max-length: {max_length}")
    return value
