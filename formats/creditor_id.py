"""
SEPA Creditor Scheme Identification helpers.

A creditor identifier is laid out as::

    CC kk BBB national-id
    |  |  |   +-- national identifier (Dutch: KvK number + 4 digit suffix)
    |  |  +------ creditor business code, ignored by the checksum (ZZZ by default)
    |  +--------- check digits, ISO 7064 MOD 97-10
    +------------ ISO 3166 country code

The check digits are computed over ``national-id + country + "00"`` with letters
replaced by numbers (A=10 ... Z=35), so "NL" contributes "2321".
"""

from __future__ import annotations

import re
from typing import Any, Union

from stdnum.iso7064 import mod_97_10

from .validation import MAX_IDENTIFIER_LENGTH, FormatError


DUTCH_COUNTRY_SUFFIX = "232100"  # "NL" -> 23 21, followed by the "00" check digit placeholder
DEFAULT_BUSINESS_CODE = "ZZZ"
DUTCH_NATIONAL_ID_SUFFIX = "0000"

_CREDITOR_ID_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{3}[A-Z0-9]+$")


def _digits(value: Union[int, str], field: str) -> str:
    text = str(value).strip()
    if not (text.isascii() and text.isdigit()):
        raise FormatError(f"{field} must be a non-empty string of digits, got {value!r}")
    return text


def compute_check_digits(registration_number: Union[int, str], location_code: Union[int, str]) -> str:
    """
    Two check digits for a Dutch creditor identifier, as described in the NVB
    implementation guidelines (SEPA B2B DD C2B, chapter 1.5.2).
    """

    kvk = _digits(registration_number, "registration_number")
    location = _digits(location_code, "location_code")
    value = int(kvk + location + DUTCH_COUNTRY_SUFFIX)
    return f"{98 - value % 97:02d}"


def calculate_creditor_id(registration_number: Union[int, str], location_code: Union[int, str]) -> str:
    """
    Build the Dutch creditor identifier 'NL' + check digits + 'ZZZ' + KvK + '0000'.

    >>> calculate_creditor_id("12345678", "0000")
    'NL69ZZZ123456780000'
    """

    check_digits = compute_check_digits(registration_number, location_code)
    kvk = _digits(registration_number, "registration_number")
    return f"NL{check_digits}{DEFAULT_BUSINESS_CODE}{kvk}{DUTCH_NATIONAL_ID_SUFFIX}"


def is_valid_creditor_id(creditor_id: Any) -> bool:
    """ISO 7064 MOD 97-10 check of any SEPA creditor identifier (business code excluded)."""

    if not isinstance(creditor_id, str):
        return False
    cid = creditor_id.strip().upper()
    if len(cid) > MAX_IDENTIFIER_LENGTH or not _CREDITOR_ID_RE.match(cid):
        return False
    return mod_97_10.is_valid(cid[7:] + cid[:4])


def validate_creditor_id(creditor_id: Any) -> str:
    """Return the identifier stripped and upper-cased, or raise ``FormatError``."""

    if not is_valid_creditor_id(creditor_id):
        raise FormatError(f"Invalid creditor identifier {creditor_id!r} (checksum or format mismatch)")
    return creditor_id.strip().upper()
