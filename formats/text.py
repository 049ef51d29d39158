"""
Reduce free text (names, remittance information) to what SEPA banks accept.

Accented Latin letters and ligatures are folded onto their base letters by
looking up the character's HTML named entity: an entity such as ``eacute``,
``oelig`` or ``Oslash`` is a base of one or two letters followed by a known
accent suffix, and the base is kept. Characters an XML document cannot hold
(C0 controls other than tab, LF and CR, lone surrogates, U+FFFE and U+FFFF)
are dropped. Everything else passes through unchanged.
"""

from __future__ import annotations

import re
from html.entities import codepoint2name
from typing import Optional


MAX_NAME_LENGTH = 70
MAX_REMITTANCE_LENGTH = 140

_ACCENTED_ENTITY_RE = re.compile(
    r"^([a-z]{1,2})(acute|cedil|circ|grave|lig|orn|ring|slash|th|tilde|uml)$",
    re.IGNORECASE,
)
_XML_ILLEGAL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _build_fold_table() -> dict[int, str]:
    table: dict[int, str] = {}
    for codepoint, name in codepoint2name.items():
        m = _ACCENTED_ENTITY_RE.match(name)
        if m:
            table[codepoint] = m.group(1)
    return table


_FOLD_TABLE = _build_fold_table()


def fold_diacritics(text: str) -> str:
    """'Crème Brûlée' -> 'Creme Brulee', 'Œuvre' -> 'OEuvre'."""

    return text.translate(_FOLD_TABLE)


def has_xml_illegal_characters(text: str) -> bool:
    return _XML_ILLEGAL_RE.search(text) is not None


def strip_xml_illegal(text: str) -> str:
    """'Jan\\x0bsen' -> 'Jansen'."""

    return _XML_ILLEGAL_RE.sub("", text)


def sanitize(text: Optional[str], max_length: int) -> str:
    """
    Drop characters XML cannot carry, fold diacritics, then truncate to
    ``max_length`` characters. Never raises on unsupported characters;
    whatever does not fit is dropped.
    """

    if text is None:
        return ""
    return fold_diacritics(strip_xml_illegal(str(text)))[:max_length]
