from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, DecimalException, InvalidOperation
from typing import Union

from .validation import FormatError


_CENT = Decimal("0.01")


def _to_two_decimals(value: Decimal, amount: object) -> str:
    if not value.is_finite():
        raise FormatError(f"Invalid amount: {amount!r}")
    # enough precision for every integer digit, two decimals and a rounding carry
    context = Context(prec=max(value.adjusted(), 0) + 4, rounding=ROUND_HALF_UP)
    try:
        return format(value.quantize(_CENT, context=context), "f")
    except DecimalException as e:
        raise FormatError(f"Invalid amount: {amount!r}") from e


def from_minor_units(amount_in_cents: int) -> str:
    """Format an integer amount in cents as a monetary value, e.g. 12345 -> '123.45'."""

    try:
        cents = int(amount_in_cents)
    except (TypeError, ValueError, OverflowError) as e:
        raise FormatError(f"Invalid amount in cents: {amount_in_cents!r}") from e
    return _to_two_decimals(Decimal(f"{cents}e-2"), amount_in_cents)


def from_decimal(amount: Union[float, int, str, Decimal]) -> str:
    """
    Format a decimal amount with exactly two decimals, '.' as separator and no
    thousands grouping. Floats go through str() so 0.1 stays 0.1.
    """

    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount))
        except InvalidOperation as e:
            raise FormatError(f"Invalid amount: {amount!r}") from e
    return _to_two_decimals(value, amount)
