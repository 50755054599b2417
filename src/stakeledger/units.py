"""Conversion between human-readable token amounts and integer base units."""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

Number = Union[int, str, Decimal]


def parse_units(value: Number, decimals: int = 18) -> int:
    """
    Convert a decimal amount into integer base units.

    Args:
        value: Amount in whole tokens, e.g. "10000" or "13.5"
        decimals: Number of decimals of the token

    Returns:
        Amount in base units

    Raises:
        ValueError: If the value is malformed or has more precision than the token
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a token amount: {value!r}")
    try:
        amount = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise ValueError(f"Not a token amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a token amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{value} has more than {decimals} decimals")
        return int(scaled)


def format_units(amount: int, decimals: int = 18) -> str:
    """Render base units as a decimal string without trailing zeros."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10 ** decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}"
