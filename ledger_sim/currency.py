"""
Currency and Amount Module

Amounts are always Decimal. Currency only drives display precision; there is
no conversion between currencies.
"""

from decimal import (
    Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, ROUND_HALF_UP
)
from enum import Enum
from typing import Optional, Union

# Balance arithmetic never rounds: a result that does not fit is refused
LEDGER_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact]
)

AmountLike = Union[Decimal, int, float, str]


class Currency(Enum):
    """ISO 4217 currency codes with display precision and symbol"""
    EUR = ("EUR", 2, "€")
    USD = ("USD", 2, "$")
    GBP = ("GBP", 2, "£")
    CHF = ("CHF", 2, "CHF")
    JPY = ("JPY", 0, "¥")

    def __init__(self, code: str, precision: int, symbol: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """Look up a currency by its ISO code (case-insensitive)"""
        try:
            return cls[code.strip().upper()]
        except KeyError:
            raise ValueError(f"Unsupported currency: {code}")


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert an amount to Decimal without going through binary floats

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Finite Decimal value

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError("Boolean is not a valid amount")

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps 0.1 as Decimal('0.1') instead of the float expansion
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Cannot convert {value!r} to an amount")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def quantize(amount: Decimal, currency: Currency) -> Decimal:
    """Round an amount to the currency's display precision"""
    return amount.quantize(Decimal('0.1') ** currency.precision, rounding=ROUND_HALF_UP)


def format_amount(amount: AmountLike, currency: Currency = Currency.EUR) -> str:
    """Format an amount for display, e.g. '1,250.00€'"""
    value = quantize(to_decimal(amount), currency)
    return f"{value:,.{currency.precision}f}{currency.symbol}"


def format_plain(amount: AmountLike, currency: Currency = Currency.EUR) -> str:
    """Format an amount without symbol or grouping, e.g. '1250.00'"""
    value = quantize(to_decimal(amount), currency)
    return f"{value:.{currency.precision}f}"


def exact_add(augend: Decimal, addend: Decimal) -> Optional[Decimal]:
    """
    Add two amounts without rounding

    Returns:
        The exact sum, or None if it needs more than LEDGER_CONTEXT's precision
    """
    try:
        return LEDGER_CONTEXT.add(augend, addend)
    except Inexact:
        return None


def exact_subtract(minuend: Decimal, subtrahend: Decimal) -> Optional[Decimal]:
    """Subtract two amounts without rounding; None if the result is inexact"""
    try:
        return LEDGER_CONTEXT.subtract(minuend, subtrahend)
    except Inexact:
        return None
