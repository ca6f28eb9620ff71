"""Money helpers.

Every amount in the back office is a ``decimal.Decimal``. Floats are never used
for financial decisions; anything that arrives as a float is converted through
its string form first.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable

from config import CURRENCY_SYMBOL
from services.exceptions import PaymentValidationError

ZERO = Decimal("0")

# Matches the scale of the Numeric(14, 3) money columns.
MONEY_PLACES = 3


def to_money(value, field: str = "amount") -> Decimal:
    """Parse ``value`` into a Decimal suitable for storage.

    Raises PaymentValidationError for missing, non-numeric, non-finite values
    and for values with more precision than the money columns keep.
    """
    if value is None or isinstance(value, bool):
        raise PaymentValidationError(f"{field} is required")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise PaymentValidationError(f"{field} must be a number, got {value!r}")
    if not amount.is_finite():
        raise PaymentValidationError(f"{field} must be a finite number")
    if amount.as_tuple().exponent < -MONEY_PLACES and amount != amount.quantize(Decimal(1).scaleb(-MONEY_PLACES)):
        raise PaymentValidationError(f"{field} supports at most {MONEY_PLACES} decimal places")
    return amount


def add(a: Decimal, b: Decimal) -> Decimal:
    return a + b


def subtract(a: Decimal, b: Decimal) -> Decimal:
    return a - b


def compare(a: Decimal, b: Decimal) -> int:
    """-1, 0 or 1, like a classic compareTo."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def money_min(a: Decimal, b: Decimal) -> Decimal:
    return a if a <= b else b


def money_sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def is_zero(amount: Decimal) -> bool:
    return amount == ZERO


def is_negative(amount: Decimal) -> bool:
    return amount < ZERO


def format_money(amount, symbol: str = CURRENCY_SYMBOL) -> str:
    """Display form: symbol, thousands separators, at least two decimals.

    >>> format_money(Decimal("1234567.5"), symbol="$")
    '$ 1,234,567.50'
    """
    if amount is None:
        amount = ZERO
    amount = Decimal(amount)
    places = max(2, -amount.normalize().as_tuple().exponent) if amount != ZERO else 2
    places = min(places, MONEY_PLACES)
    sign = "-" if amount < ZERO else ""
    return f"{sign}{symbol} {abs(amount):,.{places}f}"
