import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmount, InvalidReference

TWO_PLACES = Decimal("0.01")

# Money columns are DecimalField(max_digits=12, decimal_places=2).
MAX_AMOUNT = Decimal("9999999999.99")

# Plain decimal notation only: no signs, exponents, separators or currency marks.
_AMOUNT_RE = re.compile(r"^\d+(\.\d{1,2})?$")


def round2(value) -> Decimal:
    """Round a Decimal to two places using round-half-up."""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_amount(value, allow_negative=False, allow_zero=False) -> Decimal:
    """
    Strictly parses a currency amount.

    Accepts a Decimal, an int or a string in plain decimal notation with at most
    two fractional digits. Anything else (floats, "1e3", "₹50", "12.345", empty
    strings, zero unless `allow_zero`, anything above MAX_AMOUNT) raises
    InvalidAmount instead of being coerced.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount()

    if isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidAmount()
        amount = value
    elif isinstance(value, str):
        text = value.strip()
        negative = allow_negative and text.startswith("-")
        if negative:
            text = text[1:]
        if not _AMOUNT_RE.match(text):
            raise InvalidAmount()
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidAmount()
        if negative:
            amount = -amount
    else:
        raise InvalidAmount()

    if abs(amount) > MAX_AMOUNT:
        raise InvalidAmount(f"Amount must not exceed {MAX_AMOUNT}.")
    if amount != amount.quantize(TWO_PLACES):
        raise InvalidAmount()
    if (amount == 0 and not allow_zero) or (amount < 0 and not allow_negative):
        raise InvalidAmount()
    return round2(amount)


def validate_reference(value, field_name="reference"):
    """Payment references (UTR, UPI id) must be non-blank."""
    text = (value or "").strip()
    if not text:
        raise InvalidReference(f"A non-empty {field_name} is required.")
    return text
