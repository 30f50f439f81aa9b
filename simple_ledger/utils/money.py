import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def money(value):
    """
    Normalize a numeric value to a 2-decimal float suitable for display
    and JSON serialization.

    - Accepts None, int, float, Decimal
    - Returns float rounded to 2 decimal places
    """

    if value is None:
        return 0.0

    # Convert to Decimal for safe rounding
    amount = Decimal(str(value)).quantize(
        Decimal("0.01"),
        rounding=ROUND_HALF_UP
    )

    return float(amount)


def parse_positive_amount(raw):
    """Parse user input into a positive float rounded to cents, or return None.

    Empty strings, non-numeric text, NaN, infinity and anything that rounds
    to 0.00 or less are all rejected.
    """
    if raw is None or isinstance(raw, bool):
        return None
    text = str(raw).strip().replace(",", "")
    if not text:
        return None
    try:
        amount = Decimal(text)
        if not amount.is_finite():
            return None
        amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    if amount <= 0:
        return None
    value = float(amount)
    if not math.isfinite(value):
        return None
    return value


def format_currency(value, symbol="₹"):
    """Currency figure with thousands separators, e.g. ₹1,250.50.

    Whole amounts drop the decimals (₹1,250).
    """
    amount = money(value)
    if amount == int(amount):
        body = f"{int(amount):,}"
    else:
        body = f"{amount:,.2f}"
    if amount < 0:
        return f"-{symbol}{body.lstrip('-')}"
    return f"{symbol}{body}"
