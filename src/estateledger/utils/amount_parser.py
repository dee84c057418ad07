"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Optional, Union

# Decimal places stored for money/area columns and for per-area rates
MONEY_PLACES = 2
RATE_PLACES = 4


def parse_amount(
    amount: Union[str, int, float, Decimal], max_places: Optional[int] = None
) -> Decimal:
    """Parse an amount into a Decimal.

    Handles various formats:
    - "1234.50"
    - "₹1,234.50"
    - "-250"
    - "(250)" (negative in parentheses)

    Numbers are accepted as-is; floats go through ``str`` so ``0.1`` stays
    ``Decimal("0.1")``.

    Args:
        amount: Amount string or number
        max_places: Most decimal places allowed; trailing zeros do not count

    Returns:
        Decimal amount

    Raises:
        ValueError: If the amount cannot be parsed, is not finite, or has
            more than ``max_places`` decimal places
    """
    if isinstance(amount, bool):
        raise ValueError(f"Could not parse amount '{amount}'")

    if isinstance(amount, (int, float, Decimal)):
        value = Decimal(str(amount))
    else:
        if amount is None or not str(amount).strip():
            raise ValueError("Empty amount string")

        amount_str = str(amount).strip()

        # Handle parentheses notation (negative)
        is_negative = False
        if amount_str.startswith("(") and amount_str.endswith(")"):
            is_negative = True
            amount_str = amount_str[1:-1]

        # Remove currency symbols and thousands separators
        amount_str = re.sub(r"[$€£¥₹]", "", amount_str)
        amount_str = amount_str.replace(",", "").strip()

        try:
            value = Decimal(amount_str)
        except InvalidOperation as e:
            raise ValueError(f"Could not parse amount '{amount_str}': {e!r}")
        if is_negative:
            value = -value

    if not value.is_finite():
        raise ValueError(f"Amount must be a finite number, got '{amount}'")
    if max_places is not None and value.normalize().as_tuple().exponent < -max_places:
        raise ValueError(f"Amount '{amount}' has more than {max_places} decimal places")
    return value
