"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from moneymngr.domain.errors import InvalidAmount

# Smallest stored unit; amounts are kept with two decimal places
CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₹123.45", "Rs.123.45", "INR 123.45"
    - "1,234.56" and Indian grouping "1,23,456.00"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidAmount: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise InvalidAmount("Empty amount string")

    amount_str = str(amount_str).strip()

    # Remove currency markers
    amount_str = re.sub(r"^(?:INR|Rs\.?)", "", amount_str, flags=re.IGNORECASE)
    amount_str = re.sub(r"[₹$€£¥]", "", amount_str)

    # Thousands separators
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise InvalidAmount(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise InvalidAmount(f"Could not parse amount '{amount_str}'")
    return amount


def require_positive(amount: Decimal | None) -> Decimal:
    """Return ``amount`` if it is a positive number of whole cents.

    Amounts are stored with two decimal places, so anything finer is refused
    rather than rounded.

    Raises:
        InvalidAmount: If amount is missing, zero, negative or has more than
            two decimal places
    """
    if amount is None:
        raise InvalidAmount("Amount is required")
    if not amount.is_finite():
        raise InvalidAmount(f"Amount {amount} is not a number")
    if amount <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    if amount != amount.quantize(CENT):
        raise InvalidAmount(f"Amount {amount} has more than two decimal places")
    return amount
