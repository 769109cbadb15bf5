"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")

# Ledger columns are DECIMAL(15, 2)
MAX_INTEGER_DIGITS = 13

# ISO codes that show up in MoMo SMS bodies and exports
_CURRENCY_CODES = re.compile(
    r"(?<![A-Za-z])(?:RWF|UGX|KES|TZS|GHS|NGN|XAF|XOF|ZMW|USD|EUR|GBP|FRW)(?![A-Za-z])",
    re.IGNORECASE,
)
_CURRENCY_SYMBOLS = re.compile(r"[$€£¥₦]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal rounded to cents.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "2,000 RWF"
    - "UGX 15,000"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount quantized to two decimal places

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = _CURRENCY_SYMBOLS.sub("", amount_str)
    amount_str = _CURRENCY_CODES.sub("", amount_str)

    # Remove thousands separators and inner spaces
    amount_str = amount_str.replace(",", "").replace(" ", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        # Exponents beyond the context precision fail here, not at Decimal()
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount '{amount_str}' is out of range")

    return -amount if is_negative else amount


def exceeds_ledger_precision(amount: Decimal) -> bool:
    """Return True if the amount has more integer digits than a ledger column holds."""
    return amount != 0 and amount.adjusted() >= MAX_INTEGER_DIGITS
