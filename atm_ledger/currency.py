"""
Amount Handling Module

Proper Decimal precision for every balance and amount in the ledger.
NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
import re

# Set global decimal context for financial precision
getcontext().prec = 28

# Two fractional digits for every stored or logged amount
CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_amount(value) -> Decimal:
    """
    Convert a value to a Decimal rounded to cents

    Args:
        value: Decimal, int or numeric string (floats go through str())

    Returns:
        Decimal quantized to two fractional digits

    Raises:
        ValueError: If the value is not a finite number or needs more
            digits than the context precision at cent resolution
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot use {value!r} as an amount")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Cannot convert '{value}' to Decimal")
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {value}")
    try:
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context precision can hold at cent resolution
        raise ValueError(f"Amount {value} exceeds the supported precision")
    # Normalize -0.00
    return ZERO if value.is_zero() else value


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly two fractional digits"""
    return f"{to_amount(value):.2f}"


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert user-entered text to a Decimal amount, handling common formats

    Args:
        value: String representation of number, optionally with a currency symbol

    Returns:
        Decimal value rounded to cents

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Remove currency symbols and whitespace
    clean_value = re.sub(r'[^\d.,\-+]', '', value.strip())

    if ',' in clean_value and '.' in clean_value:
        # Both comma and dot - assume comma is thousands separator
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        parts = clean_value.split(',')
        if len(parts[1]) <= 2:  # Decimal separator
            clean_value = clean_value.replace(',', '.')
        else:  # Thousands separator
            clean_value = clean_value.replace(',', '')
    else:
        clean_value = clean_value.replace(',', '')

    if not clean_value:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    return to_amount(clean_value)


def parse_positive_amount(value: str) -> Decimal:
    """Parse raw input into a strictly positive amount"""
    amount = decimal_from_string(value)
    if amount <= ZERO:
        raise ValueError("Enter a valid positive amount")
    return amount
