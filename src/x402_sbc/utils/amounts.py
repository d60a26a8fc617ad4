"""
Decimal amount conversion
"""


def decimal_to_atomic(amount: str, decimals: int) -> int:
    """
    Convert a decimal amount string to atomic units.

    The fractional part is truncated or right-padded to ``decimals`` digits.

    Args:
        amount: Decimal string, e.g. "0.001"
        decimals: Token precision

    Returns:
        Amount in atomic units

    Raises:
        ValueError: If amount is not a plain decimal number
    """
    whole, _, fraction = amount.strip().partition(".")
    if not (whole or fraction) or not (whole + fraction).isdigit():
        raise ValueError(f"Invalid decimal amount: {amount!r}")
    fraction = fraction[:decimals].ljust(decimals, "0")
    digits = (whole + fraction).lstrip("0")
    return int(digits) if digits else 0
