"""Human-readable order identifiers printed on receipts"""

import secrets

LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"  # no I, O
DIGITS = "0123456789"
ALPHANUMERIC = LETTERS + DIGITS


def generate_order_id(prefix: str = "SAITM") -> str:
    """
    Generate prefix + 4 characters with at least one letter and one digit.

    Example: SAITM4F7X
    """
    chars = [
        secrets.choice(LETTERS),
        secrets.choice(DIGITS),
        secrets.choice(ALPHANUMERIC),
        secrets.choice(ALPHANUMERIC),
    ]
    secrets.SystemRandom().shuffle(chars)
    return prefix + "".join(chars)
