"""
Helpers for principal identifiers (administrators, merchants, customers).

Principals are opaque strings handed to us by an already-authenticated caller.
"""

from typing import Optional

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_null_principal(principal: Optional[str]) -> bool:
    """
    True for the "nobody" principal: None, blank strings and the zero address.
    """
    if principal is None:
        return True
    if not isinstance(principal, str):
        return False
    value = principal.strip()
    return not value or value.lower() == ZERO_ADDRESS


MAX_PRINCIPAL_LENGTH = 255


def exceeds_principal_length(principal) -> bool:
    """True for principals that do not fit the ledger's principal columns."""
    return isinstance(principal, str) and len(principal) > MAX_PRINCIPAL_LENGTH
