"""
Signer utility functions
"""

from typing import Any

# EIP-712 orders domain fields this way regardless of dict order
_EIP712_DOMAIN_FIELDS: list[tuple[str, str]] = [
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
    ("salt", "bytes32"),
]


def eip712_domain_type(domain: dict[str, Any]) -> list[dict[str, str]]:
    """Build the EIP712Domain type array from the keys present in *domain*."""
    return [{"name": name, "type": typ} for name, typ in _EIP712_DOMAIN_FIELDS if name in domain]
