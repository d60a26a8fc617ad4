"""
EIP-712 type definitions and helpers for EVM payment authorizations
"""

import secrets
from typing import Any

from x402_sbc.config import NetworkConfig

# validAfter is backdated so an authorization is usable immediately despite clock skew
CLOCK_SKEW_SECONDS = 60

DIRECT_PAYMENT_DOMAIN_NAME = "SBC x402 Facilitator"
DEFAULT_PERMIT_TOKEN_NAME = "SBC"
DEFAULT_TRANSFER_TOKEN_NAME = "USD Coin"
DEFAULT_TRANSFER_TOKEN_VERSION = "2"

PERMIT_PRIMARY_TYPE = "Permit"
PERMIT_TYPES = {
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ]
}

DIRECT_PAYMENT_PRIMARY_TYPE = "Payment"
DIRECT_PAYMENT_TYPES = {
    "Payment": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "amount", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ]
}

TRANSFER_AUTH_PRIMARY_TYPE = "TransferWithAuthorization"
TRANSFER_AUTH_TYPES = {
    "TransferWithAuthorization": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ]
}


def create_random_nonce() -> str:
    """32 random bytes as 0x-hex, fresh on every call"""
    return "0x" + secrets.token_hex(32)


def build_domain(
    name: str, version: str, config: NetworkConfig, verifying_contract: str
) -> dict[str, Any]:
    """EIP-712 domain for the given network and contract"""
    return {
        "name": name,
        "version": version,
        "chainId": config.chain_id,
        "verifyingContract": verifying_contract,
    }
