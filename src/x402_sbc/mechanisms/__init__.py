"""
Payment authorization mechanisms
"""

from x402_sbc.mechanisms.builder import build_payment_payload, build_scheme_payload
from x402_sbc.mechanisms.evm import sign_direct_payment, sign_permit, sign_transfer_authorization
from x402_sbc.mechanisms.solana import sign_solana_payment, verify_solana_signature

__all__ = [
    "build_payment_payload",
    "build_scheme_payload",
    "sign_permit",
    "sign_direct_payment",
    "sign_transfer_authorization",
    "sign_solana_payment",
    "verify_solana_signature",
]
