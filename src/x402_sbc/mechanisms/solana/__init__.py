"""
Solana payment authorizations
"""

from x402_sbc.mechanisms.solana.signing import (
    build_solana_message,
    sign_solana_payment,
    verify_solana_signature,
)

__all__ = ["build_solana_message", "sign_solana_payment", "verify_solana_signature"]
