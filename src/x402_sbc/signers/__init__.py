"""
Signers
"""

from x402_sbc.signers.client import (
    CallbackSolanaSigner,
    EvmAccountSigner,
    EvmSigner,
    SolanaKeypairSigner,
    SolanaSigner,
)

__all__ = [
    "EvmSigner",
    "SolanaSigner",
    "EvmAccountSigner",
    "SolanaKeypairSigner",
    "CallbackSolanaSigner",
]
