"""
Client signers
"""

from x402_sbc.signers.client.base import EvmSigner, SolanaSigner
from x402_sbc.signers.client.evm_signer import EvmAccountSigner
from x402_sbc.signers.client.solana_signer import CallbackSolanaSigner, SolanaKeypairSigner

__all__ = [
    "EvmSigner",
    "SolanaSigner",
    "EvmAccountSigner",
    "SolanaKeypairSigner",
    "CallbackSolanaSigner",
]
