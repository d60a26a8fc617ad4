"""
x402_sbc - x402 payment protocol for SBC stablecoin payments on EVM and Solana
"""

__version__ = "0.1.0"

from x402_sbc.clients import X402Client, X402Response, select_requirement
from x402_sbc.config import SUPPORTED_NETWORKS, NetworkConfig, NetworkRegistry
from x402_sbc.exceptions import (
    ConfigurationError,
    FacilitatorError,
    InsufficientBalanceError,
    NoSuitablePaymentError,
    PaymentParseError,
    PaymentRequiredError,
    PaymentTimeoutError,
    PaymentVerificationError,
    RpcError,
    SettlementError,
    SigningCancelledError,
    SigningError,
    UnknownNetworkError,
    X402Error,
)
from x402_sbc.facilitator import FacilitatorClient
from x402_sbc.mechanisms import build_payment_payload, verify_solana_signature
from x402_sbc.server import GateState, PaymentGate, PaymentOffer
from x402_sbc.settings import X402Settings
from x402_sbc.signers import (
    CallbackSolanaSigner,
    EvmAccountSigner,
    EvmSigner,
    SolanaKeypairSigner,
    SolanaSigner,
)
from x402_sbc.types import (
    PaymentPayload,
    PaymentRequired,
    PaymentRequirements,
    PaymentResult,
    SettleResponse,
    VerifyResponse,
)

__all__ = [
    "__version__",
    # Client
    "X402Client",
    "X402Response",
    "select_requirement",
    # Server
    "PaymentGate",
    "PaymentOffer",
    "GateState",
    # Facilitator
    "FacilitatorClient",
    # Networks and settings
    "SUPPORTED_NETWORKS",
    "NetworkConfig",
    "NetworkRegistry",
    "X402Settings",
    # Mechanisms
    "build_payment_payload",
    "verify_solana_signature",
    # Signers
    "EvmSigner",
    "SolanaSigner",
    "EvmAccountSigner",
    "SolanaKeypairSigner",
    "CallbackSolanaSigner",
    # Types
    "PaymentRequirements",
    "PaymentRequired",
    "PaymentPayload",
    "PaymentResult",
    "VerifyResponse",
    "SettleResponse",
    # Exceptions
    "X402Error",
    "ConfigurationError",
    "UnknownNetworkError",
    "InsufficientBalanceError",
    "FacilitatorError",
    "PaymentTimeoutError",
    "SigningError",
    "SigningCancelledError",
    "RpcError",
    "PaymentRequiredError",
    "PaymentParseError",
    "NoSuitablePaymentError",
    "PaymentVerificationError",
    "SettlementError",
]
