"""
Server-side payment gate
"""

from x402_sbc.server.gate import (
    GateRequest,
    GateResponse,
    GateResult,
    GateState,
    PaymentGate,
    PaymentOffer,
)

__all__ = [
    "PaymentGate",
    "PaymentOffer",
    "GateState",
    "GateResult",
    "GateRequest",
    "GateResponse",
]
