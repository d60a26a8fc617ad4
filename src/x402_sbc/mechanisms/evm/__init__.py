"""
EVM payment authorizations
"""

from x402_sbc.mechanisms.evm.direct_payment import sign_direct_payment
from x402_sbc.mechanisms.evm.permit import sign_permit
from x402_sbc.mechanisms.evm.transfer_authorization import sign_transfer_authorization

__all__ = ["sign_permit", "sign_direct_payment", "sign_transfer_authorization"]
