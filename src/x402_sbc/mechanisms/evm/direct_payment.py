"""
Direct payment authorization (requires a prior allowance to the facilitator)
"""

import logging

from x402_sbc.config import NetworkConfig
from x402_sbc.mechanisms._base import DEFAULT_VALIDITY_SECONDS, current_timestamp
from x402_sbc.mechanisms.evm.types import (
    DIRECT_PAYMENT_DOMAIN_NAME,
    DIRECT_PAYMENT_PRIMARY_TYPE,
    DIRECT_PAYMENT_TYPES,
    build_domain,
)
from x402_sbc.signers.client.base import EvmSigner
from x402_sbc.types import DirectPaymentPayload, PaymentRequirements

logger = logging.getLogger(__name__)


async def sign_direct_payment(
    signer: EvmSigner,
    requirements: PaymentRequirements,
    config: NetworkConfig,
    facilitator_address: str,
    valid_for: int = DEFAULT_VALIDITY_SECONDS,
) -> DirectPaymentPayload:
    """
    Sign a Payment struct against the facilitator contract domain.

    The nonce is the current timestamp; replay protection comes from the deadline.
    """
    payer = signer.get_address()
    now = current_timestamp()
    deadline = now + valid_for
    amount = int(requirements.max_amount_required)

    domain = build_domain(DIRECT_PAYMENT_DOMAIN_NAME, "1", config, facilitator_address)
    message = {
        "from": payer,
        "to": requirements.pay_to,
        "amount": amount,
        "nonce": now,
        "deadline": deadline,
    }

    logger.info(f"[DIRECT] Signing payment on {config.name}: amount={amount}")
    signature = await signer.sign_typed_data(
        domain=domain,
        types=DIRECT_PAYMENT_TYPES,
        primary_type=DIRECT_PAYMENT_PRIMARY_TYPE,
        message=message,
    )

    return DirectPaymentPayload(
        signature=signature,
        from_address=payer,
        to=requirements.pay_to,
        amount=str(amount),
        nonce=now,
        deadline=deadline,
    )
