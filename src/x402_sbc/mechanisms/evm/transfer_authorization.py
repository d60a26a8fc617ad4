"""
EIP-3009 TransferWithAuthorization
"""

import logging

from eth_utils import to_bytes

from x402_sbc.config import NetworkConfig
from x402_sbc.mechanisms._base import DEFAULT_VALIDITY_SECONDS, current_timestamp
from x402_sbc.mechanisms.evm.types import (
    CLOCK_SKEW_SECONDS,
    DEFAULT_TRANSFER_TOKEN_NAME,
    DEFAULT_TRANSFER_TOKEN_VERSION,
    TRANSFER_AUTH_PRIMARY_TYPE,
    TRANSFER_AUTH_TYPES,
    build_domain,
    create_random_nonce,
)
from x402_sbc.signers.client.base import EvmSigner
from x402_sbc.types import (
    PaymentRequirements,
    TransferAuthorization,
    TransferAuthorizationPayload,
)

logger = logging.getLogger(__name__)


async def sign_transfer_authorization(
    signer: EvmSigner,
    requirements: PaymentRequirements,
    config: NetworkConfig,
    valid_for: int = DEFAULT_VALIDITY_SECONDS,
) -> TransferAuthorizationPayload:
    """Sign a TransferWithAuthorization with a fresh random nonce."""
    extra = requirements.extra
    name = (extra.name if extra else None) or DEFAULT_TRANSFER_TOKEN_NAME
    version = (extra.version if extra else None) or DEFAULT_TRANSFER_TOKEN_VERSION

    now = current_timestamp()
    authorization = TransferAuthorization(
        from_address=signer.get_address(),
        to=requirements.pay_to,
        value=requirements.max_amount_required,
        valid_after=now - CLOCK_SKEW_SECONDS,
        valid_before=now + valid_for,
        nonce=create_random_nonce(),
    )

    domain = build_domain(name, version, config, requirements.asset)
    message = {
        "from": authorization.from_address,
        "to": authorization.to,
        "value": int(authorization.value),
        "validAfter": authorization.valid_after,
        "validBefore": authorization.valid_before,
        "nonce": to_bytes(hexstr=authorization.nonce),
    }

    logger.info(
        f"[EIP3009] Signing transfer authorization on {config.name}: "
        f"value={authorization.value}"
    )
    signature = await signer.sign_typed_data(
        domain=domain,
        types=TRANSFER_AUTH_TYPES,
        primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        message=message,
    )
    return TransferAuthorizationPayload(signature=signature, authorization=authorization)
