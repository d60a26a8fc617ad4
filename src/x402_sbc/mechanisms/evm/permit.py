"""
ERC-2612 Permit authorization
"""

import logging
from typing import Optional

import httpx

from x402_sbc.config import NetworkConfig
from x402_sbc.exceptions import RpcError
from x402_sbc.mechanisms._base import DEFAULT_VALIDITY_SECONDS, current_timestamp
from x402_sbc.mechanisms.evm.types import (
    DEFAULT_PERMIT_TOKEN_NAME,
    PERMIT_PRIMARY_TYPE,
    PERMIT_TYPES,
    build_domain,
)
from x402_sbc.signers.client.base import EvmSigner
from x402_sbc.types import PaymentRequirements, PermitAuthorization, PermitPayload
from x402_sbc.utils.rpc import get_permit_nonce

logger = logging.getLogger(__name__)


async def sign_permit(
    signer: EvmSigner,
    requirements: PaymentRequirements,
    config: NetworkConfig,
    spender: str,
    rpc_url: Optional[str] = None,
    valid_for: int = DEFAULT_VALIDITY_SECONDS,
    http_client: Optional[httpx.AsyncClient] = None,
) -> PermitPayload:
    """
    Sign a Permit letting the facilitator pull ``maxAmountRequired`` of the asset.

    The replay nonce is read from the token contract, not generated.

    Args:
        signer: EVM signer of the payer
        requirements: Selected payment requirements
        config: Network configuration
        spender: Facilitator address authorised to spend
        rpc_url: RPC endpoint override
        valid_for: Seconds until the permit deadline

    Raises:
        RpcError: If no RPC endpoint is configured
        SigningError: If the nonce cannot be read or signing fails
    """
    rpc = rpc_url or config.rpc_url
    if not rpc:
        raise RpcError(f"No RPC URL configured for {config.name}")

    owner = signer.get_address()
    nonce = await get_permit_nonce(rpc, requirements.asset, owner, http_client)
    deadline = current_timestamp() + valid_for
    value = int(requirements.max_amount_required)

    token_name = (
        requirements.extra.name if requirements.extra and requirements.extra.name else None
    ) or config.token_name or DEFAULT_PERMIT_TOKEN_NAME
    domain = build_domain(token_name, "1", config, requirements.asset)
    message = {
        "owner": owner,
        "spender": spender,
        "value": value,
        "nonce": nonce,
        "deadline": deadline,
    }

    logger.info(f"[PERMIT] Signing permit on {config.name}: value={value}, spender={spender}")
    signature = await signer.sign_typed_data(
        domain=domain, types=PERMIT_TYPES, primary_type=PERMIT_PRIMARY_TYPE, message=message
    )

    return PermitPayload(
        authorization=PermitAuthorization(
            from_address=owner,
            to=spender,
            value=str(value),
            valid_before=deadline,
            nonce=str(nonce),
        ),
        signature=signature,
    )
