"""
Payload builder - chooses the authorization scheme for a network and signs it
"""

import logging
from typing import Optional

import httpx

from x402_sbc.config import NetworkConfig, NetworkRegistry
from x402_sbc.exceptions import ConfigurationError, RpcError, SigningCancelledError, SigningError
from x402_sbc.mechanisms.evm import sign_direct_payment, sign_permit, sign_transfer_authorization
from x402_sbc.mechanisms.solana import sign_solana_payment
from x402_sbc.signers.client.base import EvmSigner, SolanaSigner
from x402_sbc.types import PaymentPayload, PaymentRequirements, SchemePayload

logger = logging.getLogger(__name__)


async def build_scheme_payload(
    requirements: PaymentRequirements,
    config: NetworkConfig,
    facilitator_address: str,
    evm_signer: Optional[EvmSigner] = None,
    solana_signer: Optional[SolanaSigner] = None,
    rpc_url: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> SchemePayload:
    """
    Build and sign the scheme-specific authorization for a requirement.

    Every authorization expires after the offer's ``maxTimeoutSeconds``.

    Dispatch by network family:
        solana: signed message
        evm with permit: Permit, falling back to direct payment when the permit
            path is unavailable (nonce unreadable or signer cannot sign it)
        other evm: TransferWithAuthorization

    Raises:
        ConfigurationError: If no signer is available for the network family
        SigningCancelledError: If the user rejected a signature request
        SigningError: If signing fails
    """
    valid_for = requirements.max_timeout_seconds
    if config.family == "solana":
        if solana_signer is None:
            raise ConfigurationError(f"A Solana signer is required to pay on {config.name}")
        return await sign_solana_payment(solana_signer, requirements, valid_for=valid_for)

    if evm_signer is None:
        raise ConfigurationError(f"An EVM signer is required to pay on {config.name}")

    if not config.uses_permit:
        return await sign_transfer_authorization(
            evm_signer, requirements, config, valid_for=valid_for
        )

    try:
        return await sign_permit(
            evm_signer,
            requirements,
            config,
            spender=facilitator_address,
            rpc_url=rpc_url,
            valid_for=valid_for,
            http_client=http_client,
        )
    except SigningCancelledError:
        raise
    except (SigningError, RpcError) as e:
        logger.warning(f"Permit unavailable on {config.name} ({e}); falling back to direct payment")
    return await sign_direct_payment(
        evm_signer, requirements, config, facilitator_address, valid_for=valid_for
    )


async def build_payment_payload(
    requirements: PaymentRequirements,
    facilitator_address: str,
    evm_signer: Optional[EvmSigner] = None,
    solana_signer: Optional[SolanaSigner] = None,
    rpc_url: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> PaymentPayload:
    """
    Build the signed PaymentPayload envelope for a selected requirement.

    Args:
        requirements: Selected payment requirements
        facilitator_address: Facilitator spender / verifying contract address
        evm_signer: Signer for EVM networks
        solana_signer: Signer for Solana networks
        rpc_url: RPC endpoint override for on-chain reads

    Returns:
        PaymentPayload with accepted.network in CAIP-2 form
    """
    network = NetworkRegistry.from_caip2(requirements.network)
    config = NetworkRegistry.resolve(network)
    scheme_payload = await build_scheme_payload(
        requirements,
        config,
        facilitator_address,
        evm_signer=evm_signer,
        solana_signer=solana_signer,
        rpc_url=rpc_url,
        http_client=http_client,
    )
    logger.debug(f"Built {scheme_payload.kind.value} payload for {network}")
    return PaymentPayload.from_scheme_payload(
        NetworkRegistry.to_caip2(network), requirements.scheme, scheme_payload
    )
