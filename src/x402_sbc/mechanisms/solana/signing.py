"""
Chain-native signed-message authorization for Solana
"""

import logging
from typing import Any, Union

import base58
from solders.pubkey import Pubkey
from solders.signature import Signature

from x402_sbc.mechanisms._base import DEFAULT_VALIDITY_SECONDS, current_timestamp
from x402_sbc.signers.client.base import SolanaSigner
from x402_sbc.types import PaymentRequirements, SolanaPaymentPayload

logger = logging.getLogger(__name__)


def build_solana_message(
    from_address: str, to: str, amount: str, nonce: str, deadline: int
) -> str:
    """Canonical message shared with the verifying facilitator. Field order is fixed."""
    return f"from:{from_address}|to:{to}|amount:{amount}|nonce:{nonce}|deadline:{deadline}"


async def sign_solana_payment(
    signer: SolanaSigner,
    requirements: PaymentRequirements,
    valid_for: int = DEFAULT_VALIDITY_SECONDS,
) -> SolanaPaymentPayload:
    """Sign the canonical payment message with the payer's Ed25519 key."""
    from_address = signer.get_address()
    now = current_timestamp()
    nonce = str(now)
    deadline = now + valid_for
    amount = requirements.max_amount_required

    message = build_solana_message(from_address, requirements.pay_to, amount, nonce, deadline)
    logger.info(f"[SOLANA] Signing payment message: amount={amount}, to={requirements.pay_to}")
    signature = await signer.sign_message(message.encode("utf-8"))

    return SolanaPaymentPayload(
        from_address=from_address,
        to=requirements.pay_to,
        amount=amount,
        nonce=nonce,
        deadline=deadline,
        signature=base58.b58encode(signature).decode("ascii"),
    )


def verify_solana_signature(payload: Union[SolanaPaymentPayload, dict[str, Any]]) -> bool:
    """
    Check a Solana payment signature against the claimed sender.

    Returns False, never raising, for malformed input, tampered fields or a
    signature from another key.
    """
    try:
        if not isinstance(payload, SolanaPaymentPayload):
            payload = SolanaPaymentPayload.model_validate(payload)
        message = build_solana_message(
            payload.from_address, payload.to, payload.amount, payload.nonce, payload.deadline
        )
        raw_signature = base58.b58decode(payload.signature)
        if len(raw_signature) != 64:
            return False
        public_key = Pubkey.from_string(payload.from_address)
        return Signature.from_bytes(raw_signature).verify(public_key, message.encode("utf-8"))
    except Exception as e:
        logger.debug(f"Solana signature verification failed: {e}")
        return False
