"""
Requirement selection among the offers of a 402 challenge
"""

import logging
from typing import Iterable, Optional, Sequence

from x402_sbc.config import NetworkFamily, NetworkRegistry
from x402_sbc.types import PaymentRequirements
from x402_sbc.utils.amounts import decimal_to_atomic

logger = logging.getLogger(__name__)


def select_requirement(
    requirements: Sequence[PaymentRequirements],
    preferred_network: Optional[str] = None,
    max_amount: Optional[str] = None,
    families: Optional[Iterable[NetworkFamily]] = None,
) -> Optional[PaymentRequirements]:
    """
    Choose one offer.

    Offers on unknown networks, with a non-integer amount or outside ``families``
    are dropped, then offers above the budget. Among the survivors the preferred network wins, then any
    test network, then the cheapest.

    Args:
        requirements: Offers from the challenge
        preferred_network: Friendly name or CAIP-2 address to prefer
        max_amount: Budget as a decimal string (e.g. "0.01"), converted per network
        families: Network families the caller can sign for

    Returns:
        The chosen offer, or None if nothing survives filtering
    """
    allowed = set(families) if families is not None else None
    candidates: list[PaymentRequirements] = []
    for req in requirements:
        config = NetworkRegistry.find(req.network)
        if config is None:
            logger.debug(f"Skipping offer on unknown network {req.network}")
            continue
        amount = _atomic_amount(req)
        if amount is None:
            logger.warning(
                f"Skipping offer on {req.network}: amount {req.max_amount_required!r} "
                f"is not an integer"
            )
            continue
        if allowed is not None and config.family not in allowed:
            logger.debug(f"Skipping offer on {req.network}: no {config.family} signer")
            continue
        if max_amount is not None:
            budget = decimal_to_atomic(max_amount, config.decimals)
            if amount > budget:
                logger.debug(
                    f"Skipping offer on {req.network}: {req.max_amount_required} > {budget}"
                )
                continue
        candidates.append(req)

    if not candidates:
        return None

    if preferred_network:
        preferred = NetworkRegistry.from_caip2(preferred_network)
        for req in candidates:
            if NetworkRegistry.from_caip2(req.network) == preferred:
                return req

    for req in candidates:
        config = NetworkRegistry.find(req.network)
        if config is not None and config.testnet:
            return req

    return min(candidates, key=lambda r: int(r.max_amount_required))


def _atomic_amount(req: PaymentRequirements) -> Optional[int]:
    try:
        amount = int(req.max_amount_required)
    except ValueError:
        return None
    return amount if amount >= 0 else None
