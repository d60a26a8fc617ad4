"""
PaymentGate - server-side verification and settlement of x402 payments
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

from x402_sbc.config import NetworkConfig, NetworkRegistry
from x402_sbc.encoding import decode_header, encode_header
from x402_sbc.facilitator import FacilitatorClient
from x402_sbc.headers import (
    LEGACY_PAYMENT_HEADER,
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PAYMENT_SIGNATURE_HEADER,
)
from x402_sbc.types import (
    PaymentConfirmation,
    PaymentPayload,
    PaymentRequired,
    PaymentRequirements,
    PaymentRequirementsExtra,
    SettleResponse,
)

logger = logging.getLogger(__name__)

HeaderGetter = Callable[[str], Optional[str]]


@dataclass
class PaymentOffer:
    """One way a protected resource can be paid for"""

    pay_to: str
    amount: str
    network: str
    asset: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = None
    facilitator_url: Optional[str] = None
    api_key: Optional[str] = None
    settle: bool = True
    max_timeout_seconds: int = 300


class GateState(str, Enum):
    """Gate outcomes; VERIFYING and SETTLING are transient"""

    NO_HEADER = "no_header"
    INVALID_HEADER = "invalid_header"
    NETWORK_UNMATCHED = "network_unmatched"
    VERIFYING = "verifying"
    VERIFY_FAILED = "verify_failed"
    SETTLING = "settling"
    SETTLE_FAILED = "settle_failed"
    AUTHORIZED = "authorized"
    ERROR = "error"


@dataclass
class GateResult:
    """What the host framework should do with a request"""

    state: GateState
    status_code: int = 402
    body: Optional[dict[str, Any]] = None
    headers: dict[str, str] = field(default_factory=dict)
    offer: Optional[PaymentOffer] = None
    settlement: Optional[SettleResponse] = None

    @property
    def authorized(self) -> bool:
        return self.state == GateState.AUTHORIZED


class GateRequest(Protocol):
    """Request side of a framework adapter"""

    @property
    def url(self) -> str: ...

    def get_header(self, name: str) -> Optional[str]: ...


class GateResponse(Protocol):
    """Response side of a framework adapter"""

    def set_status(self, status_code: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def write_json(self, body: dict[str, Any]) -> None: ...


class PaymentGate:
    """
    Verifies and settles payments for one protected resource.

    Usage:
        gate = PaymentGate([
            PaymentOffer(pay_to="0x...", amount="1000000", network="base-sepolia"),
            PaymentOffer(pay_to="So1...", amount="1000000", network="solana-devnet"),
        ])
        result = await gate.process(request.headers.get, str(request.url))
        if not result.authorized:
            return JSONResponse(result.body, result.status_code, result.headers)
    """

    def __init__(
        self,
        offers: PaymentOffer | Sequence[PaymentOffer],
        facilitator: Optional[FacilitatorClient] = None,
    ) -> None:
        """
        Initialize the gate.

        Args:
            offers: Accepted payment offers
            facilitator: Shared facilitator client; by default each offer gets one
                built from its facilitator_url and api_key

        Raises:
            ValueError: If no offer is given
            UnknownNetworkError: If an offer names an unsupported network
        """
        self._offers = [offers] if isinstance(offers, PaymentOffer) else list(offers)
        if not self._offers:
            raise ValueError("PaymentGate requires at least one offer")

        self._configs: list[NetworkConfig] = [
            NetworkRegistry.resolve(offer.network) for offer in self._offers
        ]
        self._facilitators: dict[tuple[Optional[str], Optional[str]], FacilitatorClient] = {}
        self._shared_facilitator = facilitator

    @property
    def offers(self) -> list[PaymentOffer]:
        return list(self._offers)

    def _facilitator_for(self, offer: PaymentOffer) -> FacilitatorClient:
        if self._shared_facilitator is not None:
            return self._shared_facilitator
        key = (offer.facilitator_url, offer.api_key)
        if key not in self._facilitators:
            self._facilitators[key] = FacilitatorClient(
                facilitator_url=offer.facilitator_url, api_key=offer.api_key
            )
        return self._facilitators[key]

    async def close(self) -> None:
        """Close facilitator clients created by the gate"""
        for facilitator in self._facilitators.values():
            await facilitator.close()
        self._facilitators.clear()

    def build_requirements(self, offer: PaymentOffer, resource: str) -> PaymentRequirements:
        """Build the advertised requirement for one offer"""
        config = NetworkRegistry.resolve(offer.network)
        return PaymentRequirements(
            scheme="exact",
            network=offer.network,
            max_amount_required=offer.amount,
            resource=resource,
            description=offer.description,
            mime_type=offer.mime_type,
            pay_to=offer.pay_to,
            asset=offer.asset or config.default_asset,
            max_timeout_seconds=offer.max_timeout_seconds,
            facilitator=config.facilitator_address or None,
            extra=PaymentRequirementsExtra(name=config.token_name) if config.token_name else None,
        )

    def payment_required(
        self, resource: str, state: GateState, error: Optional[str] = None
    ) -> GateResult:
        """402 result listing every offer, in the body and the PAYMENT-REQUIRED header"""
        challenge = PaymentRequired(
            accepts=[self.build_requirements(offer, resource) for offer in self._offers],
            error=error,
        )
        body = challenge.model_dump(by_alias=True, exclude_none=True)
        return GateResult(
            state=state,
            status_code=402,
            body=body,
            headers={PAYMENT_REQUIRED_HEADER: encode_header(body)},
        )

    def _match_offer(self, chain_address: str) -> Optional[PaymentOffer]:
        network = NetworkRegistry.from_caip2(chain_address)
        for offer in self._offers:
            if offer.network == network:
                return offer
        return None

    async def process(self, get_header: HeaderGetter, resource: str) -> GateResult:
        """
        Run the gate for one request.

        Args:
            get_header: Case-insensitive header lookup of the incoming request
            resource: URL of the requested resource

        Returns:
            GateResult; only AUTHORIZED lets the request through. Never raises.
        """
        payment_header = get_header(PAYMENT_SIGNATURE_HEADER) or get_header(LEGACY_PAYMENT_HEADER)
        if not payment_header:
            logger.debug(f"No payment header for {resource}")
            return self.payment_required(resource, GateState.NO_HEADER)

        try:
            payload = decode_header(payment_header, PaymentPayload)
        except ValueError as e:
            logger.warning(f"Invalid payment header for {resource}: {e}")
            return self.payment_required(
                resource, GateState.INVALID_HEADER, "Invalid payment header"
            )

        offer = self._match_offer(payload.accepted.network)
        if offer is None:
            logger.warning(f"No offer matches network {payload.accepted.network}")
            return self.payment_required(
                resource,
                GateState.NETWORK_UNMATCHED,
                f'No payment option found for network "{payload.accepted.network}"',
            )

        try:
            return await self._verify_and_settle(payload, offer, resource)
        except Exception as e:
            logger.error(f"Payment processing failed for {resource}: {e}", exc_info=True)
            return GateResult(
                state=GateState.ERROR,
                status_code=402,
                body={"error": f"Payment processing failed: {e}"},
                offer=offer,
            )

    async def _verify_and_settle(
        self, payload: PaymentPayload, offer: PaymentOffer, resource: str
    ) -> GateResult:
        requirements = self.build_requirements(offer, resource)
        facilitator = self._facilitator_for(offer)

        logger.info(f"[GATE] {GateState.VERIFYING.value}: {offer.network} for {resource}")
        verification = await facilitator.verify(payload, requirements)
        if not verification.is_valid:
            logger.warning(f"[GATE] Verification failed: {verification.invalid_reason}")
            return self.payment_required(
                resource, GateState.VERIFY_FAILED, verification.invalid_reason
            )

        if not offer.settle:
            logger.info(f"[GATE] {GateState.AUTHORIZED.value} (verify only) for {resource}")
            return GateResult(state=GateState.AUTHORIZED, status_code=200, offer=offer)

        logger.info(f"[GATE] {GateState.SETTLING.value}: {offer.network} for {resource}")
        settlement = await facilitator.settle(payload, requirements)
        if not settlement.success:
            logger.error(f"[GATE] Settlement failed: {settlement.failure_reason}")
            return GateResult(
                state=GateState.SETTLE_FAILED,
                status_code=402,
                body={"error": f"Payment settlement failed: {settlement.failure_reason}"},
                offer=offer,
                settlement=settlement,
            )

        headers: dict[str, str] = {}
        if settlement.transaction_id:
            confirmation = PaymentConfirmation(
                success=True, transaction=settlement.transaction_id, network=offer.network
            )
            headers[PAYMENT_RESPONSE_HEADER] = encode_header(confirmation)
        logger.info(
            f"[GATE] {GateState.AUTHORIZED.value}: transaction={settlement.transaction_id}"
        )
        return GateResult(
            state=GateState.AUTHORIZED,
            status_code=200,
            headers=headers,
            offer=offer,
            settlement=settlement,
        )

    async def handle(
        self,
        request: GateRequest,
        response: GateResponse,
        call_next: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Framework-neutral adapter: reject through ``response`` or call downstream.

        The confirmation header is written before downstream runs, so headers that
        downstream sets afterwards are left as they are.
        """
        result = await self.process(request.get_header, request.url)
        for name, value in result.headers.items():
            response.set_header(name, value)
        if not result.authorized:
            response.set_status(result.status_code)
            response.write_json(result.body or {})
            return None
        return await call_next()
