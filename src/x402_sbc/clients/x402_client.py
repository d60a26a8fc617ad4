"""
X402Client - HTTP client with automatic 402 payment handling
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

import httpx

from x402_sbc.clients.selection import select_requirement
from x402_sbc.config import FALLBACK_FACILITATOR_ADDRESS, NetworkConfig, NetworkRegistry
from x402_sbc.encoding import decode_header, encode_header
from x402_sbc.exceptions import (
    ConfigurationError,
    InsufficientBalanceError,
    NoSuitablePaymentError,
    PaymentParseError,
    PaymentRequiredError,
    PaymentVerificationError,
    SettlementError,
)
from x402_sbc.facilitator import FacilitatorClient
from x402_sbc.headers import (
    LEGACY_PAYMENT_HEADER,
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PAYMENT_SIGNATURE_HEADER,
)
from x402_sbc.mechanisms import build_payment_payload
from x402_sbc.signers.client.base import EvmSigner, SolanaSigner
from x402_sbc.types import (
    PaymentConfirmation,
    PaymentPayload,
    PaymentRequired,
    PaymentRequirements,
    PaymentResult,
)
from x402_sbc.utils.retry import RetryOptions, with_retry
from x402_sbc.utils.rpc import get_token_balance
from x402_sbc.utils.url import normalize_localhost

if TYPE_CHECKING:
    from x402_sbc.settings import X402Settings

logger = logging.getLogger(__name__)


class ClientState(str, Enum):
    """Stages of one paid request"""

    INITIAL = "initial"
    REQUIREMENTS_RECEIVED = "requirements_received"
    SELECTED = "selected"
    BALANCE_CHECKED = "balance_checked"
    SIGNED = "signed"
    PAID_REQUEST_SENT = "paid_request_sent"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class X402Response:
    """HTTP response plus the payment outcome, if a payment was made"""

    response: httpx.Response
    payment_result: Optional[PaymentResult] = None

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def text(self) -> str:
        return self.response.text

    @property
    def is_success(self) -> bool:
        return self.response.is_success

    def json(self) -> Any:
        return self.response.json()


class X402Client:
    """
    HTTP client that pays 402 challenges transparently.

    Usage:
        signer = EvmAccountSigner.from_private_key("0x...")
        async with X402Client(evm_signer=signer, network="base-sepolia") as client:
            response = await client.get("https://api.example.com/premium")
            print(response.payment_result.tx_hash)
    """

    def __init__(
        self,
        evm_signer: Optional[EvmSigner] = None,
        solana_signer: Optional[SolanaSigner] = None,
        network: Optional[str] = None,
        facilitator_url: Optional[str] = None,
        rpc_url: Optional[str] = None,
        skip_balance_check: bool = False,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        facilitator: Optional[FacilitatorClient] = None,
        settle_on_client: bool = False,
        timeout: float = 30.0,
        retry_options: Optional[RetryOptions] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            evm_signer: Signer for EVM networks
            solana_signer: Signer for Solana networks
            network: Default preferred network (friendly name)
            facilitator_url: Facilitator URL override
            rpc_url: RPC endpoint override for balance and nonce reads
            skip_balance_check: Do not read the payer balance before signing
            api_key: Facilitator API key
            http_client: httpx.AsyncClient to use (not closed by aclose())
            facilitator: Pre-built FacilitatorClient (not closed by aclose())
            settle_on_client: Verify and settle through the facilitator before retrying
            timeout: HTTP timeout in seconds
            retry_options: Retry policy for the initial and the paid request
        """
        if evm_signer is None and solana_signer is None:
            raise ConfigurationError("X402Client needs an EVM signer, a Solana signer or both")
        if network is not None:
            NetworkRegistry.resolve(network)

        self._evm_signer = evm_signer
        self._solana_signer = solana_signer
        self._network = network
        self._rpc_url = rpc_url
        self._skip_balance_check = skip_balance_check
        self._settle_on_client = settle_on_client
        self._retry_options = retry_options or RetryOptions(max_attempts=3)

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_facilitator = facilitator is None
        self._facilitator = facilitator or FacilitatorClient(
            facilitator_url=facilitator_url,
            api_key=api_key,
            timeout=timeout,
            http_client=self._http_client,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "X402Settings",
        evm_signer: Optional[EvmSigner] = None,
        solana_signer: Optional[SolanaSigner] = None,
        **kwargs: Any,
    ) -> "X402Client":
        """Create a client from environment settings."""
        return cls(
            evm_signer=evm_signer,
            solana_signer=solana_signer,
            network=settings.network,
            facilitator_url=settings.facilitator_url,
            rpc_url=settings.rpc_url,
            skip_balance_check=settings.skip_balance_check,
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "X402Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close owned HTTP resources"""
        if self._owns_facilitator:
            await self._facilitator.close()
        if self._owns_http_client:
            await self._http_client.aclose()

    @property
    def _families(self) -> list[str]:
        families = []
        if self._evm_signer is not None:
            families.append("evm")
        if self._solana_signer is not None:
            families.append("solana")
        return families

    async def get(self, url: str, **kwargs: Any) -> X402Response:
        """GET request with payment handling"""
        return await self.fetch(url, method="GET", **kwargs)

    async def post(self, url: str, **kwargs: Any) -> X402Response:
        """POST request with payment handling"""
        return await self.fetch(url, method="POST", **kwargs)

    async def put(self, url: str, **kwargs: Any) -> X402Response:
        """PUT request with payment handling"""
        return await self.fetch(url, method="PUT", **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> X402Response:
        """DELETE request with payment handling"""
        return await self.fetch(url, method="DELETE", **kwargs)

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        preferred_network: Optional[str] = None,
        max_amount: Optional[str] = None,
        **kwargs: Any,
    ) -> X402Response:
        """
        Make an HTTP request, paying a 402 challenge if one is returned.

        Args:
            url: Request URL
            method: HTTP method
            preferred_network: Network to prefer over the default selection order
            max_amount: Budget as a decimal string in token units (e.g. "0.01")
            **kwargs: Additional httpx request parameters

        Returns:
            X402Response; payment_result is None when no payment was needed

        Raises:
            PaymentParseError: The challenge is unreadable
            NoSuitablePaymentError: No offer can be paid
            InsufficientBalanceError: The payer cannot cover the chosen offer
            PaymentRequiredError: The server answered 402 to the paid request
        """
        url = normalize_localhost(url)
        state = ClientState.INITIAL
        try:
            logger.info(f"[X402] {method} {url}")
            response = await with_retry(
                lambda: self._http_client.request(method, url, **kwargs),
                f"{method} {url}",
                self._retry_options,
            )
            if response.status_code != 402:
                logger.debug(f"Non-402 response ({response.status_code}), returning directly")
                return X402Response(response)

            state = self._enter(ClientState.REQUIREMENTS_RECEIVED)
            challenge = self._parse_payment_required(response, url)
            logger.info(f"[X402] Challenge offers {len(challenge.accepts)} payment option(s)")

            requirements = select_requirement(
                challenge.accepts,
                preferred_network=preferred_network or self._network,
                max_amount=max_amount,
                families=self._families,
            )
            if requirements is None:
                raise NoSuitablePaymentError(r.network for r in challenge.accepts)
            state = self._enter(ClientState.SELECTED)

            network = NetworkRegistry.from_caip2(requirements.network)
            config = NetworkRegistry.resolve(network)
            logger.info(
                f"[X402] Selected {network}: amount={requirements.max_amount_required}, "
                f"pay_to={requirements.pay_to}"
            )

            if await self._check_balance(requirements, config):
                state = self._enter(ClientState.BALANCE_CHECKED)

            facilitator_address = await self._resolve_facilitator_address(
                requirements, network, config
            )
            payload = await build_payment_payload(
                requirements,
                facilitator_address,
                evm_signer=self._evm_signer,
                solana_signer=self._solana_signer,
                rpc_url=self._rpc_url,
                http_client=self._http_client,
            )
            state = self._enter(ClientState.SIGNED)

            tx_hash = None
            if self._settle_on_client:
                tx_hash = await self._settle(payload, requirements)

            paid_response = await self._send_with_payment(method, url, payload, kwargs)
            state = self._enter(ClientState.PAID_REQUEST_SENT)
            if paid_response.status_code == 402:
                raise PaymentRequiredError(
                    f"Received 402 after payment: {paid_response.text}", body=paid_response.text
                )

            result = self._extract_payment_result(paid_response, requirements, network, tx_hash)
            state = self._enter(ClientState.COMPLETE)
            return X402Response(paid_response, result)
        except Exception as e:
            logger.error(f"[X402] Payment flow failed in state {state.value}: {e}")
            self._enter(ClientState.FAILED)
            raise

    @staticmethod
    def _enter(state: ClientState) -> ClientState:
        logger.debug(f"[X402] -> {state.value}")
        return state

    def _parse_payment_required(self, response: httpx.Response, url: str) -> PaymentRequired:
        """Parse the challenge, preferring the PAYMENT-REQUIRED header over the body"""
        header_value = response.headers.get(PAYMENT_REQUIRED_HEADER)
        if header_value:
            try:
                challenge = decode_header(header_value, PaymentRequired)
                if challenge.accepts:
                    return challenge
                logger.warning(f"{PAYMENT_REQUIRED_HEADER} header has no offers, using body")
            except ValueError as e:
                logger.warning(f"Failed to decode {PAYMENT_REQUIRED_HEADER} header: {e}")

        try:
            body = response.json()
        except ValueError:
            raise PaymentParseError(
                f"x402: API at {url} returned 402 but body is not valid JSON. "
                f"Received: {response.text[:200]}",
                url,
            )

        accepts = body.get("accepts") if isinstance(body, dict) else None
        if not isinstance(accepts, list) or not accepts:
            raise PaymentParseError(
                f'x402: 402 response from {url} missing valid "accepts" array', url
            )
        try:
            return PaymentRequired.model_validate(body)
        except ValueError as e:
            raise PaymentParseError(f"x402: 402 response from {url} has invalid offers: {e}", url)

    async def _check_balance(
        self, requirements: PaymentRequirements, config: NetworkConfig
    ) -> bool:
        """Returns True if a balance check was performed (and passed)"""
        if self._skip_balance_check or not config.is_evm or self._evm_signer is None:
            return False
        rpc_url = self._rpc_url or config.rpc_url
        if not rpc_url:
            logger.debug(f"No RPC URL for {config.name}, skipping balance check")
            return False

        required = int(requirements.max_amount_required)
        balance = await get_token_balance(
            rpc_url, requirements.asset, self._evm_signer.get_address(), self._http_client
        )
        if balance < required:
            raise InsufficientBalanceError(balance, required)
        return True

    async def _resolve_facilitator_address(
        self, requirements: PaymentRequirements, network: str, config: NetworkConfig
    ) -> str:
        """Discovered signer, else the requirement's hint, else the static address"""
        discovered = None
        if config.is_evm:
            discovered = await self._facilitator.discover_signer(NetworkRegistry.to_caip2(network))
        return (
            discovered
            or requirements.facilitator
            or config.facilitator_address
            or FALLBACK_FACILITATOR_ADDRESS
        )

    async def _settle(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> Optional[str]:
        """Verify and settle through the facilitator; returns the transaction id"""
        verification = await self._facilitator.verify(payload, requirements)
        if not verification.is_valid:
            raise PaymentVerificationError(verification.invalid_reason)
        settlement = await self._facilitator.settle(payload, requirements)
        if not settlement.success:
            raise SettlementError(settlement.failure_reason)
        return settlement.transaction_id

    async def _send_with_payment(
        self,
        method: str,
        url: str,
        payload: PaymentPayload,
        kwargs: dict[str, Any],
    ) -> httpx.Response:
        """Retry request with the payment under both header names"""
        encoded = encode_header(payload)
        headers = dict(kwargs.get("headers") or {})
        headers[PAYMENT_SIGNATURE_HEADER] = encoded
        headers[LEGACY_PAYMENT_HEADER] = encoded
        request_kwargs = {**kwargs, "headers": headers}

        logger.info("[X402] Retrying request with payment")
        response = await with_retry(
            lambda: self._http_client.request(method, url, **request_kwargs),
            f"paid {method} {url}",
            self._retry_options,
        )
        logger.info(f"[X402] Paid request status={response.status_code}")
        return response

    @staticmethod
    def _extract_payment_result(
        response: httpx.Response,
        requirements: PaymentRequirements,
        network: str,
        tx_hash: Optional[str],
    ) -> PaymentResult:
        result = PaymentResult(
            success=response.is_success,
            tx_hash=tx_hash,
            amount_paid=requirements.max_amount_required,
            network=network,
        )
        header_value = response.headers.get(PAYMENT_RESPONSE_HEADER)
        if header_value:
            try:
                confirmation = decode_header(header_value, PaymentConfirmation)
            except ValueError as e:
                logger.debug(f"Ignoring undecodable {PAYMENT_RESPONSE_HEADER} header: {e}")
            else:
                result = result.model_copy(
                    update={
                        "tx_hash": confirmation.transaction or result.tx_hash,
                        "network": confirmation.network or result.network,
                    }
                )
        return result
