"""
FacilitatorClient - Client for communicating with the facilitator service
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from x402_sbc.config import DEFAULT_FACILITATOR_URL, NetworkRegistry
from x402_sbc.encoding import to_wire
from x402_sbc.exceptions import FacilitatorError, PaymentTimeoutError
from x402_sbc.types import (
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedResponse,
    VerifyResponse,
)
from x402_sbc.utils.retry import RetryOptions, with_retry
from x402_sbc.utils.url import normalize_localhost

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

T = TypeVar("T")


class FacilitatorClient:
    """
    Client for communicating with the facilitator service.

    Handles verify, settle, signer discovery and health checks.
    """

    def __init__(
        self,
        facilitator_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_options: Optional[RetryOptions] = None,
    ) -> None:
        """
        Initialize facilitator client.

        Args:
            facilitator_url: Explicit facilitator URL, overrides the per-network URL
            api_key: Sent as X-API-Key on verify/settle (required for mainnet access)
            timeout: Per-request timeout in seconds
            http_client: Pre-built httpx.AsyncClient (not closed by close())
            retry_options: Retry policy for verify/settle
        """
        self._facilitator_url = facilitator_url
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._retry_options = retry_options or RetryOptions(max_attempts=3)
        # facilitator URL -> discovered signer address (None when discovery failed)
        self._signer_cache: dict[str, Optional[str]] = {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def get_facilitator_url(self, network: Optional[str] = None) -> str:
        """
        Resolve the facilitator base URL.

        Args:
            network: Friendly network name or CAIP-2 chain address

        Returns:
            Override URL, else the network's URL, else the default facilitator
        """
        url = self._facilitator_url
        if not url and network:
            config = NetworkRegistry.find(network)
            url = config.facilitator_url if config else None
        return normalize_localhost(url or DEFAULT_FACILITATOR_URL).rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers[API_KEY_HEADER] = self._api_key
        return headers

    @staticmethod
    def _request_body(
        payload: PaymentPayload, requirements: PaymentRequirements
    ) -> dict[str, Any]:
        wire_requirements = to_wire(requirements)
        wire_requirements["network"] = payload.accepted.network
        wire_requirements["amount"] = requirements.max_amount_required
        return {
            "paymentPayload": to_wire(payload),
            "paymentRequirements": wire_requirements,
        }

    async def _with_timeout(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(call(), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise PaymentTimeoutError(operation) from e

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.get_facilitator_url(body['paymentRequirements']['network'])}{path}"
        client = await self._get_client()
        label = f"facilitator {path.lstrip('/')}"

        async def attempt() -> httpx.Response:
            return await self._with_timeout(
                "Facilitator request",
                lambda: client.post(url, json=body, headers=self._headers()),
            )

        response = await with_retry(attempt, label, self._retry_options)
        if not response.is_success:
            raise FacilitatorError(
                f"Facilitator {path.lstrip('/')} failed: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError:
            raise FacilitatorError(
                f"Facilitator {path.lstrip('/')} returned non-JSON response: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            )

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """
        Verify payment signature (without executing on-chain transaction).

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            VerifyResponse
        """
        logger.info(f"Verifying payment on {payload.accepted.network}")
        data = await self._post("/verify", self._request_body(payload, requirements))
        result = VerifyResponse.model_validate(data)
        logger.info(f"Verify result: is_valid={result.is_valid}, reason={result.invalid_reason}")
        return result

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        """
        Execute payment settlement (on-chain transaction).

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            SettleResponse with the transaction id
        """
        logger.info(f"Settling payment on {payload.accepted.network}")
        data = await self._post("/settle", self._request_body(payload, requirements))
        result = SettleResponse.model_validate(data)
        logger.info(
            f"Settle result: success={result.success}, transaction={result.transaction_id}"
        )
        return result

    async def discover_signer(self, chain_address: str) -> Optional[str]:
        """
        Discover the facilitator's operating address for a network.

        Performs one best-effort GET to /supported per facilitator URL; the result,
        including a failure, is cached for the lifetime of this client.

        Args:
            chain_address: CAIP-2 chain address (e.g. "eip155:84532")

        Returns:
            Signer address, or None when the facilitator does not advertise one
        """
        base_url = self.get_facilitator_url(chain_address)
        if base_url in self._signer_cache:
            return self._signer_cache[base_url]

        signer: Optional[str] = None
        try:
            client = await self._get_client()
            response = await self._with_timeout(
                "Facilitator discovery", lambda: client.get(f"{base_url}/supported")
            )
            if response.is_success:
                supported = SupportedResponse.model_validate(response.json())
                namespace = chain_address.split(":", 1)[0]
                candidates = supported.signers.get(chain_address) or supported.signers.get(
                    f"{namespace}:*"
                )
                signer = candidates[0] if candidates else None
            else:
                logger.debug(f"Signer discovery at {base_url} returned {response.status_code}")
        except Exception as e:
            logger.debug(f"Signer discovery at {base_url} failed: {e}")

        self._signer_cache[base_url] = signer
        return signer

    async def is_healthy(self) -> bool:
        """GET /health on the override or default facilitator."""
        url = f"{self.get_facilitator_url()}/health"
        try:
            client = await self._get_client()
            response = await self._with_timeout("Facilitator health check", lambda: client.get(url))
            return response.is_success
        except Exception as e:
            logger.warning(f"Facilitator health check failed: {e}")
            return False
