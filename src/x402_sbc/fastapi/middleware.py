"""
FastAPI middleware for x402 payment processing
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from x402_sbc.facilitator import FacilitatorClient
from x402_sbc.server.gate import PaymentGate, PaymentOffer

logger = logging.getLogger(__name__)


class X402Middleware:
    """
    FastAPI middleware for automatic 402 payment handling.

    Usage:
        app = FastAPI()
        middleware = X402Middleware()

        @app.get("/premium")
        @middleware.protect(
            PaymentOffer(pay_to="0x...", amount="1000000", network="base-sepolia")
        )
        async def premium(request: Request):
            return {"data": "secret"}
    """

    def __init__(self, facilitator: Optional[FacilitatorClient] = None) -> None:
        self._facilitator = facilitator
        self._gates: list[PaymentGate] = []

    async def close(self) -> None:
        """Close facilitator clients created by protected endpoints"""
        for gate in self._gates:
            await gate.close()

    def protect(self, offers: PaymentOffer | Sequence[PaymentOffer]) -> Callable:
        """
        Decorator to protect an endpoint with payment offers.

        The endpoint must accept ``request: Request`` as its first argument.
        Offers are validated when the decorator is applied.

        Args:
            offers: One offer or a list of offers on different networks

        Returns:
            Decorated function
        """
        gate = PaymentGate(offers, facilitator=self._facilitator)
        self._gates.append(gate)

        def decorator(func: Callable) -> Callable:
            @wraps(func)
            async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
                result = await gate.process(request.headers.get, str(request.url))
                if not result.authorized:
                    logger.info(f"Rejected {request.url.path}: {result.state.value}")
                    return JSONResponse(
                        content=result.body or {},
                        status_code=result.status_code,
                        headers=result.headers,
                    )

                response = await func(request, *args, **kwargs)
                if not isinstance(response, Response):
                    response = JSONResponse(content=response)
                for name, value in result.headers.items():
                    response.headers[name] = value
                return response

            return wrapper

        return decorator


def x402_protected(
    offers: PaymentOffer | Sequence[PaymentOffer],
    facilitator: Optional[FacilitatorClient] = None,
) -> Callable:
    """
    Convenience decorator to protect endpoints.

    Usage:
        @app.get("/premium")
        @x402_protected(
            [
                PaymentOffer(pay_to="0x...", amount="1000000", network="base-sepolia"),
                PaymentOffer(pay_to="So1...", amount="1000000", network="solana-devnet"),
            ]
        )
        async def premium(request: Request):
            return {"data": "secret"}
    """
    return X402Middleware(facilitator).protect(offers)
