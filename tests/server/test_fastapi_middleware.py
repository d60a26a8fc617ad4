"""
FastAPI middleware tests
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from conftest import PAY_TO
from x402_sbc.encoding import decode_header, encode_header
from x402_sbc.exceptions import UnknownNetworkError
from x402_sbc.fastapi import X402Middleware, x402_protected
from x402_sbc.server import PaymentOffer
from x402_sbc.types import (
    AcceptedPayment,
    PaymentPayload,
    SettleResponse,
    VerifyResponse,
)

OFFER = PaymentOffer(pay_to=PAY_TO, amount="1000000", network="base-sepolia")


@pytest.fixture
def facilitator():
    client = MagicMock()
    client.verify = AsyncMock(return_value=VerifyResponse(is_valid=True))
    client.settle = AsyncMock(return_value=SettleResponse(success=True, transaction="0xabc"))
    return client


@pytest.fixture
def app(facilitator):
    middleware = X402Middleware(facilitator)
    app = FastAPI()

    @app.get("/premium")
    @middleware.protect(OFFER)
    async def premium(request: Request):
        return {"data": "premium"}

    @app.get("/report")
    @middleware.protect(OFFER)
    async def report(request: Request):
        return PlainTextResponse("report", headers={"X-Report": "1"})

    @app.get("/free")
    async def free():
        return {"data": "free"}

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def payment_header() -> str:
    payload = PaymentPayload(
        accepted=AcceptedPayment(network="eip155:84532", scheme="exact"),
        payload={"signature": "0x" + "ab" * 65},
    )
    return encode_header(payload)


def test_unpaid_request_gets_challenge(client, facilitator):
    response = client.get("/premium")

    assert response.status_code == 402
    body = response.json()
    assert body["accepts"][0]["network"] == "base-sepolia"
    assert body["accepts"][0]["resource"] == "http://testserver/premium"
    assert decode_header(response.headers["PAYMENT-REQUIRED"]) == body
    facilitator.verify.assert_not_called()


def test_paid_request_reaches_endpoint(client, facilitator):
    response = client.get("/premium", headers={"PAYMENT-SIGNATURE": payment_header()})

    assert response.status_code == 200
    assert response.json() == {"data": "premium"}
    confirmation = decode_header(response.headers["PAYMENT-RESPONSE"])
    assert confirmation == {"success": True, "transaction": "0xabc", "network": "base-sepolia"}
    facilitator.settle.assert_awaited_once()


def test_endpoint_response_object_is_kept(client):
    response = client.get("/report", headers={"X-PAYMENT": payment_header()})

    assert response.status_code == 200
    assert response.text == "report"
    assert response.headers["X-Report"] == "1"
    assert "PAYMENT-RESPONSE" in response.headers


def test_failed_verification_blocks_endpoint(client, facilitator):
    facilitator.verify.return_value = VerifyResponse(is_valid=False, invalid_reason="expired")

    response = client.get("/premium", headers={"PAYMENT-SIGNATURE": payment_header()})

    assert response.status_code == 402
    assert response.json()["error"] == "expired"
    facilitator.settle.assert_not_called()


def test_failed_settlement_blocks_endpoint(client, facilitator):
    facilitator.settle.return_value = SettleResponse(success=False, error="reverted")

    response = client.get("/premium", headers={"PAYMENT-SIGNATURE": payment_header()})

    assert response.status_code == 402
    assert response.json() == {"error": "Payment settlement failed: reverted"}


def test_unprotected_route_untouched(client):
    response = client.get("/free")
    assert response.status_code == 200
    assert "PAYMENT-REQUIRED" not in response.headers


def test_unknown_network_fails_at_decoration():
    with pytest.raises(UnknownNetworkError):
        x402_protected(PaymentOffer(pay_to=PAY_TO, amount="1", network="polygon"))
