"""
Wire model tests
"""

import pytest
from pydantic import ValidationError

from x402_sbc.types import (
    PaymentPayload,
    PaymentRequired,
    PayloadKind,
    SettleResponse,
    SolanaPaymentPayload,
    decode_scheme_payload,
)


def test_settle_response_accepts_both_transaction_aliases():
    assert SettleResponse.model_validate({"success": True, "txHash": "0xa"}).transaction_id == "0xa"
    assert (
        SettleResponse.model_validate({"success": True, "transaction": "0xb"}).transaction_id
        == "0xb"
    )
    assert SettleResponse(success=False).transaction_id is None


def test_settle_response_failure_reason_prefers_error():
    response = SettleResponse.model_validate(
        {"success": False, "error": "reverted", "errorReason": "insufficient_funds"}
    )
    assert response.failure_reason == "reverted"
    assert SettleResponse(success=False, error_reason="expired").failure_reason == "expired"


def test_payment_required_accepts_protocol_version_alias(base_sepolia_requirements):
    challenge = PaymentRequired.model_validate(
        {"protocolVersion": 2, "accepts": [base_sepolia_requirements.model_dump(by_alias=True)]}
    )
    assert challenge.x402_version == 2
    assert challenge.model_dump(by_alias=True)["x402Version"] == 2


def test_payment_requirements_are_immutable(base_sepolia_requirements):
    with pytest.raises(ValidationError):
        base_sepolia_requirements.pay_to = "0x" + "99" * 20


def test_payment_payload_wraps_scheme_payload():
    scheme_payload = SolanaPaymentPayload(
        from_address="A", to="B", amount="1", nonce="1", deadline=2, signature="sig"
    )
    payload = PaymentPayload.from_scheme_payload("solana:devnet", "exact", scheme_payload)

    assert payload.accepted.network == "solana:devnet"
    assert payload.payload["from"] == "A"
    restored = decode_scheme_payload(PayloadKind.SOLANA_SIGNED_MESSAGE, payload.payload)
    assert restored == scheme_payload
