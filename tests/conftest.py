"""
Pytest configuration and fixtures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from x402_sbc.signers import EvmAccountSigner, SolanaKeypairSigner
from x402_sbc.types import PaymentRequirements

PAYER = "0x" + "11" * 20
PAY_TO = "0x" + "22" * 20
FACILITATOR = "0x" + "33" * 20
ASSET = "0xf9fb20b8e097904f0ab7d12e9dbee88f2dcd0f16"
SOLANA_PAY_TO = "2mSjKVjzRGXcipq3DdJCijbepugfNSJCN1yVN2tgdw5K"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    """Retries back off instantly in tests"""

    async def _no_sleep(seconds):
        return None

    monkeypatch.setattr("x402_sbc.utils.retry._sleep", _no_sleep)


@pytest.fixture
def mock_evm_private_key():
    """Throwaway EVM private key"""
    return "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


@pytest.fixture
def evm_signer(mock_evm_private_key):
    return EvmAccountSigner.from_private_key(mock_evm_private_key)


@pytest.fixture
def solana_signer():
    return SolanaKeypairSigner.from_secret_key(bytes(range(32)))


@pytest.fixture
def mock_evm_signer():
    """EVM signer returning a fixed signature"""
    signer = MagicMock()
    signer.get_address.return_value = PAYER
    signer.sign_typed_data = AsyncMock(return_value="0x" + "ab" * 65)
    return signer


@pytest.fixture
def base_sepolia_requirements():
    return PaymentRequirements(
        scheme="exact",
        network="base-sepolia",
        maxAmountRequired="1000000",
        resource="https://api.example.com/premium",
        payTo=PAY_TO,
        asset=ASSET,
        maxTimeoutSeconds=300,
        facilitator=FACILITATOR,
        extra={"name": "Stable Coin"},
    )


@pytest.fixture
def solana_requirements():
    return PaymentRequirements(
        scheme="exact",
        network="solana-devnet",
        maxAmountRequired="5000",
        resource="https://api.example.com/premium",
        payTo=SOLANA_PAY_TO,
        asset="",
    )
