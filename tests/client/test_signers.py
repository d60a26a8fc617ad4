"""
Client signer adapter tests
"""

import base58
import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from solders.keypair import Keypair

from x402_sbc.exceptions import SigningCancelledError, SigningError
from x402_sbc.signers import CallbackSolanaSigner, EvmAccountSigner, SolanaKeypairSigner
from x402_sbc.signers.utils import eip712_domain_type

DOMAIN = {
    "name": "Stable Coin",
    "version": "1",
    "chainId": 84532,
    "verifyingContract": "0x" + "aa" * 20,
}
TYPES = {"Mail": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}]}
MESSAGE = {"to": "0x" + "bb" * 20, "amount": 42}


def test_eip712_domain_type_follows_canonical_order():
    domain = {"verifyingContract": "0x" + "aa" * 20, "chainId": 1, "name": "X"}
    assert [field["name"] for field in eip712_domain_type(domain)] == [
        "name",
        "chainId",
        "verifyingContract",
    ]


def test_evm_signer_accepts_key_without_prefix(mock_evm_private_key):
    with_prefix = EvmAccountSigner.from_private_key(mock_evm_private_key)
    without_prefix = EvmAccountSigner.from_private_key(mock_evm_private_key[2:])
    assert with_prefix.get_address() == without_prefix.get_address()
    assert with_prefix.get_address() == Account.from_key(mock_evm_private_key).address


@pytest.mark.anyio
async def test_evm_signer_signature_recovers_to_address(evm_signer):
    signature = await evm_signer.sign_typed_data(DOMAIN, TYPES, "Mail", MESSAGE)

    assert signature.startswith("0x")
    assert len(signature) == 2 + 65 * 2
    signable = encode_typed_data(
        full_message={
            "types": {"EIP712Domain": eip712_domain_type(DOMAIN), **TYPES},
            "domain": DOMAIN,
            "primaryType": "Mail",
            "message": MESSAGE,
        }
    )
    assert Account.recover_message(signable, signature=signature) == evm_signer.get_address()


@pytest.mark.anyio
async def test_evm_signer_wraps_failures(evm_signer):
    with pytest.raises(SigningError):
        await evm_signer.sign_typed_data(DOMAIN, TYPES, "Missing", MESSAGE)


def test_solana_signer_from_seed_and_full_key():
    keypair = Keypair.from_seed(bytes(range(32)))
    from_seed = SolanaKeypairSigner.from_secret_key(bytes(range(32)))
    from_full = SolanaKeypairSigner.from_secret_key(bytes(keypair))
    from_b58 = SolanaKeypairSigner.from_base58(base58.b58encode(bytes(keypair)).decode())

    assert from_seed.get_address() == str(keypair.pubkey())
    assert from_full.get_address() == str(keypair.pubkey())
    assert from_b58.get_address() == str(keypair.pubkey())


@pytest.mark.parametrize("length", [0, 31, 33, 63, 65])
def test_solana_signer_rejects_other_key_lengths(length):
    with pytest.raises(ValueError, match="32 or 64"):
        SolanaKeypairSigner.from_secret_key(b"\x01" * length)


@pytest.mark.anyio
async def test_solana_signer_signs_raw_bytes(solana_signer):
    signature = await solana_signer.sign_message(b"hello")
    assert len(signature) == 64


@pytest.mark.anyio
async def test_callback_signer_sync_and_async():
    keypair = Keypair.from_seed(bytes(range(32)))

    def sign_sync(message: bytes) -> bytes:
        return bytes(keypair.sign_message(message))

    async def sign_async(message: bytes) -> bytes:
        return bytes(keypair.sign_message(message))

    sync_signer = CallbackSolanaSigner(str(keypair.pubkey()), sign_sync)
    async_signer = CallbackSolanaSigner(str(keypair.pubkey()), sign_async)

    assert await sync_signer.sign_message(b"m") == await async_signer.sign_message(b"m")
    assert sync_signer.get_address() == str(keypair.pubkey())


@pytest.mark.anyio
async def test_callback_signer_errors():
    def broken(message: bytes) -> bytes:
        raise RuntimeError("wallet disconnected")

    def rejected(message: bytes) -> bytes:
        raise SigningCancelledError("user rejected")

    def short(message: bytes) -> bytes:
        return b"\x00" * 10

    with pytest.raises(SigningError, match="wallet disconnected"):
        await CallbackSolanaSigner("pk", broken).sign_message(b"m")
    with pytest.raises(SigningCancelledError):
        await CallbackSolanaSigner("pk", rejected).sign_message(b"m")
    with pytest.raises(SigningError, match="10-byte"):
        await CallbackSolanaSigner("pk", short).sign_message(b"m")
