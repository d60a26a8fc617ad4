"""
Solana client signers
"""

import inspect
from typing import Awaitable, Callable, Union

import base58
from solders.keypair import Keypair

from x402_sbc.exceptions import SigningError
from x402_sbc.signers.client.base import SolanaSigner

SignFn = Callable[[bytes], Union[bytes, Awaitable[bytes]]]


class SolanaKeypairSigner(SolanaSigner):
    """Signer backed by an in-process solders Keypair"""

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @classmethod
    def from_secret_key(cls, secret: bytes) -> "SolanaKeypairSigner":
        """
        Create signer from raw key bytes.

        Args:
            secret: 32-byte seed or 64-byte secret key (seed followed by public key)

        Raises:
            ValueError: For any other length
        """
        if len(secret) == 32:
            return cls(Keypair.from_seed(secret))
        if len(secret) == 64:
            return cls(Keypair.from_bytes(secret))
        raise ValueError(f"Invalid secret key length: expected 32 or 64 bytes, got {len(secret)}")

    @classmethod
    def from_base58(cls, secret: str) -> "SolanaKeypairSigner":
        """Create signer from a base58-encoded secret key."""
        return cls.from_secret_key(base58.b58decode(secret))

    def get_address(self) -> str:
        return str(self._keypair.pubkey())

    async def sign_message(self, message: bytes) -> bytes:
        try:
            return bytes(self._keypair.sign_message(message))
        except Exception as e:
            raise SigningError(f"Failed to sign message: {e}") from e


class CallbackSolanaSigner(SolanaSigner):
    """
    Signer delegating to an external wallet callable.

    ``sign_fn`` receives the message bytes and returns the 64-byte signature,
    either directly or as an awaitable (browser bridge, HSM, remote wallet).
    It may raise SigningCancelledError when the user rejects the request.
    """

    def __init__(self, public_key: str, sign_fn: SignFn) -> None:
        self._public_key = public_key
        self._sign_fn = sign_fn

    def get_address(self) -> str:
        return self._public_key

    async def sign_message(self, message: bytes) -> bytes:
        try:
            result = self._sign_fn(message)
            if inspect.isawaitable(result):
                result = await result
        except SigningError:
            raise
        except Exception as e:
            raise SigningError(f"Wallet failed to sign message: {e}") from e
        signature = bytes(result)
        if len(signature) != 64:
            raise SigningError(f"Wallet returned a {len(signature)}-byte signature, expected 64")
        return signature
