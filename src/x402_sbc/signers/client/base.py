"""
Client signer interfaces
"""

from abc import ABC, abstractmethod
from typing import Any


class EvmSigner(ABC):
    """
    Abstract EVM signer.

    The engine only asks for structured (EIP-712) signatures and the address;
    key custody stays with the implementation.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Get the signer's account address"""
        pass

    @abstractmethod
    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        primary_type: str,
        message: dict[str, Any],
    ) -> str:
        """
        Sign typed data (EIP-712).

        Args:
            domain: EIP-712 domain
            types: Type definitions, without EIP712Domain
            primary_type: Name of the struct being signed
            message: Message to sign

        Returns:
            Signature string (0x-prefixed hex)

        Raises:
            SigningError: If the signature cannot be produced
            SigningCancelledError: If the user rejected the request
        """
        pass


class SolanaSigner(ABC):
    """Abstract Solana signer producing detached Ed25519 signatures."""

    @abstractmethod
    def get_address(self) -> str:
        """Get the base58 public key"""
        pass

    @abstractmethod
    async def sign_message(self, message: bytes) -> bytes:
        """
        Sign raw message bytes.

        Returns:
            64-byte Ed25519 signature

        Raises:
            SigningError: If the signature cannot be produced
            SigningCancelledError: If the user rejected the request
        """
        pass
