"""
EvmAccountSigner - EVM client signer backed by eth_account
"""

import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_utils import add_0x_prefix

from x402_sbc.exceptions import SigningError
from x402_sbc.signers.client.base import EvmSigner
from x402_sbc.signers.utils import eip712_domain_type

logger = logging.getLogger(__name__)


class EvmAccountSigner(EvmSigner):
    """EVM signer wrapping a local eth_account account"""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account
        logger.debug(f"EvmAccountSigner initialized for {account.address}")

    @classmethod
    def from_private_key(cls, private_key: str) -> "EvmAccountSigner":
        """Create signer from a hex private key (0x prefix optional)."""
        return cls(Account.from_key(add_0x_prefix(private_key)))

    def get_address(self) -> str:
        return self._account.address

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        primary_type: str,
        message: dict[str, Any],
    ) -> str:
        """Sign EIP-712 typed data."""
        try:
            full_data = {
                "types": {"EIP712Domain": eip712_domain_type(domain), **types},
                "domain": domain,
                "primaryType": primary_type,
                "message": message,
            }
            signed = self._account.sign_message(encode_typed_data(full_message=full_data))
            return "0x" + bytes(signed.signature).hex()
        except Exception as e:
            raise SigningError(f"Failed to sign typed data: {e}") from e
