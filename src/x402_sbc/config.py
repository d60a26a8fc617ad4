"""
Network configuration for x402 protocol
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Literal, Mapping, Optional

from x402_sbc.exceptions import UnknownNetworkError

NetworkFamily = Literal["evm", "solana"]

DEFAULT_FACILITATOR_URL = "https://x402.stablecoin.xyz"

# Used when neither discovery nor the requirement names the facilitator
FALLBACK_FACILITATOR_ADDRESS = "0x124b082e8df36258198da4caa3b39c7dfa64d9ce"


@dataclass(frozen=True)
class NetworkConfig:
    """Static chain metadata for one supported network"""

    name: str
    chain_id: int
    rpc_url: str
    facilitator_url: str
    facilitator_address: str
    default_asset: str
    explorer_url: str
    decimals: int
    token_name: str
    family: NetworkFamily = "evm"
    uses_permit: bool = False
    testnet: bool = False

    @property
    def is_evm(self) -> bool:
        return self.family == "evm"

    def with_overrides(
        self, rpc_url: Optional[str] = None, facilitator_url: Optional[str] = None
    ) -> "NetworkConfig":
        """Return a copy with per-call endpoint overrides applied."""
        return replace(
            self,
            rpc_url=rpc_url or self.rpc_url,
            facilitator_url=facilitator_url or self.facilitator_url,
        )

    def tx_url(self, tx_hash: str) -> Optional[str]:
        """Explorer link for a settled transaction, if the network has an explorer."""
        if not self.explorer_url:
            return None
        base, _, query = self.explorer_url.partition("?")
        url = f"{base.rstrip('/')}/tx/{tx_hash}"
        return f"{url}?{query}" if query else url


SUPPORTED_NETWORKS: Mapping[str, NetworkConfig] = MappingProxyType(
    {
        "base": NetworkConfig(
            name="Base",
            chain_id=8453,
            rpc_url="https://mainnet.base.org",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="0xdeE710bB6a3b652C35B5cB74E7bdb03EE1F641E6",
            default_asset="0xfdcC3dd6671eaB0709A4C0f3F53De9a333d80798",
            explorer_url="https://basescan.org",
            decimals=18,
            token_name="Stable Coin",
            uses_permit=True,
        ),
        "base-sepolia": NetworkConfig(
            name="Base Sepolia",
            chain_id=84532,
            rpc_url="https://sepolia.base.org",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="0xdeE710bB6a3b652C35B5cB74E7bdb03EE1F641E6",
            default_asset="0xf9FB20B8E097904f0aB7d12e9DbeE88f2dcd0F16",
            explorer_url="https://sepolia.basescan.org",
            decimals=6,
            token_name="Stable Coin",
            uses_permit=True,
            testnet=True,
        ),
        "radius": NetworkConfig(
            name="Radius",
            chain_id=723,
            rpc_url="",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="0xdeE710bB6a3b652C35B5cB74E7bdb03EE1F641E6",
            default_asset="",
            explorer_url="",
            decimals=6,
            token_name="Stable Coin",
            uses_permit=True,
        ),
        "radius-testnet": NetworkConfig(
            name="Radius Testnet",
            chain_id=72344,
            rpc_url="",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="0xdeE710bB6a3b652C35B5cB74E7bdb03EE1F641E6",
            default_asset="",
            explorer_url="",
            decimals=6,
            token_name="Stable Coin",
            uses_permit=True,
            testnet=True,
        ),
        "solana": NetworkConfig(
            name="Solana",
            chain_id=0,
            rpc_url="https://api.mainnet-beta.solana.com",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="2mSjKVjzRGXcipq3DdJCijbepugfNSJCN1yVN2tgdw5K",
            default_asset="",
            explorer_url="https://explorer.solana.com",
            decimals=9,
            token_name="",
            family="solana",
        ),
        "solana-devnet": NetworkConfig(
            name="Solana Devnet",
            chain_id=0,
            rpc_url="https://api.devnet.solana.com",
            facilitator_url=DEFAULT_FACILITATOR_URL,
            facilitator_address="2mSjKVjzRGXcipq3DdJCijbepugfNSJCN1yVN2tgdw5K",
            default_asset="",
            explorer_url="https://explorer.solana.com?cluster=devnet",
            decimals=9,
            token_name="",
            family="solana",
            testnet=True,
        ),
    }
)

# Solana uses chain id 0, so its CAIP-2 references cannot be derived
_SOLANA_CHAIN_ADDRESSES = {
    "solana": "solana:mainnet-beta",
    "solana-devnet": "solana:devnet",
}


class NetworkRegistry:
    """Lookup and CAIP-2 translation over SUPPORTED_NETWORKS"""

    @classmethod
    def names(cls) -> list[str]:
        return list(SUPPORTED_NETWORKS)

    @classmethod
    def is_supported(cls, name: str) -> bool:
        return name in SUPPORTED_NETWORKS

    @classmethod
    def resolve(cls, name: str) -> NetworkConfig:
        """
        Get the configuration of a network.

        Args:
            name: Friendly network name (e.g. "base-sepolia")

        Returns:
            NetworkConfig

        Raises:
            UnknownNetworkError: If the network is not supported
        """
        config = SUPPORTED_NETWORKS.get(name)
        if config is None:
            raise UnknownNetworkError(name, SUPPORTED_NETWORKS)
        return config

    @classmethod
    def to_caip2(cls, name: str) -> str:
        """
        Convert a friendly network name to its CAIP-2 chain address.

        Raises:
            UnknownNetworkError: If the network is not supported
        """
        config = cls.resolve(name)
        if name in _SOLANA_CHAIN_ADDRESSES:
            return _SOLANA_CHAIN_ADDRESSES[name]
        return f"eip155:{config.chain_id}"

    @classmethod
    def from_caip2(cls, chain_address: str) -> str:
        """Best-effort reverse of to_caip2; unknown input is returned unchanged."""
        for name, address in _SOLANA_CHAIN_ADDRESSES.items():
            if address == chain_address:
                return name
        if chain_address.startswith("eip155:"):
            reference = chain_address[len("eip155:") :]
            for name, config in SUPPORTED_NETWORKS.items():
                if config.is_evm and str(config.chain_id) == reference:
                    return name
        return chain_address

    @classmethod
    def find(cls, name_or_caip2: str) -> Optional[NetworkConfig]:
        """Non-raising lookup accepting a friendly name or a CAIP-2 chain address."""
        return SUPPORTED_NETWORKS.get(cls.from_caip2(name_or_caip2))
