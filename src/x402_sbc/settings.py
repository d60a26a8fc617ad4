"""
Environment-driven settings for x402_sbc
"""

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional

from dotenv import dotenv_values

from x402_sbc.config import NetworkRegistry
from x402_sbc.exceptions import ConfigurationError
from x402_sbc.logging_config import setup_logging

if TYPE_CHECKING:
    from x402_sbc.facilitator import FacilitatorClient

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class X402Settings:
    """Settings shared by the client and the gate"""

    network: Optional[str] = None
    facilitator_url: Optional[str] = None
    api_key: Optional[str] = None
    rpc_url: Optional[str] = None
    timeout_seconds: float = 30.0
    skip_balance_check: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = ".env",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "X402Settings":
        """
        Load settings from a .env file and the process environment.

        Process environment values take precedence over the file.

        Args:
            env_file: Path of the .env file; missing files are ignored
            environ: Environment mapping (default: os.environ)

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        values: dict[str, Optional[str]] = {}
        if env_file:
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)

        network = values.get("X402_NETWORK") or None
        if network is not None and not NetworkRegistry.is_supported(network):
            raise ConfigurationError(
                f'X402_NETWORK: unsupported network "{network}". '
                f"Supported: {', '.join(NetworkRegistry.names())}"
            )

        timeout_raw = values.get("X402_TIMEOUT_SECONDS") or "30"
        try:
            timeout_seconds = float(timeout_raw)
        except ValueError:
            raise ConfigurationError(f"X402_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
        if timeout_seconds <= 0:
            raise ConfigurationError("X402_TIMEOUT_SECONDS must be positive")

        log_level = (values.get("X402_LOG_LEVEL") or "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"X402_LOG_LEVEL: unknown level {log_level!r}")

        return cls(
            network=network,
            facilitator_url=values.get("X402_FACILITATOR_URL") or None,
            api_key=values.get("X402_API_KEY") or None,
            rpc_url=values.get("X402_RPC_URL") or None,
            timeout_seconds=timeout_seconds,
            skip_balance_check=_parse_bool(
                "X402_SKIP_BALANCE_CHECK", values.get("X402_SKIP_BALANCE_CHECK")
            ),
            log_level=log_level,
        )

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    def configure_logging(self) -> None:
        """Install the x402_sbc log handler at the configured X402_LOG_LEVEL."""
        setup_logging(self.log_level_value)

    def facilitator_client(self) -> "FacilitatorClient":
        """Build a FacilitatorClient from these settings."""
        from x402_sbc.facilitator import FacilitatorClient

        return FacilitatorClient(
            facilitator_url=self.facilitator_url,
            api_key=self.api_key,
            timeout=self.timeout_seconds,
        )


def _parse_bool(key: str, raw: Optional[str]) -> bool:
    value = (raw or "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {raw!r}")
