"""
Raw JSON-RPC eth_call helpers for ERC-20 reads
"""

import logging
from typing import Any

import httpx
from eth_utils import remove_0x_prefix

from x402_sbc.exceptions import RpcError, SigningError
from x402_sbc.utils.retry import RetryOptions, with_retry

logger = logging.getLogger(__name__)

NONCES_SELECTOR = "0x7ecebe00"  # nonces(address)
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)

RPC_RETRY = RetryOptions(max_attempts=3)


def encode_address_call(selector: str, address: str) -> str:
    """Calldata for a single-address ERC-20 view: selector + left-zero-padded owner."""
    return selector + remove_0x_prefix(address).lower().rjust(64, "0")


def decode_uint256(result: Any) -> int:
    """Decode a big-endian eth_call result; empty or "0x" decodes to zero."""
    if not result or result == "0x":
        return 0
    return int(result, 16)


async def eth_call(
    rpc_url: str,
    to: str,
    data: str,
    http_client: httpx.AsyncClient | None = None,
) -> Any:
    """
    Issue a single eth_call against the "latest" block.

    Returns:
        The raw ``result`` field

    Raises:
        RpcError: On a non-2xx response or a JSON-RPC error object
    """
    body = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "eth_call",
        "params": [{"to": to, "data": data}, "latest"],
    }
    if http_client is not None:
        response = await http_client.post(rpc_url, json=body)
    else:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(rpc_url, json=body)

    if not response.is_success:
        raise RpcError(f"RPC request failed: {response.status_code} {response.reason_phrase}")
    payload = response.json()
    if payload.get("error"):
        error = payload["error"]
        message = error.get("message") if isinstance(error, dict) else error
        raise RpcError(f"RPC error: {message}")
    return payload.get("result")


async def get_permit_nonce(
    rpc_url: str,
    token: str,
    owner: str,
    http_client: httpx.AsyncClient | None = None,
) -> int:
    """
    Read the ERC-2612 permit nonce of ``owner`` on ``token``.

    Transport errors are retried; whatever is left after the last attempt,
    including an unreadable reply, surfaces as SigningError.

    Raises:
        SigningError: If the nonce cannot be read
    """
    data = encode_address_call(NONCES_SELECTOR, owner)

    async def call() -> int:
        return decode_uint256(await eth_call(rpc_url, token, data, http_client))

    try:
        return await with_retry(call, "get_permit_nonce", RPC_RETRY)
    except (RpcError, httpx.HTTPError, ValueError) as e:
        raise SigningError(f"Failed to fetch permit nonce: {e}") from e


async def get_token_balance(
    rpc_url: str,
    token: str,
    owner: str,
    http_client: httpx.AsyncClient | None = None,
) -> int:
    """Read the ERC-20 balance of ``owner`` on ``token``."""
    data = encode_address_call(BALANCE_OF_SELECTOR, owner)

    async def call() -> int:
        return decode_uint256(await eth_call(rpc_url, token, data, http_client))

    balance = await with_retry(call, "get_token_balance", RPC_RETRY)
    logger.debug(f"balanceOf({owner}) on {token} = {balance}")
    return balance
