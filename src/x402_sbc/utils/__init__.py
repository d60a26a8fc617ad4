"""
Utility helpers shared by the client, facilitator and gate
"""

from x402_sbc.utils.amounts import decimal_to_atomic
from x402_sbc.utils.retry import RetryOptions, backoff_delay, is_retryable, with_retry
from x402_sbc.utils.url import normalize_localhost

__all__ = [
    "decimal_to_atomic",
    "normalize_localhost",
    "RetryOptions",
    "backoff_delay",
    "is_retryable",
    "with_retry",
]
