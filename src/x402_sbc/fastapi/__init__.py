"""
FastAPI middleware for x402 payment handling
"""

from x402_sbc.fastapi.middleware import X402Middleware, x402_protected

__all__ = ["X402Middleware", "x402_protected"]
