"""
Client-side payment flow
"""

from x402_sbc.clients.selection import select_requirement
from x402_sbc.clients.x402_client import ClientState, X402Client, X402Response

__all__ = ["X402Client", "X402Response", "ClientState", "select_requirement"]
