"""
Facilitator client
"""

from x402_sbc.facilitator.facilitator_client import API_KEY_HEADER, FacilitatorClient

__all__ = ["FacilitatorClient", "API_KEY_HEADER"]
