"""
HTTP header names of the x402 wire protocol
"""

PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
# Mirrors PAYMENT-SIGNATURE for deployed servers that only read the older name
LEGACY_PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"
