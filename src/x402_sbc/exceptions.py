"""
x402 custom exception hierarchy
"""

from typing import Any, Iterable


class X402Error(Exception):
    """x402 base exception"""

    pass


class ConfigurationError(X402Error):
    """Invalid configuration"""

    pass


class UnknownNetworkError(ConfigurationError):
    """Raised when a network name is not in the registry"""

    def __init__(self, network: str, valid_networks: Iterable[str]):
        self.network = network
        self.valid_networks = list(valid_networks)
        super().__init__(
            f'Unsupported network: "{network}". Supported: {", ".join(self.valid_networks)}'
        )


class InsufficientBalanceError(X402Error):
    """Raised when the payer's token balance is below the required amount"""

    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        super().__init__(f"Insufficient balance. Required: {required}, Available: {balance}")


class FacilitatorError(X402Error):
    """Facilitator returned a non-2xx or unreadable response"""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class PaymentTimeoutError(X402Error):
    """An outbound payment call exceeded its timeout"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} timed out")


class SigningError(X402Error):
    """Signature creation failed"""

    pass


class SigningCancelledError(SigningError):
    """The signer refused or the user rejected the signature request"""

    pass


class RpcError(X402Error):
    """JSON-RPC call against a chain node failed"""

    pass


class PaymentRequiredError(X402Error):
    """Server still demands payment after a paid request"""

    def __init__(self, message: str, body: str | None = None):
        self.body = body
        super().__init__(message)


class PaymentParseError(X402Error):
    """A 402 challenge could not be parsed"""

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(message)


class NoSuitablePaymentError(X402Error):
    """None of the advertised offers can be paid"""

    def __init__(self, networks: Iterable[str]):
        self.networks = list(networks)
        super().__init__(
            f"No suitable payment option found for networks: {', '.join(self.networks)}"
        )


class PaymentVerificationError(X402Error):
    """Facilitator rejected the payment during verification"""

    def __init__(self, reason: str | None):
        self.reason = reason
        super().__init__(f"Payment verification failed: {reason}")


class SettlementError(X402Error):
    """Facilitator failed to settle the payment"""

    def __init__(self, reason: str | None):
        self.reason = reason
        super().__init__(f"Payment settlement failed: {reason}")
