"""
Type definitions for the x402 protocol
"""

from enum import Enum
from typing import Any, ClassVar, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

X402_VERSION = 2

Scheme = Literal["exact", "upto"]


class PaymentRequirementsExtra(BaseModel):
    """Token display metadata used for structured-signing domains"""

    name: Optional[str] = None
    version: Optional[str] = None

    class Config:
        frozen = True


class PaymentRequirements(BaseModel):
    """One payment offer advertised by a server"""

    scheme: Scheme = "exact"
    network: str
    max_amount_required: str = Field(alias="maxAmountRequired")
    resource: str = ""
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")
    pay_to: str = Field(alias="payTo")
    asset: str
    max_timeout_seconds: int = Field(300, alias="maxTimeoutSeconds")
    facilitator: Optional[str] = None
    extra: Optional[PaymentRequirementsExtra] = None

    class Config:
        populate_by_name = True
        frozen = True


class PaymentRequired(BaseModel):
    """402 challenge body"""

    x402_version: int = Field(
        X402_VERSION,
        validation_alias=AliasChoices("x402_version", "x402Version", "protocolVersion"),
        serialization_alias="x402Version",
    )
    accepts: list[PaymentRequirements]
    error: Optional[str] = None

    class Config:
        populate_by_name = True


class PayloadKind(str, Enum):
    """Tag of a scheme-specific authorization variant"""

    PERMIT = "permit"
    DIRECT_PAYMENT = "direct_payment"
    TRANSFER_WITH_AUTHORIZATION = "transfer_with_authorization"
    SOLANA_SIGNED_MESSAGE = "solana_signed_message"


class PermitAuthorization(BaseModel):
    """ERC-2612 permit fields; ``to`` is the spender (facilitator)"""

    from_address: str = Field(alias="from")
    to: str
    value: str
    valid_before: int = Field(alias="validBefore")
    nonce: str

    class Config:
        populate_by_name = True


class PermitPayload(BaseModel):
    """Permit authorization with its signature"""

    kind: ClassVar[PayloadKind] = PayloadKind.PERMIT

    authorization: PermitAuthorization
    signature: str


class DirectPaymentPayload(BaseModel):
    """Legacy direct payment authorization, requires a prior allowance"""

    kind: ClassVar[PayloadKind] = PayloadKind.DIRECT_PAYMENT

    signature: str
    from_address: str = Field(alias="from")
    to: str
    amount: str
    nonce: int
    deadline: int

    class Config:
        populate_by_name = True


class TransferAuthorization(BaseModel):
    """EIP-3009 TransferWithAuthorization fields"""

    from_address: str = Field(alias="from")
    to: str
    value: str
    valid_after: int = Field(alias="validAfter")
    valid_before: int = Field(alias="validBefore")
    nonce: str

    class Config:
        populate_by_name = True


class TransferAuthorizationPayload(BaseModel):
    """EIP-3009 authorization with its signature"""

    kind: ClassVar[PayloadKind] = PayloadKind.TRANSFER_WITH_AUTHORIZATION

    signature: str
    authorization: TransferAuthorization


class SolanaPaymentPayload(BaseModel):
    """Detached Ed25519 signature over the canonical pipe-delimited message"""

    kind: ClassVar[PayloadKind] = PayloadKind.SOLANA_SIGNED_MESSAGE

    from_address: str = Field(alias="from")
    to: str
    amount: str
    nonce: str
    deadline: int
    signature: str

    class Config:
        populate_by_name = True


SchemePayload = Union[
    PermitPayload, DirectPaymentPayload, TransferAuthorizationPayload, SolanaPaymentPayload
]

SCHEME_PAYLOAD_TYPES: dict[PayloadKind, type[BaseModel]] = {
    PayloadKind.PERMIT: PermitPayload,
    PayloadKind.DIRECT_PAYMENT: DirectPaymentPayload,
    PayloadKind.TRANSFER_WITH_AUTHORIZATION: TransferAuthorizationPayload,
    PayloadKind.SOLANA_SIGNED_MESSAGE: SolanaPaymentPayload,
}


def decode_scheme_payload(kind: PayloadKind, data: dict[str, Any]) -> SchemePayload:
    """Parse the wire form of a scheme payload into its typed variant"""
    return SCHEME_PAYLOAD_TYPES[kind].model_validate(data)  # type: ignore[return-value]


class AcceptedPayment(BaseModel):
    """Network (CAIP-2) and scheme the payer committed to"""

    network: str
    scheme: Scheme = "exact"


class PaymentPayload(BaseModel):
    """Payment envelope sent by the client and forwarded to the facilitator"""

    accepted: AcceptedPayment
    payload: dict[str, Any]

    @classmethod
    def from_scheme_payload(
        cls, chain_address: str, scheme: Scheme, scheme_payload: SchemePayload
    ) -> "PaymentPayload":
        return cls(
            accepted=AcceptedPayment(network=chain_address, scheme=scheme),
            payload=scheme_payload.model_dump(by_alias=True),
        )


class VerifyResponse(BaseModel):
    """Facilitator verify result"""

    is_valid: bool = Field(alias="isValid")
    invalid_reason: Optional[str] = Field(None, alias="invalidReason")
    payer: Optional[str] = None

    class Config:
        populate_by_name = True


class SettleResponse(BaseModel):
    """Facilitator settle result; the transaction id may arrive as txHash or transaction"""

    success: bool
    tx_hash: Optional[str] = Field(None, alias="txHash")
    transaction: Optional[str] = None
    network: Optional[str] = None
    network_id: Optional[str] = Field(None, alias="networkId")
    error: Optional[str] = None
    error_reason: Optional[str] = Field(None, alias="errorReason")

    class Config:
        populate_by_name = True

    @property
    def transaction_id(self) -> Optional[str]:
        return self.tx_hash or self.transaction

    @property
    def failure_reason(self) -> Optional[str]:
        return self.error or self.error_reason


class SupportedResponse(BaseModel):
    """Facilitator /supported response"""

    kinds: list[dict[str, Any]] = Field(default_factory=list)
    signers: dict[str, list[str]] = Field(default_factory=dict)


class PaymentConfirmation(BaseModel):
    """Body of the PAYMENT-RESPONSE header"""

    success: bool = True
    transaction: Optional[str] = None
    network: Optional[str] = None


class PaymentResult(BaseModel):
    """Outcome of a paid request as seen by the client"""

    success: bool
    tx_hash: Optional[str] = Field(None, alias="txHash")
    amount_paid: Optional[str] = Field(None, alias="amountPaid")
    network: Optional[str] = None
    error: Optional[str] = None

    class Config:
        populate_by_name = True
