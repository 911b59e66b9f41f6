"""
Helpers for constructing the JSON payloads sent to the gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ErrorCode, RequestValidationError
from .models import Amount, CardDetails, PaymentToken, Reference, TransactionKind

__all__ = [
    "CardInput",
    "GatewayRequest",
    "PaymentSource",
    "WalletCredential",
    "build_request",
    "endpoint_for",
]

_ENDPOINTS = {
    TransactionKind.PAYMENT: "transactions/payments",
    TransactionKind.TOKEN_PAYMENT: "transactions/payments",
    TransactionKind.PRE_AUTH: "transactions/preauths",
    TransactionKind.TOKEN_PRE_AUTH: "transactions/preauths",
    TransactionKind.REGISTER_CARD: "transactions/registercard",
}


@dataclass(frozen=True)
class CardInput:
    """Card data for a single transaction. ``security_code`` is sent once and dropped."""

    card_details: CardDetails
    security_code: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class WalletCredential:
    """
    Opaque credential produced by a device wallet sheet.

    ``payment_data`` is forwarded to the gateway untouched; only the gateway
    can decrypt it.
    """

    payment_data: Any
    payment_method: Optional[Mapping[str, Any]] = None
    transaction_identifier: Optional[str] = None

    def as_payload(self) -> Dict[str, Any]:
        token: Dict[str, Any] = {"paymentData": self.payment_data}
        if self.payment_method is not None:
            token["paymentMethod"] = dict(self.payment_method)
        if self.transaction_identifier is not None:
            token["transactionIdentifier"] = self.transaction_identifier
        return {"token": token}


PaymentSource = Union[CardInput, WalletCredential]


@dataclass(frozen=True)
class GatewayRequest:
    kind: TransactionKind
    endpoint: str
    payload: Dict[str, Any]


def endpoint_for(kind: TransactionKind) -> str:
    return _ENDPOINTS[TransactionKind(kind)]


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise RequestValidationError(ErrorCode.PARAMETER, message)


def _card_fields(source: CardInput, *, tokenized: bool) -> Dict[str, Any]:
    details = source.card_details
    fields: Dict[str, Any] = {}
    if source.security_code:
        fields["cv2"] = source.security_code
    # token transactions identify the card by its token only
    if tokenized:
        return fields
    if details.card_number:
        fields["cardNumber"] = details.card_number
    end_date = details.formatted_end_date()
    if end_date:
        fields["expiryDate"] = end_date
    return fields


def build_request(
    kind: TransactionKind,
    amount: Amount,
    reference: Reference,
    merchant_id: str,
    *,
    source: Optional[PaymentSource] = None,
    payment_token: Optional[PaymentToken] = None,
) -> GatewayRequest:
    """
    Build the endpoint and body for one transaction.

    Raises :class:`RequestValidationError` when a required value is missing or
    when a token transaction lacks its card details and token.
    """
    try:
        kind = TransactionKind(kind)
    except ValueError as exc:
        raise RequestValidationError(ErrorCode.PARAMETER, f"Unknown transaction kind '{kind}'") from exc

    _require(isinstance(amount, Amount), "amount must be an Amount")
    _require(isinstance(reference, Reference), "reference must be a Reference")
    _require(isinstance(merchant_id, str) and bool(merchant_id.strip()), "merchant_id must not be empty")
    _require(
        source is None or isinstance(source, (CardInput, WalletCredential)),
        "source must be a CardInput or WalletCredential",
    )

    if kind.requires_token:
        card_details = source.card_details if isinstance(source, CardInput) else None
        if card_details is None or payment_token is None:
            raise RequestValidationError(
                ErrorCode.MISSING_TOKEN_STATE,
                "Register a card before making a token payment or pre-auth",
            )
    elif payment_token is not None:
        raise RequestValidationError(
            ErrorCode.PARAMETER,
            f"A payment token cannot be used with a {kind.value} transaction",
        )

    if isinstance(source, WalletCredential):
        _require(kind.supports_wallet, f"Wallet credentials cannot be used with a {kind.value} transaction")
        _require(source.payment_data is not None, "wallet credential has no payment data")

    payload: Dict[str, Any] = {
        "judoId": merchant_id,
        "amount": amount.value_str,
        "currency": amount.currency.value,
        "yourConsumerReference": reference.consumer_reference,
        "yourPaymentReference": reference.payment_reference,
    }
    if reference.metadata:
        payload["yourPaymentMetaData"] = dict(reference.metadata)

    if isinstance(source, CardInput):
        payload.update(_card_fields(source, tokenized=kind.requires_token))
    elif isinstance(source, WalletCredential):
        payload["pkPayment"] = source.as_payload()

    if payment_token is not None:
        payload["consumerToken"] = payment_token.consumer_token
        payload["cardToken"] = payment_token.card_token

    return GatewayRequest(kind=kind, endpoint=endpoint_for(kind), payload=payload)
