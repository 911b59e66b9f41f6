"""
Immutable value types exchanged between callers, the request builder and the
gateway.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

__all__ = [
    "Amount",
    "CardConfiguration",
    "CardDetails",
    "CardNetwork",
    "Currency",
    "PaymentToken",
    "Reference",
    "Response",
    "TransactionKind",
    "TransactionResult",
]


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    return str(value)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


class Currency(str, Enum):
    AUD = "AUD"
    CAD = "CAD"
    CHF = "CHF"
    CZK = "CZK"
    DKK = "DKK"
    EUR = "EUR"
    GBP = "GBP"
    HKD = "HKD"
    HUF = "HUF"
    JPY = "JPY"
    NOK = "NOK"
    NZD = "NZD"
    PLN = "PLN"
    SEK = "SEK"
    SGD = "SGD"
    USD = "USD"
    ZAR = "ZAR"

    @classmethod
    def parse(cls, value: "Currency | str") -> "Currency":
        if isinstance(value, Currency):
            return value
        code = str(value).strip().upper()
        try:
            return cls(code)
        except ValueError as exc:
            raise ValueError(f"Unsupported currency '{value}'") from exc


class TransactionKind(str, Enum):
    PAYMENT = "Payment"
    PRE_AUTH = "PreAuth"
    REGISTER_CARD = "RegisterCard"
    TOKEN_PAYMENT = "TokenPayment"
    TOKEN_PRE_AUTH = "TokenPreAuth"

    @property
    def requires_token(self) -> bool:
        return self in (TransactionKind.TOKEN_PAYMENT, TransactionKind.TOKEN_PRE_AUTH)

    @property
    def supports_wallet(self) -> bool:
        return self in (TransactionKind.PAYMENT, TransactionKind.PRE_AUTH)


@dataclass(frozen=True)
class Amount:
    """A non-negative monetary value in one of the supported currencies."""

    value: Decimal
    currency: Currency = Currency.GBP

    def __post_init__(self) -> None:
        try:
            value = Decimal(str(self.value)) if not isinstance(self.value, Decimal) else self.value
        except InvalidOperation as exc:
            raise ValueError(f"Amount must be a decimal number, got '{self.value}'") from exc
        if not value.is_finite():
            raise ValueError("Amount must be a finite number")
        if value < 0:
            raise ValueError("Amount must not be negative")
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "currency", Currency.parse(self.currency))

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """
        Parse the ``"2 GBP"`` shorthand. A bare number defaults to GBP.
        """
        parts = text.split()
        if len(parts) == 1:
            return cls(parts[0])
        if len(parts) == 2:
            return cls(parts[0], Currency.parse(parts[1]))
        raise ValueError(f"Cannot parse amount from '{text}'")

    @property
    def value_str(self) -> str:
        return format(self.value, "f")

    def __str__(self) -> str:
        return f"{self.value_str} {self.currency.value}"


@dataclass(frozen=True)
class Reference:
    consumer_reference: str
    payment_reference: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("consumer_reference", "payment_reference"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string")
        metadata = dict(self.metadata or {})
        try:
            json.dumps(metadata)
        except (TypeError, ValueError) as exc:
            raise ValueError("metadata must only hold JSON-compatible values") from exc
        object.__setattr__(self, "metadata", metadata)

    @classmethod
    def generate(
        cls,
        consumer_reference: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> "Reference":
        """Build a reference with a freshly generated payment reference."""
        return cls(
            consumer_reference=consumer_reference,
            payment_reference=uuid.uuid4().hex,
            metadata=metadata or {},
        )


class CardNetwork(str, Enum):
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    MAESTRO = "MAESTRO"
    AMEX = "AMEX"
    DINERS_CLUB = "DINERS_CLUB"
    DISCOVER = "DISCOVER"
    JCB = "JCB"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class CardConfiguration:
    """Accepted network and its card number length, a hint for card-entry UIs."""

    network: CardNetwork
    length: int


@dataclass(frozen=True)
class CardDetails:
    """
    Card information safe to keep in memory between transactions.

    ``card_number`` is whatever the caller or gateway supplied: a full number
    typed in for a single transaction, or the masked form echoed back by the
    gateway. Security codes never live here.
    """

    card_number: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    cardholder_name: Optional[str] = None
    network: Optional[CardNetwork] = None

    def __post_init__(self) -> None:
        if self.expiry_month is not None and not 1 <= int(self.expiry_month) <= 12:
            raise ValueError("expiry_month must be between 1 and 12")

    def formatted_end_date(self) -> Optional[str]:
        if self.expiry_month is None or self.expiry_year is None:
            return None
        return f"{int(self.expiry_month):02d}/{int(self.expiry_year) % 100:02d}"

    @staticmethod
    def _parse_end_date(raw: Any) -> Tuple[Optional[int], Optional[int]]:
        if isinstance(raw, int) and not isinstance(raw, bool):
            raw = f"{raw:04d}"
        if not isinstance(raw, str) or not raw:
            return None, None
        digits = raw.replace("/", "").strip()
        if len(digits) != 4 or not digits.isdigit():
            return None, None
        month = int(digits[:2])
        # an out-of-range month drops the expiry
        if not 1 <= month <= 12:
            return None, None
        return month, 2000 + int(digits[2:])

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "CardDetails":
        last_four = _text(payload.get("cardLastfour") or payload.get("cardLastFour"))
        month, year = cls._parse_end_date(payload.get("endDate"))
        network: Optional[CardNetwork] = None
        raw_type = payload.get("cardType")
        if isinstance(raw_type, str):
            try:
                network = CardNetwork(raw_type.upper())
            except ValueError:
                network = CardNetwork.UNKNOWN
        return cls(
            card_number=f"****{last_four}" if last_four else _text(payload.get("cardNumber")),
            expiry_month=month,
            expiry_year=year,
            cardholder_name=_text(payload.get("cardHolderName")),
            network=network,
        )


@dataclass(frozen=True)
class PaymentToken:
    """Opaque consumer and card tokens issued by the gateway."""

    consumer_token: str
    card_token: str

    def __post_init__(self) -> None:
        if not self.consumer_token or not self.card_token:
            raise ValueError("consumer_token and card_token must both be provided")


@dataclass(frozen=True)
class TransactionResult:
    receipt_id: Optional[str]
    status: Optional[str]
    message: Optional[str] = None
    card_details: Optional[CardDetails] = None
    payment_token: Optional[PaymentToken] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return (self.status or "").lower() == "success"

    @property
    def cancelled(self) -> bool:
        return (self.status or "").lower() == "cancelled"

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "TransactionResult":
        card_payload = _mapping(payload.get("cardDetails"))
        consumer_payload = _mapping(payload.get("consumer"))

        card_details = CardDetails.from_response(card_payload) if card_payload else None

        payment_token: Optional[PaymentToken] = None
        consumer_token = _text(consumer_payload.get("consumerToken"))
        card_token = _text(card_payload.get("cardToken"))
        if consumer_token and card_token:
            payment_token = PaymentToken(consumer_token=consumer_token, card_token=card_token)

        receipt_id = payload.get("receiptId")
        return cls(
            receipt_id=None if receipt_id is None else str(receipt_id),
            status=_text(payload.get("result")),
            message=_text(payload.get("message")),
            card_details=card_details,
            payment_token=payment_token,
            raw=dict(payload),
        )


@dataclass(frozen=True)
class Response:
    """
    Ordered transaction results for one completed request.

    An empty ``items`` tuple is a valid response; it simply carries no card
    details or token.
    """

    items: Tuple[TransactionResult, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def first(self) -> Optional[TransactionResult]:
        return self.items[0] if self.items else None

    @property
    def card_details(self) -> Optional[CardDetails]:
        first = self.first
        return first.card_details if first is not None else None

    @property
    def payment_token(self) -> Optional[PaymentToken]:
        first = self.first
        return first.payment_token if first is not None else None

    @property
    def cancelled(self) -> bool:
        return any(item.cancelled for item in self.items)

    @classmethod
    def from_response(cls, payload: Any) -> "Response":
        if isinstance(payload, Mapping) and "results" in payload:
            records = payload.get("results") or []
            if not isinstance(records, list):
                raise ValueError(f"Unexpected results list: {records!r}")
        elif isinstance(payload, list):
            records = payload
        elif isinstance(payload, Mapping):
            records = [payload] if payload else []
        else:
            raise ValueError(f"Unexpected response body: {payload!r}")

        items = []
        for record in records:
            if not isinstance(record, Mapping):
                raise ValueError(f"Unexpected transaction record: {record!r}")
            items.append(TransactionResult.from_response(record))
        return cls(items=tuple(items))

    def as_dict(self) -> Dict[str, Any]:
        return {"results": [dict(item.raw) for item in self.items]}
