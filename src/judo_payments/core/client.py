"""
Transaction client: the single entry point for running gateway transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Tuple

from .config import GatewayConfig
from .errors import (
    DeviceIntegrityError,
    ErrorCode,
    NotConfiguredError,
    PaymentError,
    RequestValidationError,
)
from .integrity import FilesystemIntegrityChecker, IntegrityChecker
from .models import Amount, CardDetails, PaymentToken, Reference, Response, TransactionKind
from .payloads import CardInput, PaymentSource, WalletCredential, build_request
from .session import RequestsTransport, Session, Transport, TransportResult
from .wallet import WalletBridge

__all__ = [
    "Completion",
    "PaymentClient",
    "interpret_result",
]

Completion = Callable[[Optional[Response], Optional[PaymentError]], None]

Outcome = Tuple[Optional[Response], Optional[PaymentError]]


def _is_cancellation(body: Any) -> bool:
    return isinstance(body, Mapping) and body.get("cancelled") is True


def _gateway_failure(result: TransportResult) -> PaymentError:
    if isinstance(result.body, Mapping):
        return PaymentError.from_gateway_payload(result.body, status=result.status_code)
    return PaymentError(
        code=ErrorCode.GATEWAY,
        message=result.text or f"Gateway responded with {result.status_code}",
        status=result.status_code,
    )


def interpret_result(result: TransportResult) -> Outcome:
    """
    Map one transport outcome onto the ``(response, error)`` pair handed to
    completion callbacks. Exactly one side of the pair is set.
    """
    if result.error is not None:
        logging.warning("Gateway request failed: %s", result.error)
        return None, PaymentError(code=ErrorCode.NETWORK, message=str(result.error))

    if not result.ok:
        error = _gateway_failure(result)
        logging.warning("Gateway rejected transaction (%s): %s", result.status_code, error.message)
        return None, error

    if result.body is None and result.text.strip():
        return None, PaymentError(
            code=ErrorCode.GATEWAY,
            message=f"Could not decode gateway response: {result.text}",
            status=result.status_code,
        )

    if _is_cancellation(result.body):
        logging.debug("Transaction cancelled by the user")
        return None, PaymentError(code=ErrorCode.USER_CANCELLED, message="The user cancelled the transaction")

    try:
        response = Response.from_response(result.body if result.body is not None else {})
    except (ValueError, TypeError, AttributeError) as exc:
        return None, PaymentError(
            code=ErrorCode.GATEWAY,
            message=f"Could not decode gateway response: {exc}",
            status=result.status_code,
        )

    if response.cancelled:
        logging.debug("Transaction cancelled by the user")
        return None, PaymentError(code=ErrorCode.USER_CANCELLED, message="The user cancelled the transaction")

    first = response.first
    if first is not None:
        logging.info("Transaction %s completed with status %s", first.receipt_id, first.status)
    return response, None


class PaymentClient:
    """
    Runs payments, pre-auths, card registrations and their token and wallet
    variants against the gateway.

    The client owns exactly one :class:`Session` and keeps no state between
    calls: card details and tokens returned by one transaction are handed back
    through the :class:`Response` for the caller to pass into the next one.
    Every outcome, including validation failures, reaches the caller through
    the ``completion`` callback.
    """

    def __init__(
        self,
        session: Session,
        *,
        enforce_device_integrity: bool = False,
        integrity_checker: Optional[IntegrityChecker] = None,
    ) -> None:
        if enforce_device_integrity:
            checker = integrity_checker or FilesystemIntegrityChecker()
            if checker.is_compromised():
                raise DeviceIntegrityError("This device failed the integrity check")
        self.session = session
        self.wallet = WalletBridge(self)

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        *,
        transport: Optional[Transport] = None,
        integrity_checker: Optional[IntegrityChecker] = None,
    ) -> "PaymentClient":
        session = Session(
            token=config.token,
            secret=config.secret,
            sandboxed=config.sandboxed,
            transport=transport or RequestsTransport(timeout=config.timeout_seconds),
            api_version=config.api_version,
        )
        return cls(
            session,
            enforce_device_integrity=config.enforce_device_integrity,
            integrity_checker=integrity_checker,
        )

    # Configuration

    def set_credentials(self, token: str, secret: str) -> None:
        self.session.configure(token, secret)

    def set_sandboxed(self, enabled: bool) -> None:
        self.session.set_sandboxed(enabled)

    def is_configured(self) -> bool:
        return self.session.is_configured()

    # Transactions

    def execute(
        self,
        kind: TransactionKind,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        completion: Completion,
        *,
        source: Optional[PaymentSource] = None,
        payment_token: Optional[PaymentToken] = None,
    ) -> None:
        """
        Build, dispatch and interpret one transaction of ``kind``.

        Nothing is sent when the request fails validation or the session has
        no credentials; the failure goes straight to ``completion``.
        """
        try:
            request = build_request(
                kind,
                amount,
                reference,
                merchant_id,
                source=source,
                payment_token=payment_token,
            )
        except RequestValidationError as exc:
            logging.debug("Rejected %s request: %s", kind, exc.message)
            completion(None, exc.to_error())
            return

        def on_complete(result: TransportResult) -> None:
            completion(*interpret_result(result))

        try:
            self.session.dispatch(request.endpoint, request.payload, on_complete)
        except NotConfiguredError as exc:
            completion(None, PaymentError(code=ErrorCode.NOT_CONFIGURED, message=str(exc)))

    def payment(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        completion: Completion,
        *,
        card_details: Optional[CardDetails] = None,
        security_code: Optional[str] = None,
    ) -> None:
        self.execute(
            TransactionKind.PAYMENT,
            merchant_id,
            amount,
            reference,
            completion,
            source=_card_source(card_details, security_code),
        )

    def pre_auth(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        completion: Completion,
        *,
        card_details: Optional[CardDetails] = None,
        security_code: Optional[str] = None,
    ) -> None:
        self.execute(
            TransactionKind.PRE_AUTH,
            merchant_id,
            amount,
            reference,
            completion,
            source=_card_source(card_details, security_code),
        )

    def register_card(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        completion: Completion,
        *,
        card_details: Optional[CardDetails] = None,
        security_code: Optional[str] = None,
    ) -> None:
        """Register a card for later token transactions. No funds are captured."""
        self.execute(
            TransactionKind.REGISTER_CARD,
            merchant_id,
            amount,
            reference,
            completion,
            source=_card_source(card_details, security_code),
        )

    def token_payment(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        card_details: Optional[CardDetails],
        payment_token: Optional[PaymentToken],
        completion: Completion,
        *,
        security_code: Optional[str] = None,
    ) -> None:
        self.execute(
            TransactionKind.TOKEN_PAYMENT,
            merchant_id,
            amount,
            reference,
            completion,
            source=_card_source(card_details, security_code),
            payment_token=payment_token,
        )

    def token_pre_auth(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        card_details: Optional[CardDetails],
        payment_token: Optional[PaymentToken],
        completion: Completion,
        *,
        security_code: Optional[str] = None,
    ) -> None:
        self.execute(
            TransactionKind.TOKEN_PRE_AUTH,
            merchant_id,
            amount,
            reference,
            completion,
            source=_card_source(card_details, security_code),
            payment_token=payment_token,
        )

    def wallet_payment(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        credential: WalletCredential,
        completion: Completion,
    ) -> None:
        self.wallet.from_wallet_credential(
            credential, TransactionKind.PAYMENT, amount, reference, merchant_id, completion
        )

    def wallet_pre_auth(
        self,
        merchant_id: str,
        amount: Amount,
        reference: Reference,
        credential: WalletCredential,
        completion: Completion,
    ) -> None:
        self.wallet.from_wallet_credential(
            credential, TransactionKind.PRE_AUTH, amount, reference, merchant_id, completion
        )


def _card_source(
    card_details: Optional[CardDetails],
    security_code: Optional[str],
) -> Optional[CardInput]:
    if card_details is None:
        return None
    return CardInput(card_details=card_details, security_code=security_code)
