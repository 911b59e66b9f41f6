"""
Bridge between device wallet credentials and the card transaction pipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .errors import ErrorCode, PaymentError
from .models import Amount, Reference, Response, TransactionKind
from .payloads import WalletCredential

if TYPE_CHECKING:
    from .client import PaymentClient

__all__ = ["WalletBridge"]


class WalletBridge:
    """
    Routes a wallet credential through :meth:`PaymentClient.execute`.

    The credential is never opened here; it travels to the gateway as-is.
    """

    def __init__(self, client: "PaymentClient") -> None:
        self.client = client

    def from_wallet_credential(
        self,
        credential: WalletCredential,
        kind: TransactionKind,
        amount: Amount,
        reference: Reference,
        merchant_id: str,
        completion: Callable[[Optional[Response], Optional[PaymentError]], None],
    ) -> None:
        if not isinstance(credential, WalletCredential):
            completion(None, PaymentError(code=ErrorCode.PARAMETER, message="A wallet credential is required"))
            return
        try:
            supported = TransactionKind(kind).supports_wallet
        except ValueError:
            supported = False
        if not supported:
            logging.debug("Rejected wallet credential for %s", kind)
            completion(
                None,
                PaymentError(
                    code=ErrorCode.PARAMETER,
                    message="Wallet credentials can only pay or pre-authorise",
                ),
            )
            return
        self.client.execute(kind, merchant_id, amount, reference, completion, source=credential)
