"""
Public, high-level helpers for running transactions against the gateway.
"""

from __future__ import annotations

import threading
from typing import Mapping, Optional, Tuple

import requests

from .core.client import PaymentClient
from .core.config import GatewayConfig, GatewayParameters, load_gateway_config
from .core.errors import ErrorCode, PaymentError
from .core.integrity import IntegrityChecker
from .core.models import Amount, PaymentToken, Reference, Response, TransactionKind
from .core.payloads import PaymentSource
from .core.session import RequestsTransport, Transport

__all__ = [
    "create_payment_client",
    "send_transaction",
]


def create_payment_client(
    *,
    config: Optional[GatewayConfig] = None,
    transport: Optional[Transport] = None,
    session: Optional[requests.Session] = None,
    integrity_checker: Optional[IntegrityChecker] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
    token: Optional[str] = None,
    secret: Optional[str] = None,
    merchant_id: Optional[str] = None,
    sandboxed: Optional[bool] = None,
    enforce_device_integrity: Optional[bool] = None,
    api_version: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> PaymentClient:
    """
    Construct a :class:`PaymentClient`.

    Callers can either supply a ready-made :class:`GatewayConfig` or let the
    helper assemble one from environment data. ``session`` is a
    :class:`requests.Session` to reuse; ``transport`` replaces HTTP entirely.
    """
    if transport is not None and session is not None:
        raise ValueError("Provide either a transport or a requests session, not both.")

    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            token,
            secret,
            merchant_id,
            sandboxed,
            enforce_device_integrity,
            api_version,
            timeout_seconds,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built GatewayConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_gateway_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
            token=token,
            secret=secret,
            merchant_id=merchant_id,
            sandboxed=sandboxed,
            enforce_device_integrity=enforce_device_integrity,
            api_version=api_version,
            timeout_seconds=timeout_seconds,
        )

    if transport is None and session is not None:
        transport = RequestsTransport(session, timeout=cfg.timeout_seconds)
    return PaymentClient.from_config(cfg, transport=transport, integrity_checker=integrity_checker)


def send_transaction(
    client: PaymentClient,
    kind: TransactionKind,
    merchant_id: str,
    amount: Amount,
    reference: Reference,
    *,
    source: Optional[PaymentSource] = None,
    payment_token: Optional[PaymentToken] = None,
    wait_seconds: Optional[float] = None,
) -> Tuple[Optional[Response], Optional[PaymentError]]:
    """
    Run one transaction and block until its completion fires.

    Intended for scripts; applications should pass their own completion to
    :meth:`PaymentClient.execute`. If ``wait_seconds`` elapses first a
    ``NetworkError`` is returned; the request itself is not cancelled.
    """
    done = threading.Event()
    outcome: dict = {}

    def completion(response: Optional[Response], error: Optional[PaymentError]) -> None:
        outcome["response"] = response
        outcome["error"] = error
        done.set()

    client.execute(
        kind,
        merchant_id,
        amount,
        reference,
        completion,
        source=source,
        payment_token=payment_token,
    )
    if not done.wait(wait_seconds):
        return None, PaymentError(
            code=ErrorCode.NETWORK,
            message=f"No gateway outcome within {wait_seconds} seconds",
        )
    return outcome["response"], outcome["error"]
