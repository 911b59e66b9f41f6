"""
Authenticated gateway session and the HTTP transport it dispatches through.
"""

from __future__ import annotations

import base64
import json
import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

import requests

from .errors import ConfigError, NotConfiguredError

__all__ = [
    "API_VERSION",
    "PRODUCTION_BASE_URL",
    "SANDBOX_BASE_URL",
    "RequestsTransport",
    "Session",
    "Transport",
    "TransportResult",
    "derive_authorization_header",
]

SANDBOX_BASE_URL = "https://gw1.judopay-sandbox.com"
PRODUCTION_BASE_URL = "https://gw1.judopay.com"
API_VERSION = "5.0"


def derive_authorization_header(token: str, secret: str) -> str:
    # the gateway expects ISO-8859-1 credentials
    try:
        plain = f"{token}:{secret}".encode("latin-1")
    except UnicodeEncodeError as exc:
        raise ConfigError("API token and secret must only contain ISO-8859-1 characters") from exc
    return "Basic " + base64.b64encode(plain).decode("ascii")


@dataclass(frozen=True)
class TransportResult:
    """
    Outcome of one HTTP exchange.

    Exactly one of ``error`` or ``status_code`` is meaningful: ``error`` is set
    when no HTTP response was received at all.
    """

    status_code: Optional[int] = None
    body: Any = None
    text: str = ""
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and self.status_code < 400


TransportCallback = Callable[[TransportResult], None]


class Transport(Protocol):
    def dispatch(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
        on_complete: TransportCallback,
    ) -> None:
        ...


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return None


def _log_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logging.error("Transaction callback failed", exc_info=exc)


class RequestsTransport:
    """
    :class:`Transport` backed by a :class:`requests.Session`.

    Without an ``executor`` the exchange runs on the calling thread and
    ``on_complete`` fires before :meth:`dispatch` returns. With one, the exchange
    is submitted to it and the callback fires on the worker.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 30,
        executor: Optional[Executor] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.executor = executor

    def _exchange(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
    ) -> TransportResult:
        try:
            response = self.session.post(url, json=dict(body), headers=dict(headers), timeout=self.timeout)
        except requests.RequestException as exc:
            return TransportResult(error=exc)
        return TransportResult(
            status_code=response.status_code,
            body=_decode_body(response),
            text=response.text,
        )

    def _run(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
        on_complete: TransportCallback,
    ) -> None:
        try:
            result = self._exchange(url, headers, body)
        except Exception as exc:  # noqa: BLE001
            result = TransportResult(error=exc)
        on_complete(result)

    def dispatch(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
        on_complete: TransportCallback,
    ) -> None:
        if self.executor is None:
            self._run(url, headers, body, on_complete)
        else:
            future = self.executor.submit(self._run, url, headers, body, on_complete)
            future.add_done_callback(_log_failure)


class Session:
    """
    Credentials, sandbox mode and the transport used to reach the gateway.

    A session performs no I/O of its own beyond handing stamped requests to its
    transport.
    """

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        secret: Optional[str] = None,
        sandboxed: bool = False,
        transport: Optional[Transport] = None,
        api_version: str = API_VERSION,
        sandbox_base_url: str = SANDBOX_BASE_URL,
        production_base_url: str = PRODUCTION_BASE_URL,
    ) -> None:
        self.authorization_header: Optional[str] = None
        self.sandboxed = sandboxed
        self.transport: Transport = transport or RequestsTransport()
        self.api_version = api_version
        self.sandbox_base_url = sandbox_base_url.rstrip("/")
        self.production_base_url = production_base_url.rstrip("/")
        if token is not None and secret is not None:
            self.configure(token, secret)

    def configure(self, token: str, secret: str) -> None:
        self.authorization_header = derive_authorization_header(token, secret)

    def set_sandboxed(self, enabled: bool) -> None:
        self.sandboxed = bool(enabled)

    def is_configured(self) -> bool:
        return self.authorization_header is not None

    @property
    def base_url(self) -> str:
        return self.sandbox_base_url if self.sandboxed else self.production_base_url

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def headers(self) -> Dict[str, str]:
        if self.authorization_header is None:
            raise NotConfiguredError("Set a token and secret before making requests")
        return {
            "Authorization": self.authorization_header,
            "API-Version": self.api_version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def dispatch(
        self,
        endpoint: str,
        body: Mapping[str, Any],
        on_complete: TransportCallback,
    ) -> None:
        headers = self.headers()
        url = self.url_for(endpoint)
        logging.info("Submitting transaction to %s", url)
        self.transport.dispatch(url, headers, body, on_complete)
