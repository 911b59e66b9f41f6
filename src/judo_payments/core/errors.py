"""
Error taxonomy shared by the request builder and the transaction client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

__all__ = [
    "ConfigError",
    "DeviceIntegrityError",
    "ErrorCode",
    "NotConfiguredError",
    "PaymentError",
    "RequestValidationError",
]


class ErrorCode(str, Enum):
    DEVICE_INTEGRITY = "DeviceIntegrityError"
    PARAMETER = "ParameterError"
    MISSING_TOKEN_STATE = "MissingTokenState"
    USER_CANCELLED = "UserCancelled"
    NETWORK = "NetworkError"
    GATEWAY = "GatewayError"
    NOT_CONFIGURED = "NotConfigured"


@dataclass(frozen=True)
class PaymentError:
    """
    Failure delivered to a completion callback.

    ``category`` and ``message`` carry whatever the gateway reported, unchanged,
    so callers can show them to the user.
    """

    code: ErrorCode
    message: str
    category: Optional[str] = None
    status: Optional[int] = None
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_cancellation(self) -> bool:
        return self.code is ErrorCode.USER_CANCELLED

    @property
    def is_retryable(self) -> bool:
        return self.code in (ErrorCode.NETWORK, ErrorCode.GATEWAY)

    @classmethod
    def from_gateway_payload(
        cls, payload: Mapping[str, Any], *, status: Optional[int] = None
    ) -> "PaymentError":
        category = payload.get("category")
        message = payload.get("message") or "The gateway rejected the request"
        return cls(
            code=ErrorCode.GATEWAY,
            message=str(message),
            category=None if category is None else str(category),
            status=status,
            details=dict(payload),
        )


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


class DeviceIntegrityError(Exception):
    """Raised when integrity enforcement is on and the device looks tampered with."""

    code = ErrorCode.DEVICE_INTEGRITY


class NotConfiguredError(Exception):
    """Raised when a request is prepared before credentials were set."""

    code = ErrorCode.NOT_CONFIGURED


class RequestValidationError(ValueError):
    """Raised by the request builder; always converted to a :class:`PaymentError`."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def to_error(self) -> PaymentError:
        return PaymentError(code=self.code, message=self.message)
