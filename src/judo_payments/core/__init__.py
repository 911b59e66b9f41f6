"""
Core primitives for authenticating against the gateway and running
transactions.
"""

from .client import Completion, PaymentClient, interpret_result
from .config import GatewayConfig, GatewayParameters, load_gateway_config
from .environment import GatewayEnvironment, build_environment, load_env_file
from .errors import (
    ConfigError,
    DeviceIntegrityError,
    ErrorCode,
    NotConfiguredError,
    PaymentError,
    RequestValidationError,
)
from .integrity import FilesystemIntegrityChecker, IntegrityChecker
from .models import (
    Amount,
    CardConfiguration,
    CardDetails,
    CardNetwork,
    Currency,
    PaymentToken,
    Reference,
    Response,
    TransactionKind,
    TransactionResult,
)
from .payloads import CardInput, GatewayRequest, WalletCredential, build_request
from .session import RequestsTransport, Session, Transport, TransportResult
from .wallet import WalletBridge

__all__ = [
    "Amount",
    "CardConfiguration",
    "CardDetails",
    "CardInput",
    "CardNetwork",
    "Completion",
    "ConfigError",
    "Currency",
    "DeviceIntegrityError",
    "ErrorCode",
    "FilesystemIntegrityChecker",
    "GatewayConfig",
    "GatewayEnvironment",
    "GatewayParameters",
    "GatewayRequest",
    "IntegrityChecker",
    "NotConfiguredError",
    "PaymentClient",
    "PaymentError",
    "PaymentToken",
    "Reference",
    "RequestValidationError",
    "RequestsTransport",
    "Response",
    "Session",
    "TransactionKind",
    "TransactionResult",
    "Transport",
    "TransportResult",
    "WalletBridge",
    "WalletCredential",
    "build_environment",
    "build_request",
    "interpret_result",
    "load_env_file",
    "load_gateway_config",
]
