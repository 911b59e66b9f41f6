"""
Public facade for the gateway transaction toolkit.

The module re-exports the most useful pieces for integrators so they can
``from judo_payments import ...`` without navigating the package.
"""

from .api import create_payment_client, send_transaction
from .core import (
    Amount,
    CardConfiguration,
    CardDetails,
    CardInput,
    CardNetwork,
    ConfigError,
    Currency,
    DeviceIntegrityError,
    ErrorCode,
    FilesystemIntegrityChecker,
    GatewayConfig,
    GatewayParameters,
    IntegrityChecker,
    PaymentClient,
    PaymentError,
    PaymentToken,
    Reference,
    RequestsTransport,
    Response,
    Session,
    TransactionKind,
    TransactionResult,
    Transport,
    TransportResult,
    WalletBridge,
    WalletCredential,
    build_request,
    load_gateway_config,
)

__all__ = (
    "Amount",
    "CardConfiguration",
    "CardDetails",
    "CardInput",
    "CardNetwork",
    "ConfigError",
    "Currency",
    "DeviceIntegrityError",
    "ErrorCode",
    "FilesystemIntegrityChecker",
    "GatewayConfig",
    "GatewayParameters",
    "IntegrityChecker",
    "PaymentClient",
    "PaymentError",
    "PaymentToken",
    "Reference",
    "RequestsTransport",
    "Response",
    "Session",
    "TransactionKind",
    "TransactionResult",
    "Transport",
    "TransportResult",
    "WalletBridge",
    "WalletCredential",
    "build_request",
    "create_payment_client",
    "load_gateway_config",
    "send_transaction",
)
