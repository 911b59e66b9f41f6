"""
Configuration objects and helpers for the gateway client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .environment import build_environment
from .errors import ConfigError
from .models import CardConfiguration, CardNetwork
from .session import API_VERSION

__all__ = [
    "DEFAULT_CARD_NETWORKS",
    "GatewayConfig",
    "GatewayParameters",
    "load_gateway_config",
    "parse_card_networks",
]

DEFAULT_CARD_NETWORKS: Tuple[CardConfiguration, ...] = (
    CardConfiguration(CardNetwork.VISA, 16),
    CardConfiguration(CardNetwork.MASTERCARD, 16),
    CardConfiguration(CardNetwork.MAESTRO, 16),
    CardConfiguration(CardNetwork.AMEX, 15),
)

_PARAMETER_TO_ENV_KEY = {
    "token": "JUDO_API_TOKEN",
    "secret": "JUDO_API_SECRET",
    "merchant_id": "JUDO_ID",
    "sandboxed": "JUDO_SANDBOXED",
    "enforce_device_integrity": "JUDO_ENFORCE_DEVICE_INTEGRITY",
    "api_version": "JUDO_API_VERSION",
    "timeout_seconds": "JUDO_TIMEOUT_SECONDS",
    "accepted_card_networks": "JUDO_ACCEPTED_CARD_NETWORKS",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(
            f"{item.network.value}:{item.length}" if isinstance(item, CardConfiguration) else str(item)
            for item in value
        )
    return str(value)


def _parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got '{raw}'")


def _require(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def parse_card_networks(raw: str) -> Tuple[CardConfiguration, ...]:
    """Parse ``"VISA:16,AMEX:15"`` into card configurations."""
    configurations = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, length = chunk.partition(":")
        try:
            network = CardNetwork(name.strip().upper())
        except ValueError as exc:
            raise ConfigError(f"Unknown card network '{name}'") from exc
        if not sep or not length.strip().isdigit():
            raise ConfigError(f"Card network '{chunk}' must look like NETWORK:LENGTH")
        configurations.append(CardConfiguration(network, int(length)))
    return tuple(configurations)


@dataclass(frozen=True)
class GatewayParameters:
    """
    Explicit parameter bundle for constructing :class:`GatewayConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_gateway_config`.
    """

    token: Optional[str] = None
    secret: Optional[str] = None
    merchant_id: Optional[str] = None
    sandboxed: Optional[bool | str] = None
    enforce_device_integrity: Optional[bool | str] = None
    api_version: Optional[str] = None
    timeout_seconds: Optional[float | int | str] = None
    accepted_card_networks: Optional[Tuple[CardConfiguration, ...] | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[GatewayParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown gateway parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


@dataclass(frozen=True)
class GatewayConfig:
    token: str = field(repr=False)
    secret: str = field(repr=False)
    merchant_id: str
    sandboxed: bool = True
    enforce_device_integrity: bool = False
    api_version: str = API_VERSION
    timeout_seconds: float = 30
    accepted_card_networks: Tuple[CardConfiguration, ...] = DEFAULT_CARD_NETWORKS

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "GatewayConfig":
        token = _require(values, "JUDO_API_TOKEN")
        secret = _require(values, "JUDO_API_SECRET")
        merchant_id = _require(values, "JUDO_ID")

        sandboxed = _parse_bool(values.get("JUDO_SANDBOXED", "true"), "JUDO_SANDBOXED")
        enforce = _parse_bool(
            values.get("JUDO_ENFORCE_DEVICE_INTEGRITY", "false"),
            "JUDO_ENFORCE_DEVICE_INTEGRITY",
        )

        api_version = values.get("JUDO_API_VERSION", API_VERSION).strip() or API_VERSION

        timeout_raw = values.get("JUDO_TIMEOUT_SECONDS", "30")
        try:
            timeout_seconds = float(timeout_raw)
        except ValueError as exc:
            raise ConfigError(
                f"JUDO_TIMEOUT_SECONDS must be a number, got '{timeout_raw}'"
            ) from exc
        if timeout_seconds <= 0:
            raise ConfigError("JUDO_TIMEOUT_SECONDS must be greater than zero")

        networks_raw = values.get("JUDO_ACCEPTED_CARD_NETWORKS")
        accepted = parse_card_networks(networks_raw) if networks_raw else DEFAULT_CARD_NETWORKS

        return cls(
            token=token,
            secret=secret,
            merchant_id=merchant_id,
            sandboxed=sandboxed,
            enforce_device_integrity=enforce,
            api_version=api_version,
            timeout_seconds=timeout_seconds,
            accepted_card_networks=accepted,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[GatewayParameters] = None,
        token: Optional[str] = None,
        secret: Optional[str] = None,
        merchant_id: Optional[str] = None,
        sandboxed: Optional[bool | str] = None,
        enforce_device_integrity: Optional[bool | str] = None,
        api_version: Optional[str] = None,
        timeout_seconds: Optional[float | int | str] = None,
        accepted_card_networks: Optional[Tuple[CardConfiguration, ...] | str] = None,
    ) -> "GatewayConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "token": token,
                "secret": secret,
                "merchant_id": merchant_id,
                "sandboxed": sandboxed,
                "enforce_device_integrity": enforce_device_integrity,
                "api_version": api_version,
                "timeout_seconds": timeout_seconds,
                "accepted_card_networks": accepted_card_networks,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_gateway_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
    token: Optional[str] = None,
    secret: Optional[str] = None,
    merchant_id: Optional[str] = None,
    sandboxed: Optional[bool | str] = None,
    enforce_device_integrity: Optional[bool | str] = None,
    api_version: Optional[str] = None,
    timeout_seconds: Optional[float | int | str] = None,
    accepted_card_networks: Optional[Tuple[CardConfiguration, ...] | str] = None,
) -> GatewayConfig:
    """
    Convenience wrapper that mirrors :meth:`GatewayConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return GatewayConfig.from_env(
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
        accepted_card_networks=accepted_card_networks,
    )
