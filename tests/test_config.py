"""Tests for layered configuration loading."""

import pytest

from judo_payments.core.config import (
    DEFAULT_CARD_NETWORKS,
    GatewayConfig,
    GatewayParameters,
    load_gateway_config,
    parse_card_networks,
)
from judo_payments.core.environment import build_environment, load_env_file
from judo_payments.core.errors import ConfigError
from judo_payments.core.models import CardConfiguration, CardNetwork

BASE = {"JUDO_API_TOKEN": "tok_1", "JUDO_API_SECRET": "sec_1", "JUDO_ID": "100200300"}


def test_defaults_apply_when_only_credentials_are_given():
    config = GatewayConfig.from_mapping(BASE)

    assert config.sandboxed is True
    assert config.enforce_device_integrity is False
    assert config.api_version == "5.0"
    assert config.timeout_seconds == 30
    assert config.accepted_card_networks == DEFAULT_CARD_NETWORKS


def test_secret_is_hidden_from_repr():
    assert "sec_1" not in repr(GatewayConfig.from_mapping(BASE))


@pytest.mark.parametrize("missing", sorted(BASE))
def test_required_keys(missing):
    values = {key: value for key, value in BASE.items() if key != missing}

    with pytest.raises(ConfigError):
        GatewayConfig.from_mapping(values)


def test_invalid_boolean_is_rejected():
    with pytest.raises(ConfigError):
        GatewayConfig.from_mapping({**BASE, "JUDO_SANDBOXED": "maybe"})


def test_invalid_timeout_is_rejected():
    with pytest.raises(ConfigError):
        GatewayConfig.from_mapping({**BASE, "JUDO_TIMEOUT_SECONDS": "0"})


def test_card_network_table_parses():
    assert parse_card_networks("visa:16, amex:15") == (
        CardConfiguration(CardNetwork.VISA, 16),
        CardConfiguration(CardNetwork.AMEX, 15),
    )


@pytest.mark.parametrize("raw", ["VISA", "PAYPAL:16", "VISA:x"])
def test_bad_card_network_table(raw):
    with pytest.raises(ConfigError):
        parse_card_networks(raw)


def test_keyword_arguments_beat_env_file_and_base(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# sandbox credentials\n"
        "JUDO_API_TOKEN=file-token\n"
        "export JUDO_API_SECRET='file-secret'\n"
        "JUDO_ID=file-id\n",
        encoding="utf-8",
    )

    config = load_gateway_config(
        env_file=str(env_file),
        base={"JUDO_ID": "base-id"},
        merchant_id="kwarg-id",
        sandboxed=False,
    )

    assert config.token == "file-token"
    assert config.secret == "file-secret"
    assert config.merchant_id == "kwarg-id"
    assert config.sandboxed is False


def test_base_wins_over_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("JUDO_ID=file-id\n", encoding="utf-8")

    environment = build_environment(env_file=str(env_file), base={"JUDO_ID": "base-id"})

    assert environment.get("JUDO_ID") == "base-id"


def test_parameters_bundle_and_overrides_merge():
    config = load_gateway_config(
        env_file=None,
        base={},
        overrides={"JUDO_API_TOKEN": "tok_1", "JUDO_API_SECRET": "sec_1"},
        parameters=GatewayParameters(
            merchant_id="100200300",
            timeout_seconds=5,
            accepted_card_networks=(CardConfiguration(CardNetwork.MAESTRO, 19),),
        ),
    )

    assert config.timeout_seconds == 5
    assert config.accepted_card_networks == (CardConfiguration(CardNetwork.MAESTRO, 19),)


def test_load_env_file_preserves_existing_keys(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("JUDO_ID=file-id\nJUDO_API_TOKEN=file-token\n", encoding="utf-8")
    environ = {"JUDO_ID": "already-set"}

    merged = load_env_file(str(env_file), environ=environ)

    assert merged["JUDO_ID"] == "already-set"
    assert merged["JUDO_API_TOKEN"] == "file-token"


def test_missing_env_file_is_ignored(tmp_path):
    environment = build_environment(env_file=str(tmp_path / "absent.env"), base=BASE)

    assert dict(environment.variables) == BASE
