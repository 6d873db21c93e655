from __future__ import annotations

import logging

import pytest

from conftest import API_KEY
from sintesis_pasarela import (
    DEFAULT_BASE_URL,
    ConfigurationError,
    GatewayConfig,
    GatewayParameters,
    RenderMode,
    build_environment,
    load_env_file,
    load_gateway_config,
    validate_api_key,
)


def test_defaults_from_minimal_mapping():
    config = GatewayConfig.from_mapping({"SINTESIS_API_KEY": API_KEY})

    assert config.api_key == API_KEY
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout_ms == 30000
    assert config.timeout_seconds == 30
    assert config.mode is RenderMode.AUTO
    assert config.debug is False
    assert config.max_retries == 3
    assert config.retry_delay_ms == 1000


def test_mapping_values_are_parsed():
    config = GatewayConfig.from_mapping(
        {
            "SINTESIS_API_KEY": f"  {API_KEY}  ",
            "SINTESIS_BASE_URL": "https://gateway.test/api/",
            "SINTESIS_TIMEOUT_MS": "1500",
            "SINTESIS_MODE": "API-ONLY",
            "SINTESIS_DEBUG": "yes",
            "SINTESIS_MAX_RETRIES": "1",
        }
    )

    assert config.api_key == API_KEY
    assert config.base_url == "https://gateway.test/api"
    assert config.timeout_seconds == 1.5
    assert config.mode is RenderMode.API_ONLY
    assert config.debug is True
    assert config.max_retries == 1


@pytest.mark.parametrize(
    "values, message",
    [
        ({}, "must be provided"),
        ({"SINTESIS_API_KEY": "   "}, "must not be empty"),
        ({"SINTESIS_API_KEY": API_KEY, "SINTESIS_MODE": "canvas"}, "Unknown render mode"),
        ({"SINTESIS_API_KEY": API_KEY, "SINTESIS_TIMEOUT_MS": "soon"}, "must be an integer"),
        ({"SINTESIS_API_KEY": API_KEY, "SINTESIS_TIMEOUT_MS": "0"}, "greater than zero"),
        ({"SINTESIS_API_KEY": API_KEY, "SINTESIS_MAX_RETRIES": "-1"}, "must not be negative"),
        ({"SINTESIS_API_KEY": API_KEY, "SINTESIS_DEBUG": "maybe"}, "must be a boolean"),
    ],
)
def test_invalid_configuration_is_rejected(values, message):
    with pytest.raises(ConfigurationError, match=message):
        GatewayConfig.from_mapping(values)


def test_direct_construction_requires_api_key():
    with pytest.raises(ConfigurationError):
        GatewayConfig(api_key="")


def test_weak_key_heuristic_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="sintesis_pasarela.core.config"):
        config = GatewayConfig.from_mapping({"SINTESIS_API_KEY": "short"})

    assert config.api_key == "short"
    assert "does not look like" in caplog.text


def test_validate_api_key_heuristic():
    assert validate_api_key(API_KEY) is True
    assert validate_api_key("no-equals-sign-here") is False
    assert validate_api_key("a=b") is False
    assert validate_api_key(None) is False


def test_env_file_fills_gaps_and_overrides_win(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# gateway settings\n"
        f"SINTESIS_API_KEY='{API_KEY}'\n"
        "export SINTESIS_MODE=webview\n"
        "SINTESIS_TIMEOUT_MS=1000\n",
        encoding="utf-8",
    )

    config = load_gateway_config(
        env_file=str(env_file),
        base={"SINTESIS_TIMEOUT_MS": "2000"},
        overrides={"SINTESIS_DEBUG": "true"},
        max_retries=5,
    )

    assert config.api_key == API_KEY
    assert config.mode is RenderMode.WEBVIEW
    assert config.timeout_ms == 2000
    assert config.debug is True
    assert config.max_retries == 5


def test_parameters_bundle_becomes_overrides():
    parameters = GatewayParameters(api_key=API_KEY, mode=RenderMode.API_ONLY, debug=True)

    assert parameters.as_overrides() == {
        "SINTESIS_API_KEY": API_KEY,
        "SINTESIS_MODE": "api-only",
        "SINTESIS_DEBUG": "true",
    }
    config = load_gateway_config(env_file=None, base={}, parameters=parameters)
    assert config.mode is RenderMode.API_ONLY


def test_missing_env_file_is_ignored(tmp_path):
    environment = build_environment(
        env_file=str(tmp_path / "missing.env"),
        base={"SINTESIS_API_KEY": API_KEY},
    )

    assert environment.get("SINTESIS_API_KEY") == API_KEY
    assert environment.get("SINTESIS_MODE") is None


def test_load_env_file_preserves_existing_keys(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SINTESIS_API_KEY=from-file\nSINTESIS_MODE=iframe\n", encoding="utf-8")
    environ = {"SINTESIS_API_KEY": "from-env"}

    merged = load_env_file(str(env_file), environ=environ)

    assert merged == {"SINTESIS_API_KEY": "from-env", "SINTESIS_MODE": "iframe"}
