"""
Configuration objects and helpers for the gateway client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigurationError

__all__ = [
    "DEFAULT_BASE_URL",
    "ConfigurationError",
    "GatewayConfig",
    "GatewayParameters",
    "RenderMode",
    "load_gateway_config",
    "validate_api_key",
]

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://qa.sintesis.com.bo/pasarelapagos-msapi/embedded/api/v1"

_PARAMETER_TO_ENV_KEY = {
    "api_key": "SINTESIS_API_KEY",
    "base_url": "SINTESIS_BASE_URL",
    "timeout_ms": "SINTESIS_TIMEOUT_MS",
    "mode": "SINTESIS_MODE",
    "debug": "SINTESIS_DEBUG",
    "max_retries": "SINTESIS_MAX_RETRIES",
    "retry_delay_ms": "SINTESIS_RETRY_DELAY_MS",
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


class RenderMode(str, Enum):
    AUTO = "auto"
    IFRAME = "iframe"
    WEBVIEW = "webview"
    API_ONLY = "api-only"

    @classmethod
    def parse(cls, value: "RenderMode | str") -> "RenderMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(mode.value for mode in cls)
            raise ConfigurationError(
                f"Unknown render mode '{value}' (expected one of: {choices})"
            ) from exc


def validate_api_key(api_key: Any) -> bool:
    """
    Heuristic shape check: a string longer than ten characters containing ``=``.

    This is not a security boundary; the authenticate endpoint decides whether
    a key is valid.
    """
    return isinstance(api_key, str) and len(api_key) > 10 and "=" in api_key


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, RenderMode):
        return value.value
    return str(value)


def _parse_bool(raw: str, field_name: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{field_name} must be a boolean, got '{raw}'")


def _parse_non_negative_int(raw: str, field_name: str) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{field_name} must be an integer, got '{raw}'") from exc
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative")
    return value


def _normalize_api_key(raw_key: Optional[str]) -> str:
    if raw_key is None:
        raise ConfigurationError("SINTESIS_API_KEY must be provided")
    key = raw_key.strip()
    if not key:
        raise ConfigurationError("SINTESIS_API_KEY must not be empty")
    if not validate_api_key(key):
        logger.warning(
            "API key does not look like a Sintesis key; the gateway will decide"
        )
    return key


@dataclass(frozen=True)
class GatewayParameters:
    """
    Explicit parameter bundle for constructing :class:`GatewayConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_gateway_config`.
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_ms: Optional[int | str] = None
    mode: Optional[RenderMode | str] = None
    debug: Optional[bool | str] = None
    max_retries: Optional[int | str] = None
    retry_delay_ms: Optional[int | str] = None

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
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = 30000
    mode: RenderMode = RenderMode.AUTO
    debug: bool = False
    max_retries: int = 3
    retry_delay_ms: int = 1000
    refresh_margin_seconds: int = 60
    default_expires_in: int = 1800

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("api_key is required")
        object.__setattr__(self, "mode", RenderMode.parse(self.mode))
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "GatewayConfig":
        api_key = _normalize_api_key(values.get("SINTESIS_API_KEY"))
        base_url = values.get("SINTESIS_BASE_URL", DEFAULT_BASE_URL).strip()
        if not base_url:
            raise ConfigurationError("SINTESIS_BASE_URL must not be empty")

        timeout_ms = _parse_non_negative_int(
            values.get("SINTESIS_TIMEOUT_MS", "30000"), "SINTESIS_TIMEOUT_MS"
        )
        if timeout_ms == 0:
            raise ConfigurationError("SINTESIS_TIMEOUT_MS must be greater than zero")

        return cls(
            api_key=api_key,
            base_url=base_url,
            timeout_ms=timeout_ms,
            mode=RenderMode.parse(values.get("SINTESIS_MODE", "auto")),
            debug=_parse_bool(values.get("SINTESIS_DEBUG", "false"), "SINTESIS_DEBUG"),
            max_retries=_parse_non_negative_int(
                values.get("SINTESIS_MAX_RETRIES", "3"), "SINTESIS_MAX_RETRIES"
            ),
            retry_delay_ms=_parse_non_negative_int(
                values.get("SINTESIS_RETRY_DELAY_MS", "1000"), "SINTESIS_RETRY_DELAY_MS"
            ),
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[GatewayParameters] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_ms: Optional[int | str] = None,
        mode: Optional[RenderMode | str] = None,
        debug: Optional[bool | str] = None,
        max_retries: Optional[int | str] = None,
        retry_delay_ms: Optional[int | str] = None,
    ) -> "GatewayConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "api_key": api_key,
                "base_url": base_url,
                "timeout_ms": timeout_ms,
                "mode": mode,
                "debug": debug,
                "max_retries": max_retries,
                "retry_delay_ms": retry_delay_ms,
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
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_ms: Optional[int | str] = None,
    mode: Optional[RenderMode | str] = None,
    debug: Optional[bool | str] = None,
    max_retries: Optional[int | str] = None,
    retry_delay_ms: Optional[int | str] = None,
) -> GatewayConfig:
    """
    Convenience wrapper that mirrors :meth:`GatewayConfig.from_env`.

    The configuration can come from environment variables, a ``.env`` file,
    keyword arguments, or any combination of the three.
    """
    return GatewayConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        timeout_ms=timeout_ms,
        mode=mode,
        debug=debug,
        max_retries=max_retries,
        retry_delay_ms=retry_delay_ms,
    )
