"""
Public, high-level helpers for obtaining Sintesis checkout links.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests

from .core.client import PasarelaClient
from .core.config import (
    GatewayConfig,
    GatewayParameters,
    RenderMode,
    load_gateway_config,
)
from .core.host import HostEnvironment
from .core.render import ApiDataResult, RenderOptions

__all__ = [
    "create_client",
    "generate_checkout",
]


def _resolve_config(
    config: Optional[GatewayConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[GatewayParameters],
    explicit: Mapping[str, Any],
) -> GatewayConfig:
    if config is not None:
        extras = (overrides, base, parameters, *explicit.values())
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built GatewayConfig or individual parameters, not both."
            )
        return config
    return load_gateway_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        **explicit,
    )


def create_client(
    *,
    config: Optional[GatewayConfig] = None,
    host: Optional[HostEnvironment] = None,
    session: Optional[requests.Session] = None,
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
    **observers: Any,
) -> PasarelaClient:
    """
    Construct a :class:`PasarelaClient`.

    Callers can either supply a ready-made :class:`GatewayConfig` or let the
    helper assemble one from environment data. Remaining keyword arguments
    (``on_success`` and friends) are passed to the client as observers.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        explicit={
            "api_key": api_key,
            "base_url": base_url,
            "timeout_ms": timeout_ms,
            "mode": mode,
            "debug": debug,
            "max_retries": max_retries,
            "retry_delay_ms": retry_delay_ms,
        },
    )
    return PasarelaClient(cfg, host=host, session=session, **observers)


async def generate_checkout(
    *,
    config: Optional[GatewayConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_ms: Optional[int | str] = None,
    max_retries: Optional[int | str] = None,
    retry_delay_ms: Optional[int | str] = None,
) -> ApiDataResult:
    """
    Authenticate, generate an embed link and return it as raw API data.

    The session is destroyed before returning, so no refresh stays scheduled.
    """
    client = create_client(
        config=config,
        session=session,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        timeout_ms=timeout_ms,
        max_retries=max_retries,
        retry_delay_ms=retry_delay_ms,
    )
    async with client:
        result = await client.render(options=RenderOptions(mode=RenderMode.API_ONLY))
    return result  # type: ignore[return-value]
