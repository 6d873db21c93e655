"""
Public facade for the Sintesis payment-gateway SDK.

The most useful pieces are re-exported here so integrators can
``from sintesis_pasarela import ...`` without navigating the package.
"""

from ._version import __version__
from .api import create_client, generate_checkout
from .bootstrap import ContainerMarker, RenderedContainer, auto_render, parse_marker
from .core import (
    DEFAULT_BASE_URL,
    ApiDataResult,
    AuthenticationError,
    ConfigurationError,
    ErrorEvent,
    EventEmitter,
    EventKind,
    FrameHost,
    GatewayConfig,
    GatewayParameters,
    GatewaySession,
    HeadlessHost,
    HostEnvironment,
    IframeResult,
    InitCancelledError,
    LinkGenerationError,
    LoadEvent,
    NetworkError,
    NotInitializedError,
    PasarelaClient,
    PasarelaError,
    RenderConfig,
    RenderDispatcher,
    RenderMode,
    RenderOptions,
    RenderResult,
    RequestTimeoutError,
    SessionInfo,
    SessionState,
    StatusSnapshot,
    SuccessEvent,
    TokenExpiredEvent,
    Transport,
    UnsupportedModeError,
    WebViewHost,
    WebViewResult,
    build_environment,
    load_env_file,
    load_gateway_config,
    validate_api_key,
)

__all__ = (
    "__version__",
    "DEFAULT_BASE_URL",
    "ApiDataResult",
    "AuthenticationError",
    "ConfigurationError",
    "ContainerMarker",
    "ErrorEvent",
    "EventEmitter",
    "EventKind",
    "FrameHost",
    "GatewayConfig",
    "GatewayParameters",
    "GatewaySession",
    "HeadlessHost",
    "HostEnvironment",
    "IframeResult",
    "InitCancelledError",
    "LinkGenerationError",
    "LoadEvent",
    "NetworkError",
    "NotInitializedError",
    "PasarelaClient",
    "PasarelaError",
    "RenderConfig",
    "RenderDispatcher",
    "RenderMode",
    "RenderOptions",
    "RenderResult",
    "RenderedContainer",
    "RequestTimeoutError",
    "SessionInfo",
    "SessionState",
    "StatusSnapshot",
    "SuccessEvent",
    "TokenExpiredEvent",
    "Transport",
    "UnsupportedModeError",
    "WebViewHost",
    "WebViewResult",
    "auto_render",
    "build_environment",
    "create_client",
    "generate_checkout",
    "load_env_file",
    "load_gateway_config",
    "parse_marker",
    "validate_api_key",
)
