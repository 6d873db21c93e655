"""
Core primitives that implement the gateway session lifecycle.
"""

from .client import PasarelaClient
from .config import (
    DEFAULT_BASE_URL,
    GatewayConfig,
    GatewayParameters,
    RenderMode,
    load_gateway_config,
    validate_api_key,
)
from .environment import GatewayEnvironment, build_environment, load_env_file
from .errors import (
    AuthenticationError,
    ConfigurationError,
    InitCancelledError,
    LinkGenerationError,
    NetworkError,
    NotInitializedError,
    PasarelaError,
    RequestTimeoutError,
    UnsupportedModeError,
)
from .events import (
    ErrorEvent,
    EventEmitter,
    EventKind,
    LoadEvent,
    SuccessEvent,
    TokenExpiredEvent,
)
from .host import FrameHost, HeadlessHost, HostEnvironment, WebViewHost
from .render import (
    ApiDataResult,
    IframeResult,
    RenderConfig,
    RenderDispatcher,
    RenderOptions,
    RenderResult,
    WebViewResult,
)
from .session import GatewaySession, SessionInfo, SessionState, StatusSnapshot
from .transport import Transport

__all__ = [
    "DEFAULT_BASE_URL",
    "ApiDataResult",
    "AuthenticationError",
    "ConfigurationError",
    "ErrorEvent",
    "EventEmitter",
    "EventKind",
    "FrameHost",
    "GatewayConfig",
    "GatewayEnvironment",
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
    "build_environment",
    "load_env_file",
    "load_gateway_config",
    "validate_api_key",
]
