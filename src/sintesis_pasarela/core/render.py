"""
Render dispatch: turn a ready session into something a host can display.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

from .config import RenderMode
from .errors import NotInitializedError, UnsupportedModeError
from .events import ErrorEvent, EventKind, LoadEvent
from .host import HostEnvironment
from .session import GatewaySession

__all__ = [
    "ApiDataResult",
    "IframeResult",
    "RenderConfig",
    "RenderDispatcher",
    "RenderOptions",
    "RenderResult",
    "WebViewResult",
]

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAME = "sintesis-pasarela-iframe"


@dataclass(frozen=True)
class RenderOptions:
    mode: Optional[RenderMode | str] = None
    width: str = "100%"
    height: str = "600px"
    style: str = ""
    class_name: str = DEFAULT_CLASS_NAME
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderConfig:
    """Options after mode resolution, plus the host's target handle."""

    target: Any
    mode: RenderMode
    width: str
    height: str
    style: str
    class_name: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "width": self.width,
            "height": self.height,
            "style": self.style,
            "className": self.class_name,
            **dict(self.extra),
        }


@dataclass(frozen=True)
class IframeResult:
    kind: ClassVar[str] = "iframe"

    element: Any
    url: str

    @property
    def type(self) -> str:
        return self.kind


@dataclass(frozen=True)
class WebViewResult:
    kind: ClassVar[str] = "webview"

    url: str
    config: Dict[str, Any]
    environment: str

    @property
    def type(self) -> str:
        return self.kind


@dataclass(frozen=True)
class ApiDataResult:
    kind: ClassVar[str] = "api"

    access_token: str
    embed_url: str
    config: Dict[str, Any]
    environment: str
    timestamp: str

    @property
    def type(self) -> str:
        return self.kind

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "accessToken": self.access_token,
            "embedUrl": self.embed_url,
            "config": self.config,
            "environment": self.environment,
            "timestamp": self.timestamp,
        }


RenderResult = Union[IframeResult, WebViewResult, ApiDataResult]


class RenderDispatcher:
    """
    Packages the session's embed URL and token for the host.

    Surface creation is delegated to the session's host; this class only picks
    the mode and builds the result.
    """

    def __init__(self, session: GatewaySession) -> None:
        self.session = session

    @property
    def host(self) -> HostEnvironment:
        return self.session.host

    def resolve_mode(self, requested: Optional[RenderMode | str] = None) -> RenderMode:
        mode = RenderMode.parse(requested) if requested is not None else self.session.config.mode
        if mode is RenderMode.AUTO:
            mode = self.host.resolve_auto_mode()
        return mode

    async def ensure_ready(self) -> None:
        session = self.session
        if session.initialized:
            return
        if session.loading:
            await session.wait_settled()
        else:
            await session.init()
        if not session.initialized:
            if session.last_error is not None:
                raise session.last_error
            raise NotInitializedError("Gateway session could not be initialized")

    async def render(self, target: Any = None, options: Optional[RenderOptions] = None) -> RenderResult:
        options = options or RenderOptions()
        await self.ensure_ready()

        mode = self.resolve_mode(options.mode)
        config = RenderConfig(
            target=target,
            mode=mode,
            width=options.width,
            height=options.height,
            style=options.style,
            class_name=options.class_name,
            extra=dict(options.extra),
        )
        if self.session.config.debug:
            logger.debug("Rendering in %s mode", mode.value)

        if mode is RenderMode.IFRAME:
            result: RenderResult = await self._render_iframe(config)
        elif mode is RenderMode.WEBVIEW:
            result = self._render_webview(config)
        else:
            result = self._render_api_data(config)

        self.session.events.emit(EventKind.LOAD, LoadEvent(result=result))
        return result

    async def _render_iframe(self, config: RenderConfig) -> IframeResult:
        if not self.host.can_render_embedded_frame():
            raise UnsupportedModeError(
                f"iframe mode is not available in the {self.host.name} environment"
            )
        url = self.session.get_embed_url()
        try:
            element = self.host.create_embedded_surface(url, config)
            if inspect.isawaitable(element):
                element = await element
        except Exception as exc:
            logger.error("Error rendering iframe: %s", exc)
            self.session.events.emit(
                EventKind.ERROR,
                ErrorEvent(
                    context="Error rendering iframe",
                    message=str(exc),
                    error=exc,
                    environment=self.host.name,
                    timestamp=_now(),
                    status=self.session.get_status().as_dict(),
                ),
            )
            raise
        return IframeResult(element=element, url=url)

    def _render_webview(self, config: RenderConfig) -> WebViewResult:
        return WebViewResult(
            url=self.session.get_embed_url(),
            config={"width": config.width, "height": config.height, "style": config.style},
            environment=self.host.name,
        )

    def _render_api_data(self, config: RenderConfig) -> ApiDataResult:
        return ApiDataResult(
            access_token=self.session.get_access_token(),
            embed_url=self.session.get_embed_url(),
            config=config.as_dict(),
            environment=self.host.name,
            timestamp=_now(),
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
