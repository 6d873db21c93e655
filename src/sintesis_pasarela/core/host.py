"""
Host environment capabilities.

The session and render layers never inspect the runtime themselves; they ask a
:class:`HostEnvironment` whether an embedded frame can be created, how ``auto``
should resolve, and how to schedule delayed callbacks.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional

from .config import RenderMode
from .errors import UnsupportedModeError

if TYPE_CHECKING:
    from .render import RenderConfig

__all__ = [
    "FrameHost",
    "HeadlessHost",
    "HostEnvironment",
    "SurfaceFactory",
    "WebViewHost",
]

SurfaceFactory = Callable[[str, "RenderConfig"], Any]


class HostEnvironment:
    """
    Base host. Subclasses override the capability hooks; delayed callbacks run
    on the currently running asyncio loop.
    """

    name = "unknown"
    auto_mode = RenderMode.API_ONLY

    def can_render_embedded_frame(self) -> bool:
        return False

    def create_embedded_surface(self, url: str, config: "RenderConfig") -> Any:
        raise UnsupportedModeError(
            f"Embedded frames are not available in the {self.name} environment"
        )

    def resolve_auto_mode(self) -> RenderMode:
        return self.auto_mode

    def schedule_delayed(self, fn: Callable[[], None], delay_ms: float) -> Any:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000, fn)

    def cancel_delayed(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HeadlessHost(HostEnvironment):
    """Scripts, servers and workers: no visual surface, ``auto`` yields raw data."""

    name = "headless"
    auto_mode = RenderMode.API_ONLY


class WebViewHost(HostEnvironment):
    """Native apps that load the embed URL in their own webview."""

    name = "mobile"
    auto_mode = RenderMode.WEBVIEW


class FrameHost(HostEnvironment):
    """
    A host with a document-like surface. ``surface_factory(url, config)``
    creates and attaches the frame and returns whatever handle the host uses
    for it.
    """

    name = "web"
    auto_mode = RenderMode.IFRAME

    def __init__(self, surface_factory: SurfaceFactory, *, name: Optional[str] = None) -> None:
        self._surface_factory = surface_factory
        if name is not None:
            self.name = name

    def can_render_embedded_frame(self) -> bool:
        return True

    def create_embedded_surface(self, url: str, config: "RenderConfig") -> Any:
        return self._surface_factory(url, config)
