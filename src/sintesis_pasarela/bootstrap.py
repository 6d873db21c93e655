"""
Auto-initialization for hosts that mark checkout containers declaratively.

A host scans its own surface for containers carrying the marker attributes
(``data-api-key``, ``data-mode``, ``data-width``, ``data-height``,
``data-debug``) and hands them to :func:`auto_render`. Each container gets an
independent client; one failing container does not stop the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .core.client import PasarelaClient
from .core.config import DEFAULT_BASE_URL, GatewayConfig, RenderMode
from .core.errors import PasarelaError
from .core.host import HostEnvironment
from .core.render import RenderOptions, RenderResult

__all__ = ["ContainerMarker", "RenderedContainer", "auto_render", "parse_marker"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerMarker:
    api_key: str
    mode: RenderMode = RenderMode.AUTO
    width: str = "100%"
    height: str = "600px"
    debug: bool = False

    def to_config(self, base_url: str = DEFAULT_BASE_URL) -> GatewayConfig:
        return GatewayConfig(
            api_key=self.api_key,
            base_url=base_url,
            mode=self.mode,
            debug=self.debug,
        )

    def to_options(self) -> RenderOptions:
        return RenderOptions(mode=self.mode, width=self.width, height=self.height)


@dataclass(frozen=True)
class RenderedContainer:
    target: Any
    client: PasarelaClient
    result: RenderResult


def parse_marker(attributes: Mapping[str, Optional[str]]) -> Optional[ContainerMarker]:
    """Return ``None`` when the container has no usable API key."""
    api_key = (attributes.get("data-api-key") or "").strip()
    if not api_key:
        return None
    return ContainerMarker(
        api_key=api_key,
        mode=RenderMode.parse(attributes.get("data-mode") or RenderMode.AUTO),
        width=attributes.get("data-width") or "100%",
        height=attributes.get("data-height") or "600px",
        debug="data-debug" in attributes,
    )


async def auto_render(
    containers: Iterable[Tuple[Any, Mapping[str, Optional[str]]]],
    *,
    host: Optional[HostEnvironment] = None,
    base_url: str = DEFAULT_BASE_URL,
    **client_kwargs: Any,
) -> List[RenderedContainer]:
    """
    Create a client for every marked container and render into it.

    The returned clients keep their token refresh scheduled; call
    ``client.destroy()`` when the container goes away.
    """
    rendered: List[RenderedContainer] = []
    for target, attributes in containers:
        try:
            marker = parse_marker(attributes)
        except PasarelaError as exc:
            logger.error("Skipping container %r: %s", target, exc)
            continue
        if marker is None:
            logger.warning("Container %r is missing the data-api-key attribute", target)
            continue

        client = PasarelaClient(marker.to_config(base_url), host=host, **client_kwargs)
        try:
            result = await client.render(target, marker.to_options())
        except PasarelaError as exc:
            logger.error("Auto-initialization failed for %r: %s", target, exc)
            client.destroy()
            continue
        rendered.append(RenderedContainer(target=target, client=client, result=result))
    return rendered
