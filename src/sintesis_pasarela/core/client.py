"""
Client facade tying together transport, session lifecycle and rendering.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from .config import GatewayConfig
from .events import EventEmitter, EventKind
from .host import HeadlessHost, HostEnvironment
from .render import RenderDispatcher, RenderOptions, RenderResult
from .session import Clock, GatewaySession, SessionInfo, Sleep, StatusSnapshot
from .transport import Transport

__all__ = ["PasarelaClient"]

logger = logging.getLogger(__name__)

Observer = Callable[[Any], None]


class PasarelaClient:
    """
    Thin convenience wrapper around one gateway session.

    Observers can be passed as ``on_success``/``on_error``/``on_load``/
    ``on_token_expired`` or registered later with :meth:`on`.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        host: Optional[HostEnvironment] = None,
        session: Optional[requests.Session] = None,
        transport: Optional[Transport] = None,
        events: Optional[EventEmitter] = None,
        sleep: Optional[Sleep] = None,
        clock: Optional[Clock] = None,
        on_success: Optional[Observer] = None,
        on_error: Optional[Observer] = None,
        on_load: Optional[Observer] = None,
        on_token_expired: Optional[Observer] = None,
    ) -> None:
        self.config = config
        self.host = host or HeadlessHost()
        self.events = events or EventEmitter()
        self.transport = transport or Transport(
            config.base_url,
            timeout_seconds=config.timeout_seconds,
            session=session,
            debug=config.debug,
        )
        self.session = GatewaySession(
            config,
            self.transport,
            host=self.host,
            events=self.events,
            sleep=sleep,
            clock=clock,
        )
        self.dispatcher = RenderDispatcher(self.session)

        for kind, observer in (
            (EventKind.SUCCESS, on_success),
            (EventKind.ERROR, on_error),
            (EventKind.LOAD, on_load),
            (EventKind.TOKEN_EXPIRED, on_token_expired),
        ):
            if observer is not None:
                self.events.on(kind, observer)

        if config.debug:
            logger.debug(
                "Client created for %s (environment=%s, mode=%s)",
                config.base_url,
                self.host.name,
                config.mode.value,
            )

    def on(self, kind: EventKind | str, handler: Observer) -> Callable[[], None]:
        return self.events.on(kind, handler)

    def off(self, kind: EventKind | str, handler: Observer) -> None:
        self.events.off(kind, handler)

    async def init(self) -> Optional[SessionInfo]:
        return await self.session.init()

    async def refresh(self) -> Optional[SessionInfo]:
        return await self.session.refresh()

    def destroy(self) -> None:
        self.session.destroy()

    async def render(
        self,
        target: Any = None,
        options: Optional[RenderOptions] = None,
        **overrides: Any,
    ) -> RenderResult:
        """
        Render the checkout for ``target``.

        Keyword overrides (``mode``, ``width``, ``height``, ``style``,
        ``class_name``) are shorthand for building :class:`RenderOptions`.
        """
        if overrides:
            if options is not None:
                raise ValueError("Provide either RenderOptions or keyword overrides, not both.")
            options = RenderOptions(**overrides)
        return await self.dispatcher.render(target, options)

    def get_status(self) -> StatusSnapshot:
        return self.session.get_status()

    def get_embed_url(self) -> str:
        return self.session.get_embed_url()

    def get_access_token(self) -> str:
        return self.session.get_access_token()

    @property
    def environment(self) -> str:
        return self.host.name

    async def __aenter__(self) -> "PasarelaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.destroy()
