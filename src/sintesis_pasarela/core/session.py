"""
Session lifecycle: authenticate, obtain the embed link, keep it fresh.

A :class:`GatewaySession` moves through ``IDLE -> AUTHENTICATING ->
LINK_GENERATING -> READY``, or to ``FAILED`` once the retry budget is spent.
Every attempt restarts from authentication. After a successful run, a refresh
is scheduled on the host shortly before the access token expires.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Set, Tuple

from .._version import __version__
from .config import GatewayConfig
from .errors import (
    AuthenticationError,
    InitCancelledError,
    LinkGenerationError,
    NotInitializedError,
    PasarelaError,
)
from .events import ErrorEvent, EventEmitter, EventKind, SuccessEvent, TokenExpiredEvent
from .host import HeadlessHost, HostEnvironment
from .transport import Transport

__all__ = [
    "AUTHENTICATE_PATH",
    "GENERATE_LINK_PATH",
    "CancellationToken",
    "GatewaySession",
    "SessionInfo",
    "SessionState",
    "StatusSnapshot",
]

logger = logging.getLogger(__name__)

AUTHENTICATE_PATH = "/auth/authenticate"
GENERATE_LINK_PATH = "/embed/generate-link"

Sleep = Callable[[float], Awaitable[Any]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    LINK_GENERATING = "link_generating"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionInfo:
    access_token: str
    embed_url: str
    expires_in: int
    environment: str


@dataclass(frozen=True)
class StatusSnapshot:
    initialized: bool
    loading: bool
    has_access_token: bool
    has_embed_url: bool
    environment: str
    mode: str
    retry_count: int
    state: str
    version: str
    timestamp: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CancellationToken:
    """Flag shared between :meth:`GatewaySession.destroy` and one init run."""

    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise InitCancelledError("Initialization cancelled because the session was destroyed")


def _response_data(payload: Any) -> Tuple[bool, Mapping[str, Any], str]:
    if not isinstance(payload, Mapping):
        return False, {}, "invalid response"
    data = payload.get("data")
    if not isinstance(data, Mapping):
        data = {}
    message = payload.get("message") or "invalid response"
    return bool(payload.get("success")), data, str(message)


class GatewaySession:
    """
    Owns the access token and embed URL for one API key.

    Only one initialization runs at a time: calling :meth:`init` while one is
    in flight returns ``None`` immediately. The guard is held through retry
    backoff, so a scheduled refresh and a manual call never overlap on the
    network.
    """

    def __init__(
        self,
        config: GatewayConfig,
        transport: Transport,
        *,
        host: Optional[HostEnvironment] = None,
        events: Optional[EventEmitter] = None,
        sleep: Optional[Sleep] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.host = host or HeadlessHost()
        self.events = events or EventEmitter()
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or _utcnow

        self._state = SessionState.IDLE
        self._access_token: Optional[str] = None
        self._embed_url: Optional[str] = None
        self._expires_in = config.default_expires_in
        self._loading = False
        self._retry_count = 0
        self._last_error: Optional[PasarelaError] = None

        self._cancel_token: Optional[CancellationToken] = None
        self._refresh_handle: Any = None
        self._background: Set[asyncio.Task] = set()
        self._settled = asyncio.Event()
        self._settled.set()

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state is SessionState.READY

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def last_error(self) -> Optional[PasarelaError]:
        """The error that ended the most recent failed initialization."""
        return self._last_error

    @property
    def refresh_pending(self) -> bool:
        return self._refresh_handle is not None

    def get_embed_url(self) -> str:
        if self._state is not SessionState.READY or self._embed_url is None:
            raise NotInitializedError("Session is not initialized; call init() first")
        return self._embed_url

    def get_access_token(self) -> str:
        if self._state is not SessionState.READY or self._access_token is None:
            raise NotInitializedError("Session is not initialized; call init() first")
        return self._access_token

    def get_status(self) -> StatusSnapshot:
        return StatusSnapshot(
            initialized=self._state is SessionState.READY,
            loading=self._loading,
            has_access_token=bool(self._access_token),
            has_embed_url=bool(self._embed_url),
            environment=self.host.name,
            mode=self.config.mode.value,
            retry_count=self._retry_count,
            state=self._state.value,
            version=__version__,
            timestamp=self._timestamp(),
        )

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def _debug(self, message: str, *args: Any) -> None:
        if self.config.debug:
            logger.debug(message, *args)

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            self._debug("Session state %s -> %s", self._state.value, state.value)
        self._state = state

    def _clear(self) -> None:
        self._access_token = None
        self._embed_url = None
        self._expires_in = self.config.default_expires_in

    # --------------------------------------------------------------- lifecycle

    async def init(self) -> Optional[SessionInfo]:
        """
        Authenticate and generate the embed link, retrying with linear backoff.

        Returns the session details once ready, or ``None`` when another
        initialization is already running. Raises the last error after
        ``max_retries`` retries.
        """
        if self._state is SessionState.READY:
            self._debug("Session already initialized")
            return self._info()
        if self._loading:
            self._debug("Initialization already in progress")
            return None

        token = CancellationToken()
        self._cancel_token = token
        self._loading = True
        self._retry_count = 0
        self._last_error = None
        self._settled.clear()
        try:
            return await self._run(token)
        finally:
            if self._cancel_token is token:
                self._cancel_token = None
                self._loading = False
                self._settled.set()

    async def _run(self, token: CancellationToken) -> SessionInfo:
        while True:
            try:
                return await self._attempt(token)
            except InitCancelledError:
                raise
            except PasarelaError as exc:
                if token.cancelled:
                    raise InitCancelledError(
                        "Initialization cancelled because the session was destroyed"
                    ) from exc
                if self._retry_count >= self.config.max_retries:
                    self._clear()
                    self._last_error = exc
                    self._set_state(SessionState.FAILED)
                    logger.error("Gateway initialization failed: %s", exc)
                    self._report_error("Initialization failed", exc)
                    raise
                self._retry_count += 1
                delay_ms = self.config.retry_delay_ms * self._retry_count
                logger.warning(
                    "Gateway initialization failed (%s); retry %d/%d in %dms",
                    exc,
                    self._retry_count,
                    self.config.max_retries,
                    delay_ms,
                )
                await self._sleep(delay_ms / 1000)
                token.raise_if_cancelled()

    async def _attempt(self, token: CancellationToken) -> SessionInfo:
        self._clear()

        self._set_state(SessionState.AUTHENTICATING)
        access_token, expires_in = await self._authenticate()
        token.raise_if_cancelled()
        self._access_token = access_token
        self._expires_in = expires_in

        self._set_state(SessionState.LINK_GENERATING)
        embed_url = await self._generate_embed_link(access_token)
        token.raise_if_cancelled()
        self._embed_url = embed_url

        self._set_state(SessionState.READY)
        self._retry_count = 0
        self.schedule_refresh(expires_in)
        self._debug("Gateway session ready")
        info = SessionInfo(
            access_token=access_token,
            embed_url=embed_url,
            expires_in=expires_in,
            environment=self.host.name,
        )

        self.events.emit(
            EventKind.SUCCESS,
            SuccessEvent(
                access_token=access_token,
                embed_url=embed_url,
                environment=self.host.name,
                timestamp=self._timestamp(),
            ),
        )
        return info

    async def _authenticate(self) -> Tuple[str, int]:
        self._debug("Authenticating")
        payload = await self.transport.request(
            AUTHENTICATE_PATH,
            method="GET",
            headers={"X-API-KEY": self.config.api_key},
        )
        success, data, message = _response_data(payload)
        access_token = data.get("accessToken")
        if not success or not access_token:
            raise AuthenticationError(f"Authentication failed: {message}")
        return str(access_token), self._coerce_expires_in(data.get("expiresIn"))

    async def _generate_embed_link(self, access_token: str) -> str:
        self._debug("Generating embed link")
        payload = await self.transport.request(
            GENERATE_LINK_PATH,
            method="POST",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        success, data, message = _response_data(payload)
        embed_url = data.get("embedUrl")
        if not success or not embed_url:
            raise LinkGenerationError(f"Embed link generation failed: {message}")
        return str(embed_url)

    def _coerce_expires_in(self, raw: Any) -> int:
        if raw is None:
            return self.config.default_expires_in
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid expiresIn %r", raw)
            return self.config.default_expires_in

    def _info(self) -> SessionInfo:
        return SessionInfo(
            access_token=self.get_access_token(),
            embed_url=self.get_embed_url(),
            expires_in=self._expires_in,
            environment=self.host.name,
        )

    async def wait_settled(self) -> None:
        """Wait until no initialization is running."""
        await self._settled.wait()

    async def refresh(self) -> Optional[SessionInfo]:
        """
        Drop the current token and URL and initialize again.

        When an initialization is already running, its fresh result is used
        instead of starting a second one; ``None`` is returned if it does not
        reach the ready state.
        """
        if self._loading:
            self._debug("Refresh requested during initialization; waiting for it")
            await self.wait_settled()
            return self._info() if self._state is SessionState.READY else None
        self._debug("Refreshing gateway session")
        self._clear()
        self._retry_count = 0
        self._set_state(SessionState.IDLE)
        return await self.init()

    def destroy(self) -> None:
        """
        Cancel the pending refresh and any running initialization, then reset
        the session. Safe to call repeatedly.
        """
        self._debug("Destroying gateway session")
        self._cancel_refresh()
        if self._cancel_token is not None:
            self._cancel_token.cancel()
            self._cancel_token = None
        self._clear()
        self._loading = False
        self._retry_count = 0
        self._last_error = None
        self._set_state(SessionState.IDLE)
        self._settled.set()

    # ------------------------------------------------------------------ timers

    def schedule_refresh(self, expires_in: int) -> None:
        """Replace any pending refresh with one firing shortly before expiry."""
        delay_seconds = max(0, expires_in - self.config.refresh_margin_seconds)
        self._cancel_refresh()
        self._refresh_handle = self.host.schedule_delayed(
            self._on_refresh_due, delay_seconds * 1000
        )
        self._debug("Token refresh scheduled in %ds", delay_seconds)

    def _cancel_refresh(self) -> None:
        if self._refresh_handle is not None:
            self.host.cancel_delayed(self._refresh_handle)
            self._refresh_handle = None

    def _on_refresh_due(self) -> None:
        self._refresh_handle = None
        task = asyncio.ensure_future(self._auto_refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _auto_refresh(self) -> None:
        self._debug("Access token about to expire; refreshing")
        try:
            info = await self.refresh()
        except InitCancelledError:
            self._debug("Scheduled refresh cancelled")
            return
        except PasarelaError as exc:
            logger.error("Scheduled token refresh failed: %s", exc)
            return
        if info is None:
            return
        self.events.emit(
            EventKind.TOKEN_EXPIRED,
            TokenExpiredEvent(refreshed=True, new_token=info.access_token),
        )

    # ------------------------------------------------------------------ errors

    def _report_error(self, context: str, error: BaseException) -> None:
        self.events.emit(
            EventKind.ERROR,
            ErrorEvent(
                context=context,
                message=str(error),
                error=error,
                environment=self.host.name,
                timestamp=self._timestamp(),
                status=self.get_status().as_dict(),
            ),
        )
